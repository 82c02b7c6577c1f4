"""Type definitions for the application."""

import uuid
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Situation(BaseModel):
    """A named rule binding a trigger to candidate sounds."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    trigger: str = Field(min_length=1)
    description: str = ""
    sounds: list[str] = Field(default_factory=list)
    # spam only
    spam_threshold: Optional[int] = Field(default=None, alias="spamThreshold", gt=0)
    spam_window_ms: Optional[int] = Field(default=None, alias="spamWindowMs", gt=0)
    # permission_timeout only, seconds between reminders
    timeouts: Optional[list[int]] = None

    @field_validator("timeouts")
    @classmethod
    def timeouts_positive(cls, v: Optional[list[int]]) -> Optional[list[int]]:
        if v is not None and any(t <= 0 for t in v):
            raise ValueError("timeouts must be positive seconds")
        return v


class PersonaConfig(BaseModel):
    """The persona config file: which persona is active and its situations."""

    model_config = ConfigDict(extra="ignore")

    persona: str = Field(min_length=1)
    name: str = ""
    description: str = ""
    situations: list[Situation] = Field(min_length=1)


class HookInput(BaseModel):
    """JSON payload from Claude Code hooks via stdin.

    Unknown keys are dropped and a field of the wrong type reads as absent.
    """

    model_config = ConfigDict(extra="ignore")

    session_id: str = ""
    hook_event_name: str = ""
    transcript_path: Optional[str] = None
    cwd: Optional[str] = None
    permission_mode: Optional[str] = None
    # UserPromptSubmit
    prompt: Optional[str] = None
    # Notification
    message: Optional[str] = None
    title: Optional[str] = None
    notification_type: Optional[str] = None
    # Stop / SubagentStop
    last_assistant_message: Optional[str] = None
    stop_hook_active: Optional[bool] = None
    # SessionStart / SessionEnd
    source: Optional[str] = None

    @field_validator("session_id", "hook_event_name", mode="before")
    @classmethod
    def required_text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator(
        "transcript_path",
        "cwd",
        "permission_mode",
        "prompt",
        "message",
        "title",
        "notification_type",
        "last_assistant_message",
        "source",
        mode="before",
    )
    @classmethod
    def optional_text(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("stop_hook_active", mode="before")
    @classmethod
    def optional_flag(cls, v: Any) -> Optional[bool]:
        return v if isinstance(v, bool) else None


class NagState(BaseModel):
    """A reminder campaign handed from the hook to the detached nag worker."""

    sound_paths: list[str] = Field(min_length=1)
    timeouts: list[float] = Field(min_length=1)
    started_at: int  # epoch milliseconds
    terminal_pid: Optional[int] = None
    # Distinguishes a superseding campaign written to the same session file
    campaign_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
