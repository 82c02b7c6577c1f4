"""
Hook event and trigger constants for claude-persona.

This module defines all supported hook event types and the synthetic
situation triggers as Enums, preventing magic string usage throughout the system.
"""

from enum import Enum


class HookEvent(Enum):
    """
    Enumeration of all Claude Code hook events.

    These correspond to the hook events that Claude Code can trigger.
    Each enum member has a string value that matches the actual hook event name.
    """

    SESSION_START = "SessionStart"
    SESSION_END = "SessionEnd"
    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    POST_TOOL_USE_FAILURE = "PostToolUseFailure"
    NOTIFICATION = "Notification"
    USER_PROMPT_SUBMIT = "UserPromptSubmit"
    STOP = "Stop"
    SUBAGENT_START = "SubagentStart"
    SUBAGENT_STOP = "SubagentStop"
    TEAMMATE_IDLE = "TeammateIdle"
    TASK_COMPLETED = "TaskCompleted"
    PRE_COMPACT = "PreCompact"
    PERMISSION_REQUEST = "PermissionRequest"

    def __str__(self) -> str:
        """Return the string value of the hook event."""
        return self.value


class SpecialTrigger(Enum):
    """Synthetic triggers that are not hook events themselves."""

    FLAG = "flag"
    SPAM = "spam"
    PERMISSION_TIMEOUT = "permission_timeout"

    def __str__(self) -> str:
        return self.value
