# Configuration management for claude-persona
# Loads settings from environment variables, .env and the YAML config file with sensible defaults

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from utils.config_loader import apply_config_to_env
from utils.constants import (
    PathConstants,
    SpamConstants,
    NaggerConstants,
    VolumeConstants,
    HandlerConstants,
)

# Project directory - supports both plugin and standalone modes
PROJECT_DIR = PathConstants.PROJECT_DIR

# Load .env file from plugin directory first (if in plugin mode)
# Then load from current directory (standalone mode)
# Existing env vars are never overridden
if os.getenv("CLAUDE_PLUGIN_ROOT"):
    load_dotenv(PROJECT_DIR / ".env")
load_dotenv()

# YAML file fills in whatever the environment left unset
apply_config_to_env()


def parse_int_env(value: Optional[str], default: int) -> int:
    """Parse an integer environment variable, falling back on malformed input."""
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def parse_float_env(value: Optional[str], default: float) -> float:
    """Parse a float environment variable, falling back on malformed input."""
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Config:
    """Configuration settings loaded from environment variables."""

    state_dir: Path = PathConstants.DEFAULT_STATE_DIR
    spam_threshold: int = SpamConstants.DEFAULT_THRESHOLD
    spam_window_ms: int = SpamConstants.DEFAULT_WINDOW_MS
    background_volume: float = VolumeConstants.BACKGROUND
    handler_timeout_seconds: float = HandlerConstants.HARD_TIMEOUT_SECONDS
    flag_grace_seconds: float = HandlerConstants.FLAG_GRACE_SECONDS
    nag_max_lifetime_seconds: int = NaggerConstants.MAX_LIFETIME_SECONDS
    outcome_log: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables.

        Priority: environment > config.yaml > defaults. Non-positive numbers
        are rejected in favor of the default.
        """
        state_dir = os.getenv("CLAUDE_PERSONA_STATE_DIR", "").strip()

        def positive_int(name: str, default: int) -> int:
            value = parse_int_env(os.getenv(name), default)
            return value if value > 0 else default

        def positive_float(name: str, default: float) -> float:
            value = parse_float_env(os.getenv(name), default)
            return value if value > 0 else default

        background = parse_float_env(
            os.getenv("CLAUDE_PERSONA_BACKGROUND_VOLUME"), VolumeConstants.BACKGROUND
        )

        return cls(
            state_dir=(
                Path(state_dir).expanduser()
                if state_dir
                else PathConstants.DEFAULT_STATE_DIR
            ),
            spam_threshold=positive_int(
                "CLAUDE_PERSONA_SPAM_THRESHOLD", SpamConstants.DEFAULT_THRESHOLD
            ),
            spam_window_ms=positive_int(
                "CLAUDE_PERSONA_SPAM_WINDOW_MS", SpamConstants.DEFAULT_WINDOW_MS
            ),
            background_volume=min(max(background, 0.0), 1.0),
            handler_timeout_seconds=positive_float(
                "CLAUDE_PERSONA_HANDLER_TIMEOUT", HandlerConstants.HARD_TIMEOUT_SECONDS
            ),
            flag_grace_seconds=parse_float_env(
                os.getenv("CLAUDE_PERSONA_FLAG_GRACE"),
                HandlerConstants.FLAG_GRACE_SECONDS,
            ),
            nag_max_lifetime_seconds=positive_int(
                "CLAUDE_PERSONA_NAG_MAX_LIFETIME", NaggerConstants.MAX_LIFETIME_SECONDS
            ),
            outcome_log=os.getenv("CLAUDE_PERSONA_LOG") or None,
        )


config = Config.from_env()
