"""
Centralized constants for claude-persona.

This module consolidates all system constants, enums, and default values
into a single location for better maintainability and type safety.
"""

import os
import tempfile
from pathlib import Path

# Re-export HookEvent for convenience
from utils.hooks_constants import HookEvent, SpecialTrigger

__all__ = [
    "HookEvent",
    "SpecialTrigger",
    "PathConstants",
    "SpamConstants",
    "FlagConstants",
    "NaggerConstants",
    "VolumeConstants",
    "HandlerConstants",
    "DateTimeConstants",
    "OutcomeMode",
]


class PathConstants:
    """Constants related to file locations and state file naming."""

    CONFIG_DIR = Path.home() / ".claude" / ".claude-persona"
    CONFIG_FILE = CONFIG_DIR / "config.yaml"
    DEFAULT_STATE_DIR = Path(tempfile.gettempdir())

    STATE_PREFIX = "claude-persona-"
    SPAM_STAMP_FILE = f"{STATE_PREFIX}stamps.json"
    FLAG_STAMP_FILE = f"{STATE_PREFIX}flag-stamp.json"
    NAG_PREFIX = f"{STATE_PREFIX}nag-"
    NAG_SUFFIX = ".json"

    SOUNDS_DIR_NAME = "sounds"

    # Project root, used as cwd for the detached nag worker
    PROJECT_DIR = Path(
        os.getenv("CLAUDE_PLUGIN_ROOT", Path(__file__).resolve().parent.parent)
    )


class SpamConstants:
    """Defaults for prompt spam detection."""

    DEFAULT_THRESHOLD = 5
    DEFAULT_WINDOW_MS = 10_000


class FlagConstants:
    """Constants for persona flag markers in assistant text."""

    MARKER_PATTERN = r"<!--\s*persona:(\S+)\s*-->"
    FINGERPRINT_EDGE = 64
    TRANSCRIPT_TAIL_BYTES = 30 * 1024


class NaggerConstants:
    """Constants for the escalating permission reminder."""

    MAX_LIFETIME_SECONDS = 10 * 60
    DEFAULT_TIMEOUTS = [30, 60, 120]
    PERMISSION_NOTIFICATION_TYPE = "permission_prompt"


class VolumeConstants:
    """Playback volume levels."""

    FOCUSED = 1.0
    BACKGROUND = 0.6
    EXEC_TIMEOUT_SECONDS = 1.5
    MAX_TREE_HOPS = 20


class HandlerConstants:
    """Timing constants for the hook handler process."""

    HARD_TIMEOUT_SECONDS = 5.0
    FLAG_GRACE_SECONDS = 1.5


class DateTimeConstants:
    """Constants related to date and time formatting."""

    ISO_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class OutcomeMode:
    """Values of the ``mode`` field in the outcome log."""

    NORMAL = "normal"
    SPAM = "spam"
    FLAG = "flag"
    NAGGER = "nagger"
