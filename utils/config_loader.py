"""Config file loader - loads YAML configuration from ~/.claude/.claude-persona/config.yaml."""

import os
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from utils.constants import PathConstants


# Mapping from YAML keys to environment variable names
CONFIG_TO_ENV_MAP = {
    # Shared state location
    "state.dir": "CLAUDE_PERSONA_STATE_DIR",
    # Spam detection defaults
    "spam.threshold": "CLAUDE_PERSONA_SPAM_THRESHOLD",
    "spam.window_ms": "CLAUDE_PERSONA_SPAM_WINDOW_MS",
    # Focus-aware volume
    "volume.background": "CLAUDE_PERSONA_BACKGROUND_VOLUME",
    # Handler timing
    "handler.timeout_seconds": "CLAUDE_PERSONA_HANDLER_TIMEOUT",
    "handler.flag_grace_seconds": "CLAUDE_PERSONA_FLAG_GRACE",
    # Nagger
    "nagger.max_lifetime_seconds": "CLAUDE_PERSONA_NAG_MAX_LIFETIME",
    # Logging
    "log.outcomes": "CLAUDE_PERSONA_LOG",
    "log.level": "CLAUDE_PERSONA_LOG_LEVEL",
}


def flatten_dict(
    d: Dict[str, Any], parent_key: str = "", sep: str = "."
) -> Dict[str, Any]:
    """
    Flatten nested dictionary into dot-notation keys.

    Example:
        {"spam": {"threshold": 3}} -> {"spam.threshold": 3}
    """
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k
        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep=sep).items())
        else:
            items.append((new_key, v))
    return dict(items)


def get_config_path() -> Path:
    """Config file location, overridable with CLAUDE_PERSONA_CONFIG_FILE."""
    override = os.getenv("CLAUDE_PERSONA_CONFIG_FILE")
    return Path(override).expanduser() if override else PathConstants.CONFIG_FILE


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load YAML config file and return flattened key-value pairs.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Dictionary of flattened config values (empty when missing or invalid)
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        # Config is optional
        return {}

    if not isinstance(config, dict):
        return {}

    return flatten_dict(config)


def apply_config_to_env(config: Optional[Dict[str, Any]] = None) -> None:
    """
    Load config and set environment variables (only if not already set).

    Args:
        config: Pre-loaded config dict. If None, loads from default location.
    """
    if config is None:
        config = load_config()

    if not config:
        return

    for config_key, env_var in CONFIG_TO_ENV_MAP.items():
        if config_key in config and env_var not in os.environ:
            value = config[config_key]
            if value is None:
                continue

            if isinstance(value, bool):
                value = "true" if value else "false"
            else:
                value = str(value)

            os.environ[env_var] = value
