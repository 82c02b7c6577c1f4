# Persona config loading and situation lookups
# The persona file names the active persona and lists its situations

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from app.types import PersonaConfig, Situation
from utils.constants import HookEvent, PathConstants, SpecialTrigger


class PersonaConfigError(Exception):
    """The persona config file is missing, malformed or invalid."""


def load_persona_config(config_path: Union[str, Path]) -> PersonaConfig:
    """Load and validate a persona config file.

    Raises:
        PersonaConfigError: on any read, parse or validation failure
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise PersonaConfigError(f"Cannot read persona config {config_path}: {e}") from e

    try:
        return PersonaConfig.model_validate(raw)
    except ValidationError as e:
        raise PersonaConfigError(f"Invalid persona config {config_path}: {e}") from e


def resolve_sound_path(
    config_dir: Union[str, Path], persona: str, sound_file: str
) -> str:
    """Full path of a persona sound: <config dir>/sounds/<persona>/<file>."""
    return str(Path(config_dir) / PathConstants.SOUNDS_DIR_NAME / persona / sound_file)


def situations_for_trigger(config: PersonaConfig, trigger: str) -> list[Situation]:
    return [s for s in config.situations if s.trigger == trigger]


def situation_by_name(config: PersonaConfig, name: str) -> Optional[Situation]:
    return next((s for s in config.situations if s.name == name), None)


def flag_names(config: PersonaConfig) -> list[str]:
    """Names of flag situations, which double as the valid flag tokens."""
    return [s.name for s in situations_for_trigger(config, SpecialTrigger.FLAG.value)]


def has_flag_situations(config: PersonaConfig) -> bool:
    return bool(situations_for_trigger(config, SpecialTrigger.FLAG.value))


def has_spam_situation(config: PersonaConfig) -> bool:
    return bool(situations_for_trigger(config, SpecialTrigger.SPAM.value))


def has_permission_timeout_situation(config: PersonaConfig) -> bool:
    return bool(
        situations_for_trigger(config, SpecialTrigger.PERMISSION_TIMEOUT.value)
    )


def required_hook_events(config: PersonaConfig) -> list[str]:
    """Hook events that must be registered for this persona to work.

    Synthetic triggers map onto the hook events that drive them.
    """
    synthetic = {
        SpecialTrigger.FLAG.value: [HookEvent.STOP.value],
        SpecialTrigger.SPAM.value: [HookEvent.USER_PROMPT_SUBMIT.value],
        SpecialTrigger.PERMISSION_TIMEOUT.value: [
            HookEvent.NOTIFICATION.value,
            HookEvent.USER_PROMPT_SUBMIT.value,
            HookEvent.SESSION_END.value,
        ],
    }
    events: list[str] = []
    for situation in config.situations:
        for event in synthetic.get(situation.trigger, [situation.trigger]):
            if event not in events:
                events.append(event)
    return events
