# Situation resolver for claude-persona
# Maps one hook event (plus spam, flag and nagger signals) to the sound that plays

import asyncio
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from app.outcome_log import OutcomeLogger
from app.persona import (
    flag_names,
    has_spam_situation,
    resolve_sound_path,
    situation_by_name,
    situations_for_trigger,
)
from app.types import HookInput, PersonaConfig, Situation
from config import config
from utils.colored_logger import setup_logger
from utils.constants import HookEvent, NaggerConstants, OutcomeMode, SpecialTrigger
from utils.flag_scanner import scan_for_flags
from utils.nagger import cancel_nagger, restart_nagger
from utils.process_utils import detect_volume, get_terminal_app_pid
from utils.sound_player import pick_random, play_sound_detached
from utils.spam_detector import check_spam

logger = setup_logger(__name__)

Player = Callable[[str, float], Awaitable[None]]
VolumeDetector = Callable[[], Awaitable[float]]

SYNTHETIC_TRIGGERS = {t.value for t in SpecialTrigger}
NAG_CANCEL_EVENTS = {HookEvent.USER_PROMPT_SUBMIT.value, HookEvent.SESSION_END.value}


@dataclass
class Outcome:
    """One decision taken while handling an event."""

    mode: str
    situation: Optional[str] = None
    sound: Optional[str] = None
    volume: Optional[float] = None
    flag: Optional[str] = None
    nagger: Optional[str] = None


async def detect_volume_async() -> float:
    """Focus-aware volume without blocking the event loop."""
    return await asyncio.to_thread(detect_volume)


def is_permission_prompt(hook_input: HookInput) -> bool:
    """Whether a Notification asks the user for a permission decision.

    Falls back to the message text for payloads without notification_type.
    """
    if hook_input.notification_type:
        return hook_input.notification_type == NaggerConstants.PERMISSION_NOTIFICATION_TYPE
    return "permission" in (hook_input.message or "").lower()


class SituationResolver:
    """Resolves and plays the situation for a single hook invocation."""

    def __init__(
        self,
        persona: PersonaConfig,
        config_dir: Union[str, Path],
        *,
        rng: Optional[random.Random] = None,
        player: Player = play_sound_detached,
        volume_detector: VolumeDetector = detect_volume_async,
        outcome_log: Optional[OutcomeLogger] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        grace_seconds: Optional[float] = None,
    ):
        self.persona = persona
        self.config_dir = Path(config_dir)
        self.rng = rng
        self.player = player
        self.volume_detector = volume_detector
        self.outcome_log = outcome_log or OutcomeLogger(config.outcome_log)
        self.sleep = sleep
        self.grace_seconds = (
            config.flag_grace_seconds if grace_seconds is None else grace_seconds
        )

    def sound_path(self, sound_file: str) -> str:
        return resolve_sound_path(self.config_dir, self.persona.persona, sound_file)

    def _record(self, event: str, hook_input: HookInput, outcome: Outcome) -> Outcome:
        fields = {
            k: v
            for k, v in vars(outcome).items()
            if k != "mode" and v is not None
        }
        self.outcome_log.log(event, hook_input.session_id, outcome.mode, **fields)
        return outcome

    async def _play_situation(self, situation: Situation, mode: str, **extra) -> Outcome:
        sound = pick_random(situation.sounds, self.rng)
        path = self.sound_path(sound)
        volume = await self.volume_detector()
        logger.info(f"Playing {sound} for situation '{situation.name}' ({mode})")
        await self.player(path, volume)
        return Outcome(mode=mode, situation=situation.name, sound=sound, volume=volume, **extra)

    async def handle(
        self, event_name: str, hook_input: HookInput, flags_mode: bool = False
    ) -> list[Outcome]:
        """
        Handle one hook event.

        Args:
            event_name: Hook event name from the command line
            hook_input: Parsed stdin payload
            flags_mode: Scan the last assistant message for persona flags instead

        Returns:
            list[Outcome]: Decisions taken, empty when nothing happened
        """
        event_name = event_name or hook_input.hook_event_name
        if flags_mode:
            return await self._handle_flags(event_name, hook_input)

        outcomes = []
        nag_outcome = self._update_nagger(event_name, hook_input)
        if nag_outcome is not None:
            outcomes.append(self._record(event_name, hook_input, nag_outcome))

        outcome = await self._handle_normal(event_name, hook_input)
        if outcome is not None:
            outcomes.append(self._record(event_name, hook_input, outcome))
        return outcomes

    async def _handle_flags(self, event_name: str, hook_input: HookInput) -> list[Outcome]:
        valid_flags = flag_names(self.persona)
        if not valid_flags:
            return []
        if not (hook_input.last_assistant_message or hook_input.transcript_path):
            return []

        outcomes = []
        flag = scan_for_flags(
            valid_flags, hook_input.last_assistant_message, hook_input.transcript_path
        )
        situation = situation_by_name(self.persona, flag) if flag else None
        if situation is not None and situation.sounds:
            outcome = await self._play_situation(situation, OutcomeMode.FLAG, flag=flag)
            outcomes.append(self._record(event_name, hook_input, outcome))

        # Let playback get going before the process exits
        await self.sleep(self.grace_seconds)
        return outcomes

    def _update_nagger(self, event_name: str, hook_input: HookInput) -> Optional[Outcome]:
        situations = situations_for_trigger(
            self.persona, SpecialTrigger.PERMISSION_TIMEOUT.value
        )
        if not situations:
            return None

        session_id = hook_input.session_id
        if event_name == HookEvent.NOTIFICATION.value and is_permission_prompt(hook_input):
            situation = pick_random(situations, self.rng)
            started = restart_nagger(
                session_id,
                [self.sound_path(s) for s in situation.sounds],
                situation.timeouts or NaggerConstants.DEFAULT_TIMEOUTS,
                get_terminal_app_pid(),
            )
            if started:
                return Outcome(mode=OutcomeMode.NAGGER, situation=situation.name, nagger="started")
            return None

        if event_name in NAG_CANCEL_EVENTS and cancel_nagger(session_id):
            return Outcome(mode=OutcomeMode.NAGGER, nagger="cancelled")

        return None

    def _detect_spam_situation(self) -> Optional[Situation]:
        spam_situations = situations_for_trigger(self.persona, SpecialTrigger.SPAM.value)
        if not spam_situations:
            return None
        # Overrides come from the first spam situation in config order
        first = spam_situations[0]
        if not check_spam(first.spam_threshold, first.spam_window_ms):
            return None
        return pick_random(spam_situations, self.rng)

    async def _handle_normal(self, event_name: str, hook_input: HookInput) -> Optional[Outcome]:
        if event_name in SYNTHETIC_TRIGGERS:
            return None

        situation = None
        mode = OutcomeMode.NORMAL
        if event_name == HookEvent.USER_PROMPT_SUBMIT.value and has_spam_situation(
            self.persona
        ):
            situation = self._detect_spam_situation()
            if situation is not None:
                mode = OutcomeMode.SPAM

        if situation is None:
            matches = situations_for_trigger(self.persona, event_name)
            if matches:
                situation = pick_random(matches, self.rng)

        if situation is None or not situation.sounds:
            logger.debug(f"No situation for event {event_name}")
            return None

        return await self._play_situation(situation, mode)


async def handle_event(
    event_name: str,
    hook_input: HookInput,
    persona: PersonaConfig,
    config_dir: Union[str, Path],
    flags_mode: bool = False,
    **kwargs,
) -> list[Outcome]:
    """Resolve and play the situation for one hook event."""
    resolver = SituationResolver(persona, config_dir, **kwargs)
    return await resolver.handle(event_name, hook_input, flags_mode)
