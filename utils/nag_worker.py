"""
Nag worker - detached process that plays escalating reminder sounds.

Usage: python -m utils.nag_worker <state-file-path>

Reads the NagState once, then for each timeout sleeps, re-checks the state
file and plays one random sound. Exits as soon as the file is gone (the user
responded), belongs to a newer campaign, or the safety deadline has passed.
Always exits 0.
"""

import asyncio
import random
import sys
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from pydantic import ValidationError

from app.types import NagState
from config import config
from utils.colored_logger import setup_logger, configure_root_logging
from utils.process_utils import detect_volume_for_pid
from utils.sound_player import pick_random, play_sound_async
from utils.state_store import JsonStateStore

logger = setup_logger(__name__)


def load_nag_state(store: JsonStateStore) -> Optional[NagState]:
    """Parse the state file, None if it is missing or invalid."""
    raw = store.load(default=None)
    if raw is None:
        return None
    try:
        return NagState.model_validate(raw)
    except ValidationError as e:
        logger.debug(f"Invalid nag state in {store.path}: {e}")
        return None


def _still_ours(store: JsonStateStore, campaign_id: str) -> bool:
    current = store.load(default=None)
    return isinstance(current, dict) and current.get("campaign_id") == campaign_id


async def run_worker(
    state_file: Union[str, Path],
    *,
    play: Callable[[str, float], Awaitable[None]] = play_sound_async,
    volume_for_pid: Callable[[Optional[int]], float] = detect_volume_for_pid,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.time,
    rng: Optional[random.Random] = None,
    max_lifetime_seconds: Optional[float] = None,
) -> int:
    """
    Run one reminder campaign to completion or cancellation.

    Returns:
        int: Number of reminders played
    """
    store = JsonStateStore(state_file)
    state = load_nag_state(store)
    if state is None:
        return 0

    if max_lifetime_seconds is None:
        max_lifetime_seconds = config.nag_max_lifetime_seconds
    deadline_ms = state.started_at + max_lifetime_seconds * 1000

    played = 0
    for timeout in state.timeouts:
        await sleep(timeout)

        if not store.exists():
            logger.info("Nag state removed, stopping reminders")
            return played

        if not _still_ours(store, state.campaign_id):
            logger.info("Nag campaign superseded, stopping reminders")
            return played

        if clock() * 1000 > deadline_ms:
            logger.info("Nag campaign exceeded its maximum lifetime")
            store.delete()
            return played

        sound = pick_random(state.sound_paths, rng)
        await play(sound, volume_for_pid(state.terminal_pid))
        played += 1

    if _still_ours(store, state.campaign_id):
        store.delete()
    return played


def main():
    """Entry point for the detached worker process."""
    configure_root_logging()

    if len(sys.argv) < 2:
        sys.exit(0)

    try:
        played = asyncio.run(run_worker(sys.argv[1]))
        logger.debug(f"Nag worker finished after {played} reminder(s)")
    except Exception as e:
        logger.error(f"Nag worker failed: {e}")

    sys.exit(0)


if __name__ == "__main__":
    main()
