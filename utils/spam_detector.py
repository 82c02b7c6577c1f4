"""Prompt spam detection over a sliding window of submission timestamps."""

import time
from typing import Optional

from config import config
from utils.colored_logger import setup_logger
from utils.constants import PathConstants
from utils.state_store import JsonStateStore, state_path

logger = setup_logger(__name__)


def get_spam_store() -> JsonStateStore:
    return JsonStateStore(state_path(PathConstants.SPAM_STAMP_FILE))


def _load_timestamps(store: JsonStateStore) -> list[int]:
    stamps = store.load(default=[])
    if not isinstance(stamps, list):
        return []
    # bool is an int subclass; never count it as an instant
    return [
        int(t) for t in stamps if isinstance(t, (int, float)) and not isinstance(t, bool)
    ]


def check_spam(
    threshold: Optional[int] = None,
    window_ms: Optional[int] = None,
    now_ms: Optional[int] = None,
) -> bool:
    """
    Record a prompt submission and report whether the user is spamming.

    Instants outside ``(now - window_ms, now]`` are dropped, ``now`` is
    appended and the window is rewritten in full. Every call records its
    instant, including calls that return False.

    Args:
        threshold: Submissions within the window that count as spam
        window_ms: Window length in milliseconds
        now_ms: Current time in epoch milliseconds (defaults to the wall clock)

    Returns:
        bool: True if the window holds at least ``threshold`` submissions
    """
    if threshold is None:
        threshold = config.spam_threshold
    if window_ms is None:
        window_ms = config.spam_window_ms
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    store = get_spam_store()
    stamps = [t for t in _load_timestamps(store) if now_ms - window_ms < t <= now_ms]
    stamps.append(now_ms)
    store.replace(stamps)

    is_spam = len(stamps) >= threshold
    logger.debug(
        f"Spam check: {len(stamps)} prompt(s) in {window_ms}ms (threshold {threshold}) -> {is_spam}"
    )
    return is_spam
