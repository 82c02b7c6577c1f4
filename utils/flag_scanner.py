"""
Persona flag detection in the assistant's last message.

Claude can signal a condition out of band by embedding a marker such as
``<!-- persona:found-bug -->`` in its reply. Only assistant text is scanned,
and a message that has already fired is never replayed.
"""

import re
from typing import Iterable, Optional

from utils.colored_logger import setup_logger
from utils.constants import FlagConstants, PathConstants
from utils.state_store import JsonStateStore, state_path
from utils.transcript_parser import get_last_assistant_text

logger = setup_logger(__name__)

FLAG_PATTERN = re.compile(FlagConstants.MARKER_PATTERN)


def get_flag_store() -> JsonStateStore:
    return JsonStateStore(state_path(PathConstants.FLAG_STAMP_FILE))


def make_fingerprint(text: str) -> str:
    """
    Cheap content identity: length plus both 64-character edges.

    Two messages sharing length and both edges collide; that is acceptable
    for deduplication.
    """
    edge = FlagConstants.FINGERPRINT_EDGE
    return f"{len(text)}:{text[:edge]}:{text[-edge:]}"


def find_first_flag(text: str, valid_flags: Iterable[str]) -> Optional[str]:
    """Return the first marker token (in text order) that is a valid flag."""
    valid = set(valid_flags)
    for match in FLAG_PATTERN.finditer(text):
        if match.group(1) in valid:
            return match.group(1)
    return None


def _load_fingerprint(store: JsonStateStore) -> Optional[str]:
    stamp = store.load(default=None)
    if isinstance(stamp, dict) and isinstance(stamp.get("fingerprint"), str):
        return stamp["fingerprint"]
    return None


def scan_for_flags(
    valid_flags: Iterable[str],
    last_assistant_message: Optional[str] = None,
    transcript_path: Optional[str] = None,
) -> Optional[str]:
    """
    Scan the last assistant message for a persona flag.

    The message comes from ``last_assistant_message`` when non-empty,
    otherwise from the transcript's most recent assistant entry.

    Args:
        valid_flags: Flag names configured in the active persona
        last_assistant_message: Message text from the hook payload
        transcript_path: Claude Code JSONL transcript used as fallback

    Returns:
        The matched flag name, or None when nothing matched or the same
        message was already processed
    """
    text = last_assistant_message or get_last_assistant_text(transcript_path)
    if not text:
        return None

    store = get_flag_store()
    fingerprint = make_fingerprint(text)
    if _load_fingerprint(store) == fingerprint:
        logger.debug("Assistant message already scanned, skipping")
        return None

    flag = find_first_flag(text, valid_flags)
    if flag is None:
        return None

    store.replace({"fingerprint": fingerprint})
    logger.info(f"Persona flag detected: {flag}")
    return flag
