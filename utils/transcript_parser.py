"""
Transcript reader for Claude Code JSONL conversation files.

Only the tail of the transcript is read: the flag scanner needs nothing but
the most recent assistant message.
"""

import json
import os
from pathlib import Path
from typing import Optional, Dict, Any, List

from utils.colored_logger import setup_logger
from utils.constants import FlagConstants

logger = setup_logger(__name__)


def extract_message_content(message_data: Dict[str, Any]) -> str:
    """
    Extract text content from a transcript message.

    Handles both string content and typed-block array content; text blocks
    are joined with single spaces, other block types are ignored.

    Args:
        message_data: Object carrying a ``content`` field

    Returns:
        Extracted text, empty if there is none
    """
    content = message_data.get("content")

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        text_parts = []
        for item in content:
            if isinstance(item, dict) and item.get("type") == "text":
                text = item.get("text", "")
                text_parts.append(text if isinstance(text, str) else "")
        return " ".join(text_parts)

    return ""


def parse_jsonl_line(line: str) -> Optional[Dict[str, Any]]:
    """
    Parse a single JSONL line safely.

    Returns:
        Parsed JSON object or None if blank, invalid or not an object
    """
    line = line.strip()
    if not line:
        return None
    try:
        entry = json.loads(line)
    except json.JSONDecodeError as e:
        logger.debug(f"Invalid JSON line: {e}")
        return None
    return entry if isinstance(entry, dict) else None


def read_transcript_tail(
    transcript_path: str, max_bytes: int = FlagConstants.TRANSCRIPT_TAIL_BYTES
) -> List[str]:
    """
    Read the last ``max_bytes`` of a transcript and split into lines.

    The first line may be cut in half; callers skip it as malformed.

    Returns:
        Lines in file order, empty list if the file is missing or unreadable
    """
    try:
        transcript_file = Path(transcript_path)
        size = transcript_file.stat().st_size
        with open(transcript_file, "rb") as f:
            f.seek(max(0, size - max_bytes), os.SEEK_SET)
            tail = f.read(max_bytes)
    except OSError as e:
        logger.debug(f"Cannot read transcript {transcript_path}: {e}")
        return []

    return [line for line in tail.decode("utf-8", errors="replace").split("\n") if line]


def _assistant_message(entry: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the object holding an assistant entry's content, if it is one.

    Accepts flat entries (``{"role": "assistant", "content": ...}``) and the
    Claude Code envelope (``{"type": "assistant", "message": {...}}``).
    """
    if entry.get("role") == "assistant":
        return entry

    message = entry.get("message")
    if isinstance(message, dict) and message.get("role") == "assistant":
        return message

    return None


def get_last_assistant_text(transcript_path: Optional[str]) -> str:
    """
    Text of the most recent assistant entry in a transcript.

    Args:
        transcript_path: Path to a Claude Code JSONL transcript

    Returns:
        The entry's text, or "" if the transcript is missing, empty,
        unreadable or has no assistant entry
    """
    if not transcript_path:
        return ""

    for line in reversed(read_transcript_tail(transcript_path)):
        entry = parse_jsonl_line(line)
        if entry is None:
            continue
        message = _assistant_message(entry)
        if message is not None:
            return extract_message_content(message)

    return ""
