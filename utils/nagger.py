"""
Escalating permission reminders - coordinator side.

The hook process writes a self-contained NagState file and hands it to a
detached worker (``utils.nag_worker``). The file's existence is the only
synchronization: deleting it cancels the campaign at the worker's next tick.
"""

import re
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from app.types import NagState
from config import config
from utils.colored_logger import setup_logger
from utils.constants import PathConstants
from utils.process_utils import spawn_detached
from utils.state_store import JsonStateStore, state_path

logger = setup_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def nag_state_path(session_id: str) -> Path:
    """Deterministic nag state file path for a session."""
    safe_id = _UNSAFE_CHARS.sub("_", session_id) or "default"
    return state_path(f"{PathConstants.NAG_PREFIX}{safe_id}{PathConstants.NAG_SUFFIX}")


def spawn_worker(state_file: Path) -> None:
    """Launch the nag worker fully detached from the hook process."""
    spawn_detached([sys.executable, "-m", "utils.nag_worker", str(state_file)])


def start_nagger(
    session_id: str,
    sound_paths: Sequence[str],
    timeouts: Sequence[float],
    terminal_pid: Optional[int] = None,
) -> bool:
    """
    Start a background nagger for a session.

    Args:
        session_id: Claude session the reminders belong to
        sound_paths: Full paths of candidate reminder sounds
        timeouts: Seconds to wait before each reminder, in order
        terminal_pid: Terminal app PID for focus-aware volume

    Returns:
        bool: True if a worker was launched
    """
    if not sound_paths or not timeouts:
        return False

    state = NagState(
        sound_paths=list(sound_paths),
        timeouts=list(timeouts),
        started_at=int(time.time() * 1000),
        terminal_pid=terminal_pid,
    )
    state_file = nag_state_path(session_id)
    if not JsonStateStore(state_file).replace(state.model_dump()):
        return False

    try:
        spawn_worker(state_file)
    except OSError as e:
        logger.warning(f"Failed to spawn nag worker: {e}")
        JsonStateStore(state_file).delete()
        return False

    logger.info(
        f"Nagger started for session {session_id}: {len(state.timeouts)} reminder(s)"
    )
    return True


def cancel_nagger(session_id: str) -> bool:
    """
    Cancel the session's nagger by deleting its state file.

    Returns:
        bool: True if a state file was present
    """
    store = JsonStateStore(nag_state_path(session_id))
    existed = store.exists()
    store.delete()
    if existed:
        logger.info(f"Nagger cancelled for session {session_id}")
    return existed


def restart_nagger(
    session_id: str,
    sound_paths: Sequence[str],
    timeouts: Sequence[float],
    terminal_pid: Optional[int] = None,
) -> bool:
    """Replace any running campaign for the session with a new one."""
    cancel_nagger(session_id)
    return start_nagger(session_id, sound_paths, timeouts, terminal_pid)


def list_nag_state_files() -> list[Path]:
    """All nag state files in the state directory."""
    state_dir = Path(config.state_dir)
    try:
        return sorted(
            state_dir.glob(f"{PathConstants.NAG_PREFIX}*{PathConstants.NAG_SUFFIX}")
        )
    except OSError:
        return []


def clear_all_naggers() -> int:
    """Cancel every campaign on this machine. Returns how many were removed."""
    removed = 0
    for path in list_nag_state_files():
        JsonStateStore(path).delete()
        removed += 1
    return removed
