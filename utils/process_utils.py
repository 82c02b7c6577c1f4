"""
Focus-aware volume detection for claude-persona.

Sounds play at full volume when the terminal running Claude is the frontmost
application and at the background volume otherwise. On unsupported platforms
or any error the volume is full.
"""

import os
import subprocess
import sys
from typing import Optional

import psutil

from config import config
from utils.colored_logger import setup_logger
from utils.constants import PathConstants, VolumeConstants

logger = setup_logger(__name__)

MACOS_FRONTMOST_SCRIPT = (
    'tell application "System Events" to unix id of first application process '
    "whose frontmost is true"
)


def _run(args: list[str]) -> Optional[str]:
    """Run a helper command and return its stripped stdout, None on failure."""
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=VolumeConstants.EXEC_TIMEOUT_SECONDS,
            check=True,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return result.stdout.strip()


def _parse_pid(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def get_frontmost_pid() -> Optional[int]:
    """
    Get the PID of the frontmost application.

    Uses osascript on macOS and xdotool on Linux (X11); None elsewhere or
    when the helper is unavailable.
    """
    if sys.platform == "darwin":
        return _parse_pid(_run(["osascript", "-e", MACOS_FRONTMOST_SCRIPT]))

    if sys.platform.startswith("linux"):
        window_id = _run(["xdotool", "getactivewindow"])
        if not window_id:
            return None
        return _parse_pid(_run(["xdotool", "getwindowpid", window_id]))

    return None


def get_parent_pid(pid: int) -> Optional[int]:
    """Parent PID of ``pid``, None if the process is gone or inaccessible."""
    try:
        ppid = psutil.Process(pid).ppid()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return None
    return ppid if ppid > 0 else None


def is_ancestor(start_pid: int, ancestor_pid: int) -> bool:
    """Walk up from ``start_pid`` looking for ``ancestor_pid`` (bounded hops)."""
    current = start_pid
    for _ in range(VolumeConstants.MAX_TREE_HOPS):
        if current == ancestor_pid:
            return True
        parent = get_parent_pid(current)
        if parent is None or parent == current:
            return False
        current = parent
    return False


def get_terminal_app_pid() -> Optional[int]:
    """
    Find the terminal application PID for the current process.

    Walks up until the process whose parent is PID 1 (launchd/init), which is
    typically the terminal emulator. Stored in the nag state so the detached
    worker can check focus later.
    """
    current = os.getpid()
    previous = current
    for _ in range(VolumeConstants.MAX_TREE_HOPS):
        parent = get_parent_pid(current)
        if parent is None or parent == current:
            return previous
        if parent == 1:
            return current
        previous = current
        current = parent
    return previous


def detect_volume() -> float:
    """Volume for the current process: full if it runs in the focused app."""
    try:
        front_pid = get_frontmost_pid()
        if front_pid is None:
            return VolumeConstants.FOCUSED
        if is_ancestor(os.getpid(), front_pid):
            return VolumeConstants.FOCUSED
        return config.background_volume
    except Exception as e:
        logger.debug(f"Volume detection failed: {e}")
        return VolumeConstants.FOCUSED


def detect_volume_for_pid(terminal_pid: Optional[int]) -> float:
    """
    Volume for a detached process, keyed on a previously captured terminal PID.

    Full volume when the frontmost application is the terminal or one of its
    descendants.
    """
    try:
        if terminal_pid is None:
            return VolumeConstants.FOCUSED
        front_pid = get_frontmost_pid()
        if front_pid is None:
            return VolumeConstants.FOCUSED
        if front_pid == terminal_pid or is_ancestor(front_pid, terminal_pid):
            return VolumeConstants.FOCUSED
        return config.background_volume
    except Exception as e:
        logger.debug(f"Volume detection for PID {terminal_pid} failed: {e}")
        return VolumeConstants.FOCUSED


def spawn_detached(args: list[str]) -> subprocess.Popen:
    """
    Start a helper process that outlives the hook.

    The child gets its own session and no stdio, and runs from the project
    root so ``python -m utils.<module>`` resolves.
    """
    env = os.environ.copy()
    project_dir = str(PathConstants.PROJECT_DIR)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (project_dir, env.get("PYTHONPATH", "")) if p
    )
    return subprocess.Popen(
        args,
        cwd=project_dir,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        close_fds=True,
        start_new_session=True,
    )
