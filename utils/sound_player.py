"""
Sound playback for claude-persona via pygame.

Playback never raises: a missing file, a missing pygame or a mixer error
just means no sound. ``play_sound`` blocks until the clip finishes and is
what the nag worker awaits. The hook itself uses ``play_sound_detached``,
which hands the clip to a separate player process so it survives the hook's
exit.
"""

import asyncio
import os
import random
import sys
from pathlib import Path
from typing import Optional, Sequence, TypeVar

from utils.colored_logger import setup_logger, configure_root_logging
from utils.process_utils import spawn_detached

# pygame prints a banner to stdout on import; hook stdout must stay clean
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

try:
    import pygame

    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False
    pygame = None

logger = setup_logger(__name__)

T = TypeVar("T")


def pick_random(items: Sequence[T], rng: Optional[random.Random] = None) -> T:
    """Uniform random choice; ``rng`` makes it deterministic in tests."""
    return (rng or random).choice(items)


def play_sound(sound_path: str, volume: float = 1.0) -> bool:
    """
    Play a sound file and wait for it to finish.

    Args:
        sound_path: Full path of the sound file
        volume: Volume level 0.0-1.0

    Returns:
        bool: True if the sound played, False otherwise
    """
    if not PYGAME_AVAILABLE:
        logger.debug("pygame not available - install with 'pip install pygame'")
        return False

    if not Path(sound_path).is_file():
        logger.debug(f"Sound file not found: {sound_path}")
        return False

    try:
        pygame.mixer.init()
        pygame.mixer.music.load(sound_path)
        pygame.mixer.music.set_volume(max(0.0, min(volume, 1.0)))
        pygame.mixer.music.play()

        while pygame.mixer.music.get_busy():
            pygame.time.wait(100)

        pygame.mixer.quit()
        return True

    except Exception as e:
        logger.debug(f"Pygame audio error: {e}")
        try:
            pygame.mixer.quit()
        except Exception:
            pass
        return False


async def play_sound_async(sound_path: str, volume: float = 1.0) -> None:
    """Play a sound in a worker thread; completes (never raises) once done."""
    try:
        await asyncio.to_thread(play_sound, sound_path, volume)
    except Exception as e:
        logger.debug(f"Playback of {sound_path} failed: {e}")


def player_command(sound_path: str, volume: float) -> list[str]:
    """Command line of the standalone player process."""
    return [sys.executable, "-m", "utils.sound_player", sound_path, f"{volume:.2f}"]


def spawn_player(sound_path: str, volume: float = 1.0) -> bool:
    """
    Start playback in a detached process and return immediately.

    The hook process is bounded by a hard timeout, so the clip must not depend
    on it staying alive.

    Returns:
        bool: True if a player process was started
    """
    if not Path(sound_path).is_file():
        logger.debug(f"Sound file not found: {sound_path}")
        return False

    try:
        spawn_detached(player_command(sound_path, volume))
        return True
    except OSError as e:
        logger.warning(f"Failed to start player for {sound_path}: {e}")
        return False


async def play_sound_detached(sound_path: str, volume: float = 1.0) -> None:
    """Fire-and-forget playback for the hook process; never raises."""
    try:
        spawn_player(sound_path, volume)
    except Exception as e:
        logger.debug(f"Playback of {sound_path} failed: {e}")


def main():
    """Standalone player: ``python -m utils.sound_player <path> [volume]``."""
    configure_root_logging()

    if len(sys.argv) < 2:
        sys.exit(0)

    try:
        volume = float(sys.argv[2]) if len(sys.argv) > 2 else 1.0
    except ValueError:
        volume = 1.0

    play_sound(sys.argv[1], volume)
    sys.exit(0)


if __name__ == "__main__":
    main()
