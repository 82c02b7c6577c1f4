"""
File-backed JSON state shared between hook invocations.

Each logical purpose (spam window, flag fingerprint, nag state per session)
gets its own file so a corrupt file only affects its own feature. Reads are
full open-parse-close cycles and writes always replace the whole file. There
is no locking: concurrent hook processes race and the last writer wins.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Union

from config import config
from utils.colored_logger import setup_logger

logger = setup_logger(__name__)


def state_path(filename: str) -> Path:
    """Full path of a state file inside the configured state directory."""
    return Path(config.state_dir) / filename


class JsonStateStore:
    """Load-with-default / atomic-replace store over a single JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self, default: Any = None) -> Any:
        """Return the stored value, or ``default`` if missing, unreadable or corrupt."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return default
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable state file {self.path}: {e}")
            return default

    def replace(self, value: Any) -> bool:
        """Atomically rewrite the file with ``value``. Returns False on failure."""
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to write state file {self.path}: {e}")
            if tmp_path:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            return False

    def delete(self) -> None:
        """Remove the file; a missing file is not an error."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug(f"Failed to delete state file {self.path}: {e}")
