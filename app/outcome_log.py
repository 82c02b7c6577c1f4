"""
Outcome logger for handler decisions.

When CLAUDE_PERSONA_LOG names a file, each decision (situation played, flag
matched, nagger started or cancelled) is appended as one JSON line. This is
what end-to-end runs inspect, since the sounds themselves are not observable.
"""

import json
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from utils.colored_logger import setup_logger

logger = setup_logger(__name__)


class OutcomeLogger:
    """Append-only JSONL log of resolver outcomes; a no-op without a path."""

    def __init__(self, log_path: Optional[str] = None):
        self.log_path = Path(log_path).expanduser() if log_path else None

    def log(self, event: str, session_id: str, mode: str, **fields: Any) -> None:
        """
        Record one outcome.

        Args:
            event: Hook event name being handled
            session_id: Claude session id ("" when unknown)
            mode: normal, spam, flag or nagger
            **fields: situation/sound/volume, flag, or nagger details
        """
        if self.log_path is None:
            return

        entry: Dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "unix_time": time.time(),
            "event": event,
            "session_id": session_id,
            "mode": mode,
        }
        entry.update(fields)

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning(f"Failed to write outcome log {self.log_path}: {e}")
