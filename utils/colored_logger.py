"""
Colored logging for claude-persona hook processes.

Hook processes write to stderr only: the stdout of some Claude Code hooks is
fed back into the conversation. LOG_FILE switches to file-only logging.
"""

import logging
import os
import re
import sys
from datetime import datetime
from pathlib import Path
from utils.constants import DateTimeConstants

DEFAULT_LEVEL = "WARNING"


def redact_sensitive_data(text: str) -> str:
    """
    Redact secrets that may leak into log messages through hook payloads.

    Redacts API keys starting with 'sk-', Bearer tokens and
    KEY=value style assignments with sensitive names.
    """
    if not text:
        return text

    text = re.sub(r"sk-[a-zA-Z0-9_-]{20,}", "sk-***REDACTED***", text)
    text = re.sub(
        r"Bearer\s+[a-zA-Z0-9_-]{20,}",
        "Bearer ***REDACTED***",
        text,
        flags=re.IGNORECASE,
    )
    text = re.sub(
        r'(API_KEY|TOKEN|SECRET|PASSWORD|APIKEY)(["\']?\s*[:=]\s*["\']?)([^\s"\',}\]]+)',
        r"\1\2***REDACTED***",
        text,
        flags=re.IGNORECASE,
    )

    return text


def get_log_level() -> int:
    """Resolve log level from CLAUDE_PERSONA_LOG_LEVEL (default WARNING)."""
    name = os.getenv("CLAUDE_PERSONA_LOG_LEVEL", DEFAULT_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


class ColoredFormatter(logging.Formatter):
    """Formatter with uvicorn-like spacing and per-level colors."""

    COLORS = {
        "DEBUG": "\033[36m",  # cyan
        "INFO": "\033[32m",  # green
        "WARNING": "\033[33m",  # yellow
        "ERROR": "\033[31m",  # red
        "CRITICAL": "\033[35m",  # magenta
    }
    RESET = "\033[0m"

    def format(self, record):
        level_color = self.COLORS.get(record.levelname, "")
        message = redact_sensitive_data(record.getMessage())
        return f"{level_color}{record.levelname}:{self.RESET}     {record.name}:{message}"


class PlainFormatter(logging.Formatter):
    """Plain formatter for file logging (no colors)."""

    def format(self, record):
        timestamp = datetime.fromtimestamp(record.created).strftime(
            DateTimeConstants.ISO_DATETIME_FORMAT
        )
        message = redact_sensitive_data(record.getMessage())
        return f"{timestamp} {record.levelname:8} [{os.getpid()}] {record.name}:{message}"


def setup_logger(name: str) -> logging.Logger:
    """
    Set up a module logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    # Handlers live on the root logger; module loggers only carry the level
    logger.propagate = True
    logger.setLevel(get_log_level())
    return logger


def setup_file_logging(log_file: str) -> str:
    """
    Attach a plain-format file handler to the root logger.

    Args:
        log_file: Path of the log file (parent directories are created)

    Returns:
        Absolute path to the log file
    """
    log_path = Path(log_file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == str(
            log_path.absolute()
        ):
            return str(log_path.absolute())

    file_handler = logging.FileHandler(log_path, mode="a")
    file_handler.setFormatter(PlainFormatter())
    root_logger.addHandler(file_handler)

    return str(log_path.absolute())


def configure_root_logging():
    """Configure root logging for a hook or worker process."""
    log_file = os.getenv("LOG_FILE")

    root_logger = logging.getLogger()
    if not any(
        isinstance(h.formatter, (ColoredFormatter, PlainFormatter))
        for h in root_logger.handlers
    ):
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        if log_file:
            try:
                setup_file_logging(log_file)
            except OSError:
                # Unwritable log location: fall back to stderr
                log_file = None

        if not log_file:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(ColoredFormatter())
            root_logger.addHandler(handler)

    root_logger.setLevel(get_log_level())
