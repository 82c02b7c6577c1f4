#!/usr/bin/env python3
# claude-persona hook entry point
# Called by Claude Code hooks as:
#   hooks.py --event <HookEvent> [--flags] --config <persona.json>
# Reads the hook JSON from stdin, resolves a situation and plays a sound.
# Never blocks Claude and never exits non-zero.

import asyncio
import json
import os
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from app.persona import PersonaConfigError, load_persona_config
from app.resolver import handle_event
from app.types import HookInput
from config import config
from utils.colored_logger import setup_logger, configure_root_logging

configure_root_logging()
logger = setup_logger(__name__)


@dataclass
class HookArgs:
    event: str = ""
    flags: bool = False
    config: str = ""


def parse_hook_arguments(argv: list[str]) -> HookArgs:
    """
    Parse --event <name>, --flags and --config <path>.

    Accepts both ``--key value`` and ``--key=value``; unknown arguments are
    ignored so a newer settings.json never breaks the hook.
    """
    args = HookArgs()
    i = 0
    while i < len(argv):
        arg = argv[i]
        key, sep, value = arg.partition("=")

        if key in ("--event", "--config"):
            if not sep:
                i += 1
                value = argv[i] if i < len(argv) else ""
            setattr(args, key[2:], value)
        elif arg == "--flags":
            args.flags = True

        i += 1

    return args


def read_stdin() -> str:
    """Read the hook payload; an interactive terminal means there is none."""
    if sys.stdin is None or sys.stdin.isatty():
        return ""
    try:
        return sys.stdin.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Error reading from stdin: {e}")
        return ""


def parse_hook_input(raw: str, event_name: str) -> HookInput:
    """Parse the stdin payload, degrading to an empty input on any problem."""
    if not raw.strip():
        return HookInput(hook_event_name=event_name)

    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("hook payload is not a JSON object")
        hook_input = HookInput.model_validate(data)
    except (ValueError, ValidationError) as e:
        logger.debug(f"Invalid hook payload - {e}")
        return HookInput(hook_event_name=event_name)

    if not hook_input.hook_event_name:
        hook_input.hook_event_name = event_name
    return hook_input


def start_watchdog(timeout_seconds: float) -> threading.Timer:
    """Hard upper bound on the process lifetime, whatever collaborators do."""
    timer = threading.Timer(timeout_seconds, os._exit, args=(0,))
    timer.daemon = True
    timer.start()
    return timer


def run(argv: list[str], stdin_data: Optional[str] = None) -> None:
    """Handle one hook invocation."""
    args = parse_hook_arguments(argv)
    if not args.config:
        logger.debug("No --config given, nothing to do")
        return

    raw = read_stdin() if stdin_data is None else stdin_data
    hook_input = parse_hook_input(raw, args.event)

    try:
        persona = load_persona_config(args.config)
    except PersonaConfigError as e:
        logger.debug(str(e))
        return

    asyncio.run(
        handle_event(
            args.event,
            hook_input,
            persona,
            Path(args.config).parent,
            flags_mode=args.flags,
        )
    )


def main():
    """Main function to handle the hook process."""
    start_watchdog(config.handler_timeout_seconds)
    try:
        run(sys.argv[1:])
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
    sys.exit(0)


if __name__ == "__main__":
    main()
