"""Shared fixtures for claude-persona tests."""

import json
from pathlib import Path

import pytest

from app.types import PersonaConfig
from config import config


# ---------------------------------------------------------------------------
# State isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def state_dir(tmp_path, monkeypatch):
    """Point every state file at a private directory and disable the outcome log."""
    path = tmp_path / "state"
    path.mkdir()
    monkeypatch.setattr(config, "state_dir", path)
    monkeypatch.setattr(config, "outcome_log", None)
    return path


# ---------------------------------------------------------------------------
# Persona factories
# ---------------------------------------------------------------------------

def make_persona_data(*situations, persona="peasant"):
    """Build a raw persona config dict."""
    return {
        "persona": persona,
        "name": persona.title(),
        "description": "Test persona",
        "situations": list(situations),
    }


def make_persona(*situations, persona="peasant"):
    """Build a validated PersonaConfig."""
    return PersonaConfig.model_validate(make_persona_data(*situations, persona=persona))


def write_persona(directory: Path, data) -> Path:
    """Write a persona config file and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "active.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


def write_transcript(path: Path, *entries) -> Path:
    """Write JSONL transcript entries (strings are written verbatim)."""
    lines = [e if isinstance(e, str) else json.dumps(e) for e in entries]
    path.write_text("\n".join(lines) + "\n")
    return path


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------

class RecordingPlayer:
    """Async player that records (path, volume) instead of playing."""

    def __init__(self, on_play=None):
        self.calls = []
        self.on_play = on_play

    async def __call__(self, path, volume):
        self.calls.append((path, volume))
        if self.on_play:
            self.on_play(len(self.calls))


class RecordingSleep:
    """Async sleep that returns immediately and records durations."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


async def full_volume():
    return 1.0


@pytest.fixture
def player():
    return RecordingPlayer()


@pytest.fixture
def fake_sleep():
    return RecordingSleep()
