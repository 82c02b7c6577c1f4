"""Tests for situation resolution (app/resolver.py)."""

import json
import random

import pytest

from conftest import full_volume, make_persona, write_transcript

import app.resolver as resolver
from app.outcome_log import OutcomeLogger
from app.resolver import handle_event, is_permission_prompt
from app.types import HookInput
from utils.nagger import nag_state_path

SESSION = "resolver-session"

STOP = {"name": "task-complete", "trigger": "Stop", "sounds": ["a.mp3", "b.mp3"]}
PROMPT = {"name": "prompt-submitted", "trigger": "UserPromptSubmit", "sounds": ["p.mp3"]}
SPAM = {
    "name": "spam-detected",
    "trigger": "spam",
    "sounds": ["spam.mp3"],
    "spamThreshold": 5,
    "spamWindowMs": 10_000,
}
NOTIFICATION = {"name": "notification", "trigger": "Notification", "sounds": ["n.mp3"]}
NAG = {
    "name": "permission-nag",
    "trigger": "permission_timeout",
    "sounds": ["nag1.mp3", "nag2.mp3"],
    "timeouts": [15, 30],
}
FLAG = {"name": "found-bug", "trigger": "flag", "sounds": ["bug.mp3"]}


@pytest.fixture
def nag_calls(monkeypatch):
    """Capture nagger restarts without spawning the worker."""
    calls = []

    def fake_restart(session_id, sound_paths, timeouts, terminal_pid=None):
        calls.append((session_id, list(sound_paths), list(timeouts)))
        nag_state_path(session_id).write_text("{}")
        return True

    monkeypatch.setattr(resolver, "restart_nagger", fake_restart)
    monkeypatch.setattr(resolver, "get_terminal_app_pid", lambda: 999)
    return calls


def hook(event, **fields):
    return HookInput(session_id=SESSION, hook_event_name=event, **fields)


async def fire(persona, event, player, tmp_path, flags=False, rng=None, payload=None, **kwargs):
    return await handle_event(
        event,
        hook(event, **(payload or {})),
        persona,
        tmp_path,
        flags_mode=flags,
        rng=rng or random.Random(0),
        player=player,
        volume_detector=full_volume,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Normal resolution
# ---------------------------------------------------------------------------

async def test_unmatched_event_plays_nothing(player, tmp_path):
    outcomes = await fire(make_persona(STOP), "PreToolUse", player, tmp_path)
    assert outcomes == []
    assert player.calls == []


async def test_stop_only_ever_plays_its_own_sounds(player, tmp_path):
    persona = make_persona(STOP, PROMPT)
    rng = random.Random(42)
    expected = {
        str(tmp_path / "sounds" / "peasant" / "a.mp3"),
        str(tmp_path / "sounds" / "peasant" / "b.mp3"),
    }

    for _ in range(50):
        await fire(persona, "Stop", player, tmp_path, rng=rng)

    played = {path for path, _ in player.calls}
    assert played == expected


async def test_selection_among_same_trigger_situations_is_random(player, tmp_path):
    other = {"name": "task-complete-2", "trigger": "Stop", "sounds": ["c.mp3"]}
    persona = make_persona(STOP, other)
    rng = random.Random(3)

    names = set()
    for _ in range(50):
        outcomes = await fire(persona, "Stop", player, tmp_path, rng=rng)
        names.add(outcomes[0].situation)

    assert names == {"task-complete", "task-complete-2"}


async def test_situation_without_sounds_is_a_noop(player, tmp_path):
    persona = make_persona({"name": "silent", "trigger": "Stop", "sounds": []})
    assert await fire(persona, "Stop", player, tmp_path) == []
    assert player.calls == []


async def test_synthetic_trigger_names_are_not_events(player, tmp_path):
    persona = make_persona(SPAM, FLAG)
    assert await fire(persona, "spam", player, tmp_path) == []
    assert await fire(persona, "flag", player, tmp_path) == []
    assert player.calls == []


async def test_event_name_falls_back_to_payload(player, tmp_path):
    outcomes = await handle_event(
        "",
        hook("Stop"),
        make_persona(STOP),
        tmp_path,
        player=player,
        volume_detector=full_volume,
    )
    assert outcomes[0].situation == "task-complete"


# ---------------------------------------------------------------------------
# Spam
# ---------------------------------------------------------------------------

async def test_fifth_rapid_prompt_fires_spam(player, tmp_path):
    persona = make_persona(PROMPT, SPAM)

    results = []
    for _ in range(5):
        outcomes = await fire(persona, "UserPromptSubmit", player, tmp_path)
        results.append((outcomes[0].mode, outcomes[0].situation))

    assert results[:4] == [("normal", "prompt-submitted")] * 4
    assert results[4] == ("spam", "spam-detected")
    assert player.calls[-1][0].endswith("spam.mp3")


async def test_spam_not_checked_for_other_events(player, tmp_path, state_dir):
    persona = make_persona(STOP, SPAM)
    await fire(persona, "Stop", player, tmp_path)
    assert not (state_dir / "claude-persona-stamps.json").exists()


async def test_spam_uses_config_defaults_without_overrides(player, tmp_path):
    spam = {"name": "spam-detected", "trigger": "spam", "sounds": ["spam.mp3"]}
    persona = make_persona(PROMPT, spam)

    modes = []
    for _ in range(5):
        outcomes = await fire(persona, "UserPromptSubmit", player, tmp_path)
        modes.append(outcomes[0].mode)

    assert modes == ["normal"] * 4 + ["spam"]


# ---------------------------------------------------------------------------
# Nagger
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "payload,expected",
    [
        ({"notification_type": "permission_prompt"}, True),
        ({"notification_type": "idle_prompt"}, False),
        ({"message": "Claude needs your permission to use Bash"}, True),
        ({"message": "Claude is waiting for your input"}, False),
        ({}, False),
    ],
)
def test_is_permission_prompt(payload, expected):
    assert is_permission_prompt(hook("Notification", **payload)) is expected


async def test_permission_notification_starts_nagger_and_plays_notification(
    player, tmp_path, nag_calls
):
    persona = make_persona(NOTIFICATION, NAG)
    outcomes = await fire(
        persona,
        "Notification",
        player,
        tmp_path,
        payload={"notification_type": "permission_prompt"},
    )

    assert [(o.mode, o.nagger) for o in outcomes] == [("nagger", "started"), ("normal", None)]
    assert outcomes[1].situation == "notification"
    session_id, sounds, timeouts = nag_calls[0]
    assert session_id == SESSION
    assert sounds == [
        str(tmp_path / "sounds" / "peasant" / "nag1.mp3"),
        str(tmp_path / "sounds" / "peasant" / "nag2.mp3"),
    ]
    assert timeouts == [15, 30]


async def test_default_schedule_when_situation_has_no_timeouts(player, tmp_path, nag_calls):
    nag = {"name": "nag", "trigger": "permission_timeout", "sounds": ["n.mp3"]}
    await fire(
        make_persona(nag),
        "Notification",
        player,
        tmp_path,
        payload={"notification_type": "permission_prompt"},
    )
    assert nag_calls[0][2] == [30, 60, 120]


async def test_other_notifications_do_not_start_nagger(player, tmp_path, nag_calls):
    persona = make_persona(NOTIFICATION, NAG)
    outcomes = await fire(
        persona,
        "Notification",
        player,
        tmp_path,
        payload={"notification_type": "idle_prompt"},
    )
    assert nag_calls == []
    assert [o.mode for o in outcomes] == ["normal"]


@pytest.mark.parametrize("event", ["UserPromptSubmit", "SessionEnd"])
async def test_prompt_or_session_end_cancels_nagger(player, tmp_path, event):
    nag_state_path(SESSION).write_text("{}")

    outcomes = await fire(make_persona(NAG), event, player, tmp_path)

    assert not nag_state_path(SESSION).exists()
    assert [(o.mode, o.nagger) for o in outcomes] == [("nagger", "cancelled")]


async def test_nagger_untouched_without_permission_situation(player, tmp_path):
    nag_state_path(SESSION).write_text("{}")
    await fire(make_persona(PROMPT), "UserPromptSubmit", player, tmp_path)
    assert nag_state_path(SESSION).exists()


# ---------------------------------------------------------------------------
# Flags mode
# ---------------------------------------------------------------------------

async def test_flag_match_plays_flag_situation(player, fake_sleep, tmp_path):
    persona = make_persona(STOP, FLAG)
    outcomes = await fire(
        persona,
        "Stop",
        player,
        tmp_path,
        flags=True,
        sleep=fake_sleep,
        grace_seconds=1.5,
        payload={"last_assistant_message": "Done <!-- persona:found-bug -->"},
    )

    assert [(o.mode, o.flag, o.situation) for o in outcomes] == [("flag", "found-bug", "found-bug")]
    assert player.calls[0][0].endswith("bug.mp3")
    assert fake_sleep.calls == [1.5]


async def test_flag_replay_is_suppressed_but_grace_still_waits(player, fake_sleep, tmp_path):
    persona = make_persona(FLAG)
    transcript = write_transcript(
        tmp_path / "t.jsonl",
        {"role": "assistant", "content": "<!-- persona:found-bug -->"},
    )
    payload = {"transcript_path": str(transcript)}

    first = await fire(persona, "Stop", player, tmp_path, flags=True, sleep=fake_sleep, payload=payload)
    second = await fire(persona, "Stop", player, tmp_path, flags=True, sleep=fake_sleep, payload=payload)

    assert len(first) == 1
    assert second == []
    assert len(player.calls) == 1
    assert len(fake_sleep.calls) == 2


async def test_flags_mode_never_resolves_normal_situation(player, fake_sleep, tmp_path):
    persona = make_persona(STOP, FLAG)
    outcomes = await fire(
        persona,
        "Stop",
        player,
        tmp_path,
        flags=True,
        sleep=fake_sleep,
        payload={"last_assistant_message": "no markers"},
    )
    assert outcomes == []
    assert player.calls == []


async def test_flags_mode_without_text_source_is_a_noop(player, fake_sleep, tmp_path):
    outcomes = await fire(make_persona(FLAG), "Stop", player, tmp_path, flags=True, sleep=fake_sleep)
    assert outcomes == []
    assert fake_sleep.calls == []


async def test_flags_mode_without_flag_situations_is_a_noop(player, fake_sleep, tmp_path):
    outcomes = await fire(
        make_persona(STOP),
        "Stop",
        player,
        tmp_path,
        flags=True,
        sleep=fake_sleep,
        payload={"last_assistant_message": "<!-- persona:found-bug -->"},
    )
    assert outcomes == []
    assert fake_sleep.calls == []


# ---------------------------------------------------------------------------
# Outcome log
# ---------------------------------------------------------------------------

async def test_outcomes_are_logged_as_jsonl(player, tmp_path, nag_calls):
    log_file = tmp_path / "logs" / "persona.log"
    persona = make_persona(NOTIFICATION, NAG)

    await fire(
        persona,
        "Notification",
        player,
        tmp_path,
        outcome_log=OutcomeLogger(str(log_file)),
        payload={"notification_type": "permission_prompt"},
    )

    entries = [json.loads(line) for line in log_file.read_text().splitlines()]
    assert entries[0]["mode"] == "nagger"
    assert entries[0]["nagger"] == "started"
    assert entries[1]["mode"] == "normal"
    assert entries[1]["event"] == "Notification"
    assert entries[1]["situation"] == "notification"
    assert entries[1]["sound"] == "n.mp3"
    assert entries[1]["session_id"] == SESSION
