"""Unit tests for models/focus/state.py."""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest

from flow_cli.models.focus.state import SessionState, SessionStateManager

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_session(
    *,
    status: str = "running",
    duration_minutes: int = 25,
    started_seconds_ago: int = 0,
    accumulated_paused: int = 0,
    pause_seconds_ago: int | None = None,
) -> SessionState:
    now = datetime.now().astimezone()
    start = now - timedelta(seconds=started_seconds_ago)
    end = start + timedelta(minutes=duration_minutes) + timedelta(seconds=accumulated_paused)
    pause_time = None
    if pause_seconds_ago is not None:
        pause_time = (now - timedelta(seconds=pause_seconds_ago)).isoformat()
    return SessionState(
        session_id="sess-001",
        session_type="work",
        methodology="pomodoro",
        start_time=start.isoformat(),
        end_time=end.isoformat(),
        duration_minutes=duration_minutes,
        status=status,
        task_title="Write docs",
        tags=["writing"],
        pause_time=pause_time,
        accumulated_paused_seconds=accumulated_paused,
    )


# ---------------------------------------------------------------------------
# SessionState
# ---------------------------------------------------------------------------


class TestSessionStateTiming:
    def test_fresh_session_has_full_remaining(self):
        session = _make_session()
        assert 25 * 60 - 2 <= session.time_remaining() <= 25 * 60

    def test_elapsed_excludes_paused_time(self):
        session = _make_session(started_seconds_ago=600, accumulated_paused=120)
        assert 478 <= session.time_elapsed() <= 482

    def test_elapsed_capped_at_duration(self):
        session = _make_session(duration_minutes=1, started_seconds_ago=600)
        assert session.time_elapsed() == 60

    def test_paused_session_freezes_at_pause_time(self):
        session = _make_session(status="paused", started_seconds_ago=300, pause_seconds_ago=100)
        assert 198 <= session.time_elapsed() <= 202
        assert 25 * 60 - 202 <= session.time_remaining() <= 25 * 60 - 198

    def test_expired_only_when_running(self):
        session = _make_session(duration_minutes=1, started_seconds_ago=120)
        assert session.is_expired()
        session.status = "paused"
        session.pause_time = datetime.now().astimezone().isoformat()
        assert not session.is_expired()

    def test_start_datetime_handles_z_suffix(self):
        session = _make_session()
        session.start_time = "2026-01-01T10:00:00Z"
        assert session.start_datetime.tzinfo is not None


class TestSessionStateConversion:
    def test_to_active_session(self):
        session = _make_session(started_seconds_ago=60)
        active = session.to_active_session()
        assert active.session_id == "sess-001"
        assert active.duration_seconds == 25 * 60
        assert active.is_work and active.is_running
        assert active.tags == ("writing",)
        assert active.task_title == "Write docs"

    def test_dict_round_trip(self):
        session = _make_session()
        assert SessionState.from_dict(session.to_dict()) == session


# ---------------------------------------------------------------------------
# SessionStateManager
# ---------------------------------------------------------------------------


class TestSessionStateManager:
    def test_creates_state_dir(self, tmp_path):
        manager = SessionStateManager(tmp_path / "nested" / "state")
        assert manager.state_dir.is_dir()

    def test_save_and_load_round_trips(self, state_manager):
        session = _make_session()
        state_manager.save(session)
        assert state_manager.load() == session

    def test_save_sets_secure_permissions(self, state_manager):
        state_manager.save(_make_session())
        assert state_manager.state_file.stat().st_mode & 0o777 == 0o600

    def test_load_missing_or_corrupt(self, state_manager):
        assert state_manager.load() is None
        state_manager.state_file.write_text("{not json")
        assert state_manager.load() is None
        state_manager.state_file.write_text(json.dumps({"session_id": "x"}))
        assert state_manager.load() is None

    def test_delete(self, state_manager):
        state_manager.save(_make_session())
        assert state_manager.has_active_session()
        state_manager.delete()
        assert not state_manager.has_active_session()
        state_manager.delete()

    def test_create_session(self):
        session = SessionStateManager.create_session(
            "long_break", 15, methodology="pomodoro", tags=["a"]
        )
        assert session.status == "running"
        assert session.session_type == "long_break"
        assert session.duration_minutes == 15
        delta = session.end_datetime - session.start_datetime
        assert delta == timedelta(minutes=15)


class TestPauseResume:
    def test_pause_then_resume_extends_end(self, state_manager):
        session = _make_session(started_seconds_ago=60)
        original_end = session.end_datetime
        state_manager.pause_session(session)
        assert session.status == "paused"
        assert state_manager.load().status == "paused"

        session.pause_time = (datetime.now().astimezone() - timedelta(seconds=30)).isoformat()
        state_manager.resume_session(session)

        assert session.status == "running"
        assert session.pause_time is None
        assert 29 <= session.accumulated_paused_seconds <= 31
        assert session.end_datetime > original_end

    def test_pause_requires_running(self, state_manager):
        session = _make_session(status="paused", pause_seconds_ago=1)
        with pytest.raises(ValueError, match="running"):
            state_manager.pause_session(session)

    def test_resume_requires_paused(self, state_manager):
        with pytest.raises(ValueError, match="paused"):
            state_manager.resume_session(_make_session())
