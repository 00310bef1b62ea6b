"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem state and
small factories for session snapshots.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from flow_cli.models.config_models import AppConfig
from flow_cli.models.focus.history import HistoryStore
from flow_cli.models.focus.snapshot import ActiveSession, DailyStats, SessionSnapshot
from flow_cli.models.focus.state import SessionStateManager
from flow_cli.services.session_service import LocalSessionService

# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from flow_cli.services.config_service import get_config_service

    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with patch("flow_cli.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("flow_cli.services.config_service.user_data_dir", return_value=tmpdir):
            from flow_cli.services.config_service import ConfigService

            svc = ConfigService()
            yield svc
    get_config_service.cache_clear()


@pytest.fixture()
def app_config() -> AppConfig:
    return AppConfig(first_run=False)


# ---------------------------------------------------------------------------
# Local backend
# ---------------------------------------------------------------------------


@pytest.fixture()
def state_manager(tmp_path) -> SessionStateManager:
    return SessionStateManager(tmp_path / "state")


@pytest.fixture()
def history(tmp_path) -> HistoryStore:
    return HistoryStore(tmp_path / "history.db")


@pytest.fixture()
def session_service(app_config, state_manager, history) -> LocalSessionService:
    return LocalSessionService(app_config, state_manager=state_manager, history=history)


# ---------------------------------------------------------------------------
# Snapshot factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_session():
    """Factory for ActiveSession values (25-minute running work session by default)."""

    def _make(
        session_type="work",
        status="running",
        duration=25 * 60,
        elapsed=0,
        session_id="s-1",
        intended_outcome="",
    ) -> ActiveSession:
        return ActiveSession(
            session_id=session_id,
            session_type=session_type,
            status=status,
            duration_seconds=duration,
            elapsed_seconds=elapsed,
            remaining_seconds=duration - elapsed,
            intended_outcome=intended_outcome,
        )

    return _make


@pytest.fixture()
def make_snapshot():
    """Factory for SessionSnapshot values."""

    def _make(session: ActiveSession | None = None, work_sessions: int = 0) -> SessionSnapshot:
        return SessionSnapshot(
            active_session=session,
            today=DailyStats(work_sessions=work_sessions),
        )

    return _make
