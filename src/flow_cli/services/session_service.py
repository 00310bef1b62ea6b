"""Local session backend used by the interactive controller.

LocalSessionService keeps the active session in a JSON state file and
archives finished sessions (plus their completion artifacts) in SQLite. Its
public methods line up one-to-one with the collaborator callables of
:class:`~flow_cli.models.focus.ports.SessionPorts`; ``ports()`` builds that
bundle.

Illegal requests (pausing a paused session, starting while another session
runs, ...) raise ``ValueError``; the controller's best-effort wrapper logs
and discards them.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from datetime import date, timedelta

from flow_cli.models.config_models import AppConfig
from flow_cli.models.focus.history import HistoryStore
from flow_cli.models.focus.methodology import for_methodology
from flow_cli.models.focus.ports import SessionPorts, ShutdownRitual, TimerCommand
from flow_cli.models.focus.snapshot import SessionSnapshot, SessionType, Task
from flow_cli.models.focus.state import SessionState, SessionStateManager
from flow_cli.utils.logger import get_logger

logger = get_logger("session_service")

_TAG_RE = re.compile(r"(?<!\S)#([\w-]+)")


def parse_tags(text: str) -> tuple[str, list[str]]:
    """Split ``"Write docs #writing #q3"`` into ``("Write docs", ["writing", "q3"])``."""
    tags = _TAG_RE.findall(text)
    title = " ".join(_TAG_RE.sub("", text).split())
    return title, tags


class LocalSessionService:
    """Session commands, snapshots and history on the local machine."""

    def __init__(
        self,
        config: AppConfig,
        state_manager: SessionStateManager | None = None,
        history: HistoryStore | None = None,
    ):
        self.config = config
        self.methodology = config.methodology
        self.state = state_manager or SessionStateManager()
        self.history = history or HistoryStore()
        self._last_task_id: str | None = None

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def _current(self) -> SessionState | None:
        """Load the active session, archiving it if its time is up."""
        session = self.state.load()
        if session is not None and session.is_expired():
            self._finish(session, "completed")
            return None
        return session

    def fetch_snapshot(self) -> SessionSnapshot:
        session = self._current()
        task_id = session.task_id if session else self._last_task_id
        return SessionSnapshot(
            active_session=session.to_active_session() if session else None,
            active_task=self.history.get_task(task_id) if task_id else None,
            today=self.history.daily_stats(),
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def issue_command(self, kind: TimerCommand) -> None:
        logger.info("Command: %s", kind)
        if kind == "start":
            self._require_idle()
            self._start_work(0, "", "")
        elif kind == "pause":
            self.state.pause_session(self._require_active())
        elif kind == "resume":
            self.state.resume_session(self._require_active())
        elif kind == "stop":
            self._finish(self._require_active(), "stopped")
        elif kind == "break":
            self._require_idle()
            self._start_break()
        else:
            raise ValueError(f"Unknown command: {kind}")

    def _require_active(self) -> SessionState:
        session = self._current()
        if session is None:
            raise ValueError("No active session")
        return session

    def _require_idle(self) -> None:
        if self._current() is not None:
            raise ValueError("A session is already active")

    def void_session(self) -> SessionState:
        """Drop the active session without archiving it, so it never counts."""
        session = self._require_active()
        self.state.delete()
        logger.info("Session %s voided", session.session_id)
        return session

    def _finish(self, session: SessionState, status: str) -> None:
        self.history.log_session(session, status=status)
        self.state.delete()
        logger.info("Session %s %s", session.session_id, status)

    def start_session(self, preset_index: int, task_name: str, intended_outcome: str) -> None:
        """Start a work session from the setup flow."""
        self._require_idle()
        self._start_work(preset_index, task_name, intended_outcome)

    def _start_work(self, preset_index: int, task_name: str, intended_outcome: str) -> None:
        descriptor = for_methodology(self.methodology, self.config)
        presets = descriptor.presets
        if not 0 <= preset_index < len(presets):
            raise ValueError(f"Preset {preset_index + 1} does not exist")

        title, tags = parse_tags(task_name)
        task: Task | None = None
        if title:
            task = self.history.touch_task(title)
            if descriptor.has_highlight:
                self.history.set_highlight(task.task_id, date.today())
        elif self._last_task_id:
            task = self.history.get_task(self._last_task_id)
        self._last_task_id = task.task_id if task else None

        session = self.state.create_session(
            "work",
            presets[preset_index].minutes,
            methodology=self.methodology,
            task_id=task.task_id if task else None,
            task_title=task.title if task else None,
            intended_outcome=intended_outcome,
            tags=tags,
        )
        self.state.save(session)

    def next_break_type(self) -> SessionType:
        """Long break after every N-th work session of the day (Pomodoro)."""
        if self.methodology != "pomodoro":
            return "short_break"
        work_sessions = self.history.daily_stats().work_sessions
        every = self.config.pomodoro.sessions_before_long
        if work_sessions > 0 and work_sessions % every == 0:
            return "long_break"
        return "short_break"

    def _start_break(self) -> None:
        break_type = self.next_break_type()
        minutes = self.config.break_minutes(
            self.methodology, long_break=break_type == "long_break"
        )
        session = self.state.create_session(
            break_type, minutes, methodology=self.methodology
        )
        self.state.save(session)

    # ------------------------------------------------------------------
    # Completion artifacts
    # ------------------------------------------------------------------

    def _artifact_target(self) -> str:
        session = self.state.load()
        if session is not None and session.session_type == "work":
            return session.session_id
        session_id = self.history.last_session_id("work")
        if session_id is None:
            raise ValueError("No work session to attach to")
        return session_id

    def log_distraction(self, text: str, category: str) -> None:
        self.history.add_distraction(self._artifact_target(), text, category)

    def record_accomplishment(self, text: str) -> None:
        self.history.update_session(self._artifact_target(), accomplishment=text)

    def record_ritual(self, ritual: ShutdownRitual) -> None:
        self.history.update_session(
            self._artifact_target(), ritual=json.dumps(ritual.to_dict())
        )

    def record_focus_score(self, score: int) -> None:
        if not 1 <= score <= 5:
            raise ValueError(f"Focus score must be 1-5, got {score}")
        self.history.update_session(self._artifact_target(), focus_score=score)

    def record_energize_activity(self, activity: str) -> None:
        self.history.update_session(self._artifact_target(), energize_activity=activity)

    def record_outcome(self, answer: str) -> None:
        self.history.update_session(self._artifact_target(), outcome_achieved=answer)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def recent_tasks(self, limit: int = 3) -> list[Task]:
        return self.history.recent_tasks(limit)

    def yesterday_highlight(self) -> Task | None:
        """Yesterday's Highlight, offered as a carry-over (Make Time only)."""
        if not for_methodology(self.methodology, self.config).has_highlight:
            return None
        task = self.history.highlight_for(date.today() - timedelta(days=1))
        if task is None or task.highlight_date == date.today():
            return None
        return task

    def set_methodology(self, methodology: str) -> None:
        self.methodology = for_methodology(methodology, self.config).id

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def ports(
        self,
        on_session_complete: Callable[[SessionType], None] | None = None,
        on_mode_selected: Callable[[str], None] | None = None,
        on_notifications_toggled: Callable[[bool], None] | None = None,
        on_first_run_done: Callable[[], None] | None = None,
    ) -> SessionPorts:
        """Bundle this service's methods as controller ports."""

        def mode_selected(methodology: str) -> None:
            self.set_methodology(methodology)
            if on_mode_selected is not None:
                on_mode_selected(methodology)

        ports = SessionPorts(
            fetch_snapshot=self.fetch_snapshot,
            issue_command=self.issue_command,
            start_session=self.start_session,
            log_distraction=self.log_distraction,
            record_accomplishment=self.record_accomplishment,
            record_ritual=self.record_ritual,
            record_focus_score=self.record_focus_score,
            record_energize_activity=self.record_energize_activity,
            record_outcome=self.record_outcome,
            fetch_recent_tasks=self.recent_tasks,
            fetch_yesterday_highlight=self.yesterday_highlight,
            on_mode_selected=mode_selected,
        )
        if on_session_complete is not None:
            ports.on_session_complete = on_session_complete
        if on_notifications_toggled is not None:
            ports.on_notifications_toggled = on_notifications_toggled
        if on_first_run_done is not None:
            ports.on_first_run_done = on_first_run_done
        return ports
