"""Immutable snapshot of externally owned session state.

A fresh ``SessionSnapshot`` is fetched on every tick and replaces the
previous one wholesale; nothing in here is ever mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

SessionType = Literal["work", "short_break", "long_break"]
SessionStatus = Literal["running", "paused"]


@dataclass(frozen=True)
class ActiveSession:
    """The running or paused session, as seen at fetch time."""

    session_id: str
    session_type: SessionType
    status: SessionStatus
    duration_seconds: int
    elapsed_seconds: int
    remaining_seconds: int
    started_at: datetime | None = None
    task_title: str | None = None
    intended_outcome: str = ""
    tags: tuple[str, ...] = ()

    @property
    def is_work(self) -> bool:
        return self.session_type == "work"

    @property
    def is_break(self) -> bool:
        return self.session_type != "work"

    @property
    def is_running(self) -> bool:
        return self.status == "running"

    @property
    def is_paused(self) -> bool:
        return self.status == "paused"

    @property
    def progress(self) -> float:
        """Fraction of the planned duration already elapsed (0.0 - 1.0)."""
        if self.duration_seconds <= 0:
            return 0.0
        return min(1.0, self.elapsed_seconds / self.duration_seconds)


@dataclass(frozen=True)
class Task:
    """A task that can be picked in the task selector."""

    task_id: str
    title: str
    highlight_date: date | None = None

    def is_highlight_for(self, day: date) -> bool:
        return self.highlight_date == day


@dataclass(frozen=True)
class DailyStats:
    """Simple counters for today."""

    work_sessions: int = 0
    breaks_taken: int = 0
    total_work_seconds: int = 0

    @property
    def total_work_minutes(self) -> int:
        return self.total_work_seconds // 60


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything the controller reads from the session service."""

    active_session: ActiveSession | None = None
    active_task: Task | None = None
    today: DailyStats = field(default_factory=DailyStats)

    @property
    def has_active_session(self) -> bool:
        return self.active_session is not None


EMPTY_SNAPSHOT = SessionSnapshot()
