"""Collaborator interfaces consumed by the session controller.

Every call through a port is best-effort: failures are logged and then
discarded, and the controller carries on as if the call had succeeded. The
next snapshot fetch reveals the real state.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, TypeVar

from flow_cli.utils.logger import get_logger

from .snapshot import SessionSnapshot, SessionType, Task

TimerCommand = Literal["start", "pause", "resume", "stop", "break"]
EnergizeActivity = Literal["walk", "stretch", "exercise", "none"]
OutcomeAnswer = Literal["yes", "partial", "no"]
DistractionCategory = Literal["internal", "external", ""]

T = TypeVar("T")

logger = get_logger("ports")


def best_effort(
    action: str, fn: Callable[..., T] | None, *args: Any, default: T | None = None
) -> T | None:
    """Call ``fn(*args)``, logging and discarding any exception.

    A missing callback is treated as a successful no-op.
    """
    if fn is None:
        return default
    try:
        return fn(*args)
    except Exception:
        logger.warning("%s failed; continuing", action, exc_info=True)
        return default


def _noop(*_args: Any) -> None:
    return None


@dataclass
class ShutdownRitual:
    """The four answers captured by the deep-work shutdown ritual."""

    pending_tasks_review: str = ""
    calendar_review: str = ""
    tomorrow_plan: str = ""
    closing_phrase: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "pending_tasks_review": self.pending_tasks_review,
            "calendar_review": self.calendar_review,
            "tomorrow_plan": self.tomorrow_plan,
            "closing_phrase": self.closing_phrase,
        }


@dataclass
class SessionPorts:
    """Callables the controller drives. Only ``fetch_snapshot`` is required."""

    fetch_snapshot: Callable[[], SessionSnapshot]
    issue_command: Callable[[TimerCommand], None] = _noop
    start_session: Callable[[int, str, str], None] = _noop
    on_session_complete: Callable[[SessionType], None] = _noop
    log_distraction: Callable[[str, str], None] = _noop
    record_accomplishment: Callable[[str], None] = _noop
    record_ritual: Callable[[ShutdownRitual], None] = _noop
    record_focus_score: Callable[[int], None] = _noop
    record_energize_activity: Callable[[str], None] = _noop
    record_outcome: Callable[[str], None] = _noop
    fetch_recent_tasks: Callable[[int], list[Task]] = lambda _limit: []
    fetch_yesterday_highlight: Callable[[], Task | None] = lambda: None
    on_mode_selected: Callable[[str], None] = _noop
    on_notifications_toggled: Callable[[bool], None] = _noop
    on_first_run_done: Callable[[], None] = _noop
