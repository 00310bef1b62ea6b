"""Events consumed and effects produced by the session controller.

The controller never talks to the outside world directly: ``dispatch``
returns a list of :class:`Effect` values that the synchronization loop
executes against :class:`~flow_cli.models.focus.ports.SessionPorts`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .snapshot import SessionSnapshot, Task

Phase = Literal[
    "welcome",
    "main_menu",
    "mode_picker",
    "duration_picker",
    "laser_checklist",
    "task_select",
    "task_name",
    "outcome_prompt",
    "timer",
]

ExitAction = Literal["stats", "reflect"]

EffectKind = Literal[
    "fetch",
    "quit",
    "command",
    "start_session",
    "log_distraction",
    "record_accomplishment",
    "record_ritual",
    "record_focus_score",
    "record_energize_activity",
    "record_outcome",
    "session_complete",
    "mode_selected",
    "notifications",
    "first_run_done",
    "refresh_tasks",
    "new_session",
]


@dataclass(frozen=True)
class KeyEvent:
    """A normalized key press (``"enter"``, ``"esc"``, ``"up"``, ``"a"``...)."""

    key: str


@dataclass(frozen=True)
class TickEvent:
    """One beat of the 1-second ticker."""


@dataclass(frozen=True)
class SnapshotEvent:
    """A freshly fetched snapshot."""

    snapshot: SessionSnapshot


@dataclass(frozen=True)
class TasksEvent:
    """Recent tasks and carry-over highlight, reloaded for a new setup pass."""

    recent: tuple[Task, ...] = ()
    highlight: Task | None = None


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


Event = KeyEvent | TickEvent | SnapshotEvent | TasksEvent | ResizeEvent


@dataclass(frozen=True)
class Effect:
    """A side effect requested by the controller."""

    kind: EffectKind
    args: tuple[Any, ...] = field(default_factory=tuple)


FETCH = Effect("fetch")
QUIT = Effect("quit")


def command(kind: str) -> Effect:
    """Shortcut for a session command effect (start/pause/resume/stop/break)."""
    return Effect("command", (kind,))
