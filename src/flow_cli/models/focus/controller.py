"""Phase state machine driving the interactive focus session.

``SessionController.dispatch`` is the single entry point: it takes one
event (key, tick, snapshot, resize), mutates local state, and returns the
side effects the synchronization loop must perform. The controller never
performs I/O itself, so both render targets (fullscreen and inline) share
exactly the same transition rules.

Setup flow::

    welcome -> main_menu -> mode_picker -> duration_picker
        -> [laser_checklist] -> [task_select] -> task_name
        -> [outcome_prompt] -> timer

``esc`` pops the phase history, so it always reverses the forward edge that
led to the current phase. ``ctrl+c`` quits from anywhere.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from flow_cli.utils.logger import get_logger

from .completion import CompletionState
from .events import (
    FETCH,
    QUIT,
    Effect,
    Event,
    ExitAction,
    KeyEvent,
    Phase,
    ResizeEvent,
    SnapshotEvent,
    TasksEvent,
    TickEvent,
)
from .methodology import METHODOLOGIES, MethodologyDescriptor, for_methodology
from .runtime import NEW_SESSION, SessionRuntime
from .snapshot import EMPTY_SNAPSHOT, SessionSnapshot, Task
from .text_input import TextInput

if TYPE_CHECKING:
    from flow_cli.models.config_models import AppConfig

logger = get_logger("controller")

MAIN_MENU_OPTIONS: tuple[tuple[str, str], ...] = (
    ("start", "Start session"),
    ("stats", "View stats"),
    ("reflect", "Reflect"),
)

LASER_CHECKLIST = (
    "Phone on Do Not Disturb?",
    "Notifications off?",
    "Distracting tabs/apps closed?",
)

MAX_RECENT_TASKS = 3

_PREV_KEYS = ("up", "k", "left", "h")
_NEXT_KEYS = ("down", "j", "right", "l")
_SHORTCUTS = {"1": 0, "2": 1, "3": 2}


class SessionController:
    """Owns the current phase and routes events to phase handlers."""

    def __init__(
        self,
        methodology: MethodologyDescriptor,
        snapshot: SessionSnapshot = EMPTY_SNAPSHOT,
        *,
        config: AppConfig | None = None,
        locked: bool = False,
        first_run: bool = False,
        auto_break: bool = False,
        notifications: bool = True,
        recent_tasks: list[Task] | None = None,
        yesterday_highlight: Task | None = None,
    ):
        self.methodology = methodology
        self.config = config
        self.locked = locked
        self.runtime = SessionRuntime(
            methodology=methodology,
            snapshot=snapshot,
            auto_break_enabled=auto_break,
            notifications_enabled=notifications,
        )
        self.recent_tasks: list[Task] = list(recent_tasks or [])[:MAX_RECENT_TASKS]
        self.yesterday_highlight = yesterday_highlight

        self.history: list[Phase] = []
        self.selected_action: ExitAction | None = None
        self.width = 80
        self.height = 24

        self.menu_cursor = 0
        self.mode_cursor = METHODOLOGIES.index(methodology.id)
        self.onboarding = False
        self.preset_cursor = 0
        self.checklist_cursor = 0
        self.checklist: list[bool | None] = [None] * len(LASER_CHECKLIST)
        self.task_cursor = 0
        self.task_input = TextInput(placeholder=methodology.task_prompt)
        self.outcome_input = TextInput(placeholder="What does done look like?")

        if snapshot.has_active_session:
            self.phase: Phase = "timer"
        elif first_run:
            self.phase = "welcome"
        elif locked:
            self.phase = "duration_picker"
        else:
            self.phase = "main_menu"

        self._handlers: dict[Phase, Callable[[str], list[Effect]]] = {
            "welcome": self._welcome_key,
            "main_menu": self._main_menu_key,
            "mode_picker": self._mode_picker_key,
            "duration_picker": self._duration_key,
            "laser_checklist": self._checklist_key,
            "task_select": self._task_select_key,
            "task_name": self._task_name_key,
            "outcome_prompt": self._outcome_key,
            "timer": self.runtime.handle_key,
        }

    # ------------------------------------------------------------------
    # Host-visible state
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> SessionSnapshot:
        return self.runtime.snapshot

    @property
    def completion(self) -> CompletionState:
        return self.runtime.completion

    @property
    def exit_action_selected(self) -> bool:
        return self.selected_action is not None

    @property
    def task_options(self) -> list[Task]:
        """Carry-over highlight (if any) followed by the recent tasks."""
        options = [self.yesterday_highlight] if self.yesterday_highlight else []
        return options + self.recent_tasks

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, event: Event) -> list[Effect]:
        """Apply one event and return the effects it produced."""
        if isinstance(event, KeyEvent):
            if event.key == "ctrl+c":
                return [QUIT]
            effects = self._handlers[self.phase](event.key)
            return self._absorb(effects)
        if isinstance(event, TickEvent):
            effects = self.runtime.on_tick()
            if self.phase == "timer":
                effects.append(FETCH)
            return self._absorb(effects)
        if isinstance(event, SnapshotEvent):
            return self.runtime.observe_snapshot(event.snapshot)
        if isinstance(event, TasksEvent):
            self.recent_tasks = list(event.recent)[:MAX_RECENT_TASKS]
            self.yesterday_highlight = event.highlight
            return []
        if isinstance(event, ResizeEvent):
            self.width, self.height = event.width, event.height
            return []
        return []

    def _absorb(self, effects: list[Effect]) -> list[Effect]:
        """Handle controller-internal effects raised by the runtime."""
        if NEW_SESSION not in effects:
            return effects
        effects = [e for e in effects if e != NEW_SESSION]
        self.history.clear()
        self.preset_cursor = 0
        self.task_input.reset()
        self.outcome_input.reset()
        self._goto("duration_picker", push=False)
        effects.append(Effect("refresh_tasks"))
        return effects

    def _goto(self, phase: Phase, push: bool = True) -> None:
        if push:
            self.history.append(self.phase)
        logger.debug("Phase %s -> %s", self.phase, phase)
        self.phase = phase

    def _back(self) -> list[Effect]:
        if not self.history:
            return [QUIT]
        previous = self.history.pop()
        logger.debug("Phase %s -> %s (back)", self.phase, previous)
        self.phase = previous
        return []

    @staticmethod
    def _move(cursor: int, key: str, count: int) -> int:
        if key in _PREV_KEYS and cursor > 0:
            return cursor - 1
        if key in _NEXT_KEYS and cursor < count - 1:
            return cursor + 1
        return cursor

    # ------------------------------------------------------------------
    # Setup phases
    # ------------------------------------------------------------------

    def _welcome_key(self, key: str) -> list[Effect]:
        if key in ("enter", "space", " "):
            self._goto("duration_picker" if self.locked else "main_menu")
            return [Effect("first_run_done")]
        if key in ("c", "esc"):
            return [QUIT]
        return []

    def _main_menu_key(self, key: str) -> list[Effect]:
        if key in _SHORTCUTS:
            index = _SHORTCUTS[key]
            if index >= len(MAIN_MENU_OPTIONS):
                return []
            self.menu_cursor = index
            return self._select_menu()
        if key == "enter":
            return self._select_menu()
        if key == "c":
            return [QUIT]
        if key == "esc":
            return self._back()
        self.menu_cursor = self._move(self.menu_cursor, key, len(MAIN_MENU_OPTIONS))
        return []

    def _select_menu(self) -> list[Effect]:
        action = MAIN_MENU_OPTIONS[self.menu_cursor][0]
        if action == "start":
            self._goto("mode_picker")
            return []
        self.selected_action = action
        return [QUIT]

    def _mode_picker_key(self, key: str) -> list[Effect]:
        if self.onboarding:
            if key == "enter":
                self.onboarding = False
                self.preset_cursor = 0
                self._goto("duration_picker")
            elif key == "esc":
                self.onboarding = False
            return []
        if key in _SHORTCUTS:
            self.mode_cursor = _SHORTCUTS[key]
            return self._select_mode()
        if key == "enter":
            return self._select_mode()
        if key == "c":
            return [QUIT]
        if key == "esc":
            return self._back()
        self.mode_cursor = self._move(self.mode_cursor, key, len(METHODOLOGIES))
        return []

    def _select_mode(self) -> list[Effect]:
        self.set_methodology(for_methodology(METHODOLOGIES[self.mode_cursor], self.config))
        self.onboarding = True
        return [Effect("mode_selected", (self.methodology.id,))]

    def set_methodology(self, methodology: MethodologyDescriptor) -> None:
        self.methodology = methodology
        self.runtime.methodology = methodology
        self.task_input.placeholder = methodology.task_prompt

    def _duration_key(self, key: str) -> list[Effect]:
        presets = self.methodology.presets
        if key in _SHORTCUTS:
            index = _SHORTCUTS[key]
            if index >= len(presets):
                return []
            self.preset_cursor = index
            return self._advance_from_duration()
        if key == "enter":
            return self._advance_from_duration()
        if key == "c":
            return [QUIT]
        if key == "esc":
            return self._back()
        self.preset_cursor = self._move(self.preset_cursor, key, len(presets))
        return []

    def _advance_from_duration(self) -> list[Effect]:
        if self.methodology.requires_laser_checklist:
            self.checklist_cursor = 0
            self.checklist = [None] * len(LASER_CHECKLIST)
            self._goto("laser_checklist")
            return []
        return self._advance_to_task()

    def _advance_to_task(self) -> list[Effect]:
        if self.task_options:
            self.task_cursor = 0
            self._goto("task_select")
        else:
            self._goto("task_name")
        return []

    def _checklist_key(self, key: str) -> list[Effect]:
        if key in ("y", "n"):
            self.checklist[self.checklist_cursor] = key == "y"
            if self.checklist_cursor < len(LASER_CHECKLIST) - 1:
                self.checklist_cursor += 1
            return []
        if key == "enter":
            return self._advance_to_task()
        if key == "c":
            return [QUIT]
        if key == "esc":
            return self._back()
        if key in ("up", "k") and self.checklist_cursor > 0:
            self.checklist_cursor -= 1
        elif key in ("down", "j") and self.checklist_cursor < len(LASER_CHECKLIST) - 1:
            self.checklist_cursor += 1
        return []

    def _task_select_key(self, key: str) -> list[Effect]:
        options = self.task_options
        offset = 1 if self.yesterday_highlight else 0
        if key in _SHORTCUTS:
            index = _SHORTCUTS[key]
            if index >= len(self.recent_tasks):
                return []
            self.task_cursor = offset + index
            return self._advance_from_task(self.recent_tasks[index].title)
        if key == "enter":
            if self.task_cursor < len(options):
                return self._advance_from_task(options[self.task_cursor].title)
            self._goto("task_name")
            return []
        if key == "c":
            return [QUIT]
        if key == "esc":
            return self._back()
        if key in ("up", "k") and self.task_cursor > 0:
            self.task_cursor -= 1
        elif key in ("down", "j") and self.task_cursor < len(options):
            self.task_cursor += 1
        return []

    def _task_name_key(self, key: str) -> list[Effect]:
        if key == "enter":
            return self._advance_from_task(self.task_input.value.strip())
        if key == "esc":
            return self._back()
        self.task_input.handle_key(key)
        return []

    def _advance_from_task(self, task_name: str) -> list[Effect]:
        self.task_input.set_value(task_name)
        if self.methodology.has_outcome_prompt:
            self.outcome_input.reset()
            self._goto("outcome_prompt")
            return []
        return self._start_session(task_name, "")

    def _outcome_key(self, key: str) -> list[Effect]:
        if key == "enter":
            return self._start_session(
                self.task_input.value.strip(), self.outcome_input.value.strip()
            )
        if key == "esc":
            return self._back()
        self.outcome_input.handle_key(key)
        return []

    def _start_session(self, task_name: str, outcome: str) -> list[Effect]:
        # The timer is entered even if starting fails; the next fetch shows
        # whether a session exists.
        self.history.clear()
        self._goto("timer", push=False)
        logger.info(
            "Starting %s session, preset %d, task %r",
            self.methodology.id,
            self.preset_cursor,
            task_name,
        )
        return [Effect("start_session", (self.preset_cursor, task_name, outcome))]
