"""Timer-phase runtime: in-session commands and completion edge detection.

``SessionRuntime`` owns the local view of the running session. It issues
session commands as effects (fire-and-forget), applies two-press
confirmation to destructive ones, and watches consecutive snapshots to
detect when a session completes or a new one starts.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flow_cli.utils.logger import get_logger

from .completion import CompletionState
from .events import QUIT, Effect, command
from .methodology import MethodologyDescriptor
from .snapshot import EMPTY_SNAPSHOT, ActiveSession, SessionSnapshot, SessionType

logger = get_logger("runtime")

AUTO_BREAK_TICKS = 3
ENERGIZE_TICKS = 30
SUMMARY_TICKS = 3
ENERGIZE_AT_PROGRESS = 0.5

NEW_SESSION = Effect("new_session")


@dataclass
class SessionRuntime:
    """Mutable timer-phase state of one controller."""

    methodology: MethodologyDescriptor
    snapshot: SessionSnapshot = EMPTY_SNAPSHOT
    auto_break_enabled: bool = False
    notifications_enabled: bool = True
    completion: CompletionState = field(default_factory=CompletionState)

    confirm_finish: bool = False
    confirm_break: bool = False
    completed: bool = False
    completed_type: SessionType | None = None
    completed_elapsed: int = 0
    completed_outcome: str = ""
    notified: bool = False
    auto_break_ticks: int = 0
    energize_shown: bool = False
    energize_ticks: int = 0
    showing_summary: bool = False
    summary_ticks: int = 0

    @property
    def session(self) -> ActiveSession | None:
        return self.snapshot.active_session

    @property
    def idle(self) -> bool:
        return self.completed or self.session is None

    def prompts_done(self) -> bool:
        return self.completion.prompts_done(self.methodology, self.completed_type)

    def outstanding_prompt(self) -> tuple[str, str] | None:
        return self.completion.outstanding_prompt(self.methodology, self.completed_type)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> list[Effect]:
        """Apply one key press in the timer phase."""
        if self.showing_summary:
            return [QUIT]
        if self.completion.overlay:
            return self.completion.handle_overlay_key(key, self.methodology)

        if self.auto_break_ticks > 0:
            logger.debug("Auto-break cancelled by key %r", key)
            self.auto_break_ticks = 0
        if key != "f":
            self.confirm_finish = False
        if key != "b":
            self.confirm_break = False

        if self.completed:
            consumed, effects = self.completion.handle_completion_key(
                key, self.methodology, self.completed_type, self.completed_outcome
            )
            if consumed:
                return effects

        handler = {
            "tab": self._toggle_notifications,
            "q": self._quit_completed,
            "c": self._quit_running,
            "s": self._start,
            "p": self._pause_resume,
            "d": self._distraction,
            "n": self._new_session,
            "b": self._break,
            "f": self._finish,
        }.get(key)
        if handler is None:
            return []
        return handler()

    def _toggle_notifications(self) -> list[Effect]:
        self.notifications_enabled = not self.notifications_enabled
        return [Effect("notifications", (self.notifications_enabled,))]

    def _summary_or_quit(self) -> list[Effect]:
        if self.snapshot.today.work_sessions > 0:
            self.showing_summary = True
            self.summary_ticks = SUMMARY_TICKS
            return []
        return [QUIT]

    def _quit_completed(self) -> list[Effect]:
        return self._summary_or_quit() if self.completed else []

    def _quit_running(self) -> list[Effect]:
        return self._summary_or_quit() if not self.completed else []

    def _start(self) -> list[Effect]:
        if not self.idle:
            return []
        if self.completed and not self.prompts_done():
            return []
        self._clear_completed()
        return [command("start")]

    def _pause_resume(self) -> list[Effect]:
        session = self.session
        if session is None or self.completed:
            return []
        return [command("pause" if session.is_running else "resume")]

    def _distraction(self) -> list[Effect]:
        session = self.session
        if (
            self.methodology.has_distraction_log
            and not self.completed
            and session is not None
            and session.is_work
            and session.is_running
        ):
            self.completion.open_distraction_input()
        return []

    def _new_session(self) -> list[Effect]:
        if self.completed and self.prompts_done():
            self._clear_completed()
            return [NEW_SESSION]
        return []

    def _break(self) -> list[Effect]:
        if self.completed:
            if self.completed_type == "work":
                self._clear_completed()
                return [command("break")]
            return []
        session = self.session
        if session is None or not session.is_work:
            return []
        if not self.confirm_break:
            self.confirm_break = True
            return []
        self.confirm_break = False
        return [command("stop"), command("break")]

    def _finish(self) -> list[Effect]:
        if self.completed or self.session is None:
            return []
        if not self.confirm_finish:
            self.confirm_finish = True
            return []
        self.confirm_finish = False
        return [command("stop")]

    def _clear_completed(self) -> None:
        self.completed = False
        self.completed_type = None
        self.completed_elapsed = 0
        self.completed_outcome = ""
        self.notified = False
        self.auto_break_ticks = 0
        self.energize_shown = False
        self.energize_ticks = 0
        self.completion.reset()

    # ------------------------------------------------------------------
    # Ticks and snapshots
    # ------------------------------------------------------------------

    def on_tick(self) -> list[Effect]:
        """Advance the tick-driven countdowns."""
        if self.showing_summary:
            self.summary_ticks -= 1
            return [QUIT] if self.summary_ticks <= 0 else []

        session = self.session
        if (
            self.methodology.has_energize_reminder
            and not self.energize_shown
            and session is not None
            and session.is_work
            and session.progress >= ENERGIZE_AT_PROGRESS
        ):
            self.energize_ticks = ENERGIZE_TICKS
            self.energize_shown = True
        elif self.energize_ticks > 0:
            self.energize_ticks -= 1

        if self.auto_break_ticks > 0:
            self.auto_break_ticks -= 1
            if self.auto_break_ticks == 0:
                logger.info("Auto-break countdown expired, starting break")
                self._clear_completed()
                return [command("break")]
        return []

    def observe_snapshot(self, snapshot: SessionSnapshot) -> list[Effect]:
        """Replace the snapshot, detecting completion and restart edges."""
        effects: list[Effect] = []
        previous = self.session
        current = snapshot.active_session

        if previous is not None and current is None:
            self.completed = True
            self.completed_type = previous.session_type
            self.completed_elapsed = previous.elapsed_seconds
            self.completed_outcome = previous.intended_outcome
            self.confirm_finish = False
            self.confirm_break = False
            logger.info(
                "Session %s (%s) completed after %ss",
                previous.session_id,
                previous.session_type,
                previous.elapsed_seconds,
            )
            if not self.notified:
                self.notified = True
                effects.append(Effect("session_complete", (previous.session_type,)))
            if self.auto_break_enabled and previous.is_work:
                self.auto_break_ticks = AUTO_BREAK_TICKS
        elif self.completed and current is not None:
            logger.info("New session %s detected, clearing completion", current.session_id)
            self._clear_completed()

        self.snapshot = snapshot
        return effects
