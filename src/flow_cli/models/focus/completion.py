"""Post-completion prompts and the gate on starting a new session.

``CompletionState`` tracks what the user has done since the last work
session ended (shutdown ritual, accomplishment note, distraction review,
focus score, energize activity, outcome review). ``prompts_done`` decides
whether the methodology allows a new session yet; ``outstanding_prompt``
tells the views which prompt is still missing and which key satisfies it.

The overlays (distraction capture, ritual, reviews) are small modal
sub-states. While one is open it receives every key press; it reports its
side effects as :class:`~flow_cli.models.focus.events.Effect` values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from flow_cli.utils.logger import get_logger

from .events import Effect
from .methodology import MethodologyDescriptor
from .ports import ShutdownRitual
from .snapshot import SessionType
from .text_input import TextInput

logger = get_logger("completion")

Overlay = Literal[
    "",
    "distraction",
    "distraction_category",
    "accomplishment",
    "ritual",
    "distraction_review",
    "outcome_review",
]

RITUAL_STEPS = (
    "Review pending tasks — anything urgent?",
    "Review tomorrow's calendar — any conflicts?",
    "Plan for tomorrow:",
    "Closing phrase (e.g. 'Shutdown complete'):",
)

ENERGIZE_KEYS = {"w": "walk", "t": "stretch", "e": "exercise", "n": "none"}
CATEGORY_KEYS = {"i": "internal", "e": "external", "enter": "", "esc": ""}
OUTCOME_KEYS = {"y": "yes", "p": "partial", "n": "no"}


@dataclass
class Distraction:
    text: str
    category: str = ""


@dataclass
class CompletionState:
    """Everything captured after a session completes, until the next one starts."""

    distractions: list[Distraction] = field(default_factory=list)
    ritual_step: int = 0
    ritual_answers: list[str] = field(default_factory=lambda: [""] * len(RITUAL_STEPS))
    shutdown_complete: bool = False
    ritual: ShutdownRitual | None = None
    accomplishment_saved: bool = False
    focus_score: int | None = None
    focus_score_saved: bool = False
    energize_activity: str | None = None
    energize_saved: bool = False
    distraction_review_done: bool = False
    outcome_answer: str | None = None
    outcome_review_done: bool = False
    overlay: Overlay = ""
    pending_distraction: str = ""
    text_input: TextInput = field(default_factory=TextInput)

    def reset(self) -> None:
        """Return every field to its zero value."""
        self.distractions = []
        self.ritual_step = 0
        self.ritual_answers = [""] * len(RITUAL_STEPS)
        self.shutdown_complete = False
        self.ritual = None
        self.accomplishment_saved = False
        self.focus_score = None
        self.focus_score_saved = False
        self.energize_activity = None
        self.energize_saved = False
        self.distraction_review_done = False
        self.outcome_answer = None
        self.outcome_review_done = False
        self.overlay = ""
        self.pending_distraction = ""
        self.text_input = TextInput()

    # ------------------------------------------------------------------
    # Gate
    # ------------------------------------------------------------------

    @property
    def distractions_outstanding(self) -> bool:
        return bool(self.distractions) and not self.distraction_review_done

    def prompts_done(
        self, methodology: MethodologyDescriptor, completed_type: SessionType | None
    ) -> bool:
        """Whether every prompt required after ``completed_type`` is satisfied."""
        if completed_type != "work":
            return True
        if methodology.has_shutdown_ritual:
            if not (self.shutdown_complete or self.accomplishment_saved):
                return False
            return not self.distractions_outstanding
        if methodology.has_focus_score:
            return self.focus_score_saved and self.energize_saved
        return True

    def outstanding_prompt(
        self, methodology: MethodologyDescriptor, completed_type: SessionType | None
    ) -> tuple[str, str] | None:
        """Return ``(description, key)`` of the first unsatisfied prompt."""
        if self.prompts_done(methodology, completed_type):
            return None
        if methodology.has_shutdown_ritual:
            if not (self.shutdown_complete or self.accomplishment_saved):
                return ("complete the shutdown ritual first", "a")
            return (f"review your {len(self.distractions)} distractions first", "r")
        if not self.focus_score_saved:
            return ("rate your focus first", "1-5")
        return ("log how you'll recharge first", "w/t/e/n")

    # ------------------------------------------------------------------
    # Completion-screen keys
    # ------------------------------------------------------------------

    def handle_completion_key(
        self,
        key: str,
        methodology: MethodologyDescriptor,
        completed_type: SessionType | None,
        intended_outcome: str = "",
    ) -> tuple[bool, list[Effect]]:
        """Handle a key on the completion screen.

        Returns ``(consumed, effects)``; unconsumed keys fall through to the
        runtime's own handling.
        """
        if completed_type != "work":
            return False, []

        if methodology.has_shutdown_ritual:
            unsettled = not self.shutdown_complete and not self.accomplishment_saved
            if key == "a" and unsettled:
                self.open_ritual()
                return True, []
            if key == "l" and unsettled:
                self.overlay = "accomplishment"
                self.text_input = TextInput(placeholder="What did you accomplish?")
                return True, []
        if key == "r" and methodology.has_distraction_log and self.distractions_outstanding:
            self.overlay = "distraction_review"
            return True, []
        if (
            key == "o"
            and methodology.has_outcome_prompt
            and intended_outcome
            and not self.outcome_review_done
        ):
            self.overlay = "outcome_review"
            return True, []

        if methodology.has_focus_score and not self.focus_score_saved:
            if key in ("1", "2", "3", "4", "5"):
                self.focus_score = int(key)
                self.focus_score_saved = True
                return True, [Effect("record_focus_score", (self.focus_score,))]
        if (
            methodology.has_energize_reminder
            and not self.energize_saved
            and key in ENERGIZE_KEYS
        ):
            self.energize_activity = ENERGIZE_KEYS[key]
            self.energize_saved = True
            return True, [Effect("record_energize_activity", (self.energize_activity,))]
        return False, []

    # ------------------------------------------------------------------
    # Overlays
    # ------------------------------------------------------------------

    def open_distraction_input(self) -> None:
        self.overlay = "distraction"
        self.text_input = TextInput(placeholder="What distracted you?")

    def open_ritual(self) -> None:
        self.overlay = "ritual"
        self.ritual_step = 0
        self.ritual_answers = [""] * len(RITUAL_STEPS)
        self.text_input = TextInput(placeholder=RITUAL_STEPS[0].rstrip(":"))

    def handle_overlay_key(
        self, key: str, methodology: MethodologyDescriptor
    ) -> list[Effect]:
        """Route ``key`` to the open overlay."""
        handler = {
            "distraction": self._distraction_key,
            "distraction_category": self._category_key,
            "accomplishment": self._accomplishment_key,
            "ritual": self._ritual_key,
            "distraction_review": self._review_key,
            "outcome_review": self._outcome_key,
        }.get(self.overlay)
        if handler is None:
            return []
        return handler(key, methodology)

    def _distraction_key(self, key: str, methodology: MethodologyDescriptor) -> list[Effect]:
        if key == "esc":
            self.overlay = ""
            return []
        if key != "enter":
            self.text_input.handle_key(key)
            return []
        text = self.text_input.value.strip()
        if not text:
            self.overlay = ""
            return []
        if methodology.has_distraction_log:
            self.pending_distraction = text
            self.overlay = "distraction_category"
            return []
        self.overlay = ""
        return self._log_distraction(text, "")

    def _category_key(self, key: str, _methodology: MethodologyDescriptor) -> list[Effect]:
        if key not in CATEGORY_KEYS:
            return []
        text, self.pending_distraction = self.pending_distraction, ""
        self.overlay = ""
        return self._log_distraction(text, CATEGORY_KEYS[key])

    def _log_distraction(self, text: str, category: str) -> list[Effect]:
        self.distractions.append(Distraction(text, category))
        return [Effect("log_distraction", (text, category))]

    def _accomplishment_key(
        self, key: str, _methodology: MethodologyDescriptor
    ) -> list[Effect]:
        if key == "esc":
            self.overlay = ""
            return []
        if key != "enter":
            self.text_input.handle_key(key)
            return []
        text = self.text_input.value.strip()
        # An empty note counts as a deliberate skip.
        self.accomplishment_saved = True
        self.overlay = ""
        effects = [Effect("record_accomplishment", (text,))] if text else []
        self._maybe_open_review()
        return effects

    def _ritual_key(self, key: str, _methodology: MethodologyDescriptor) -> list[Effect]:
        if key == "esc":
            self.overlay = ""
            self.ritual_step = 0
            return []
        if key != "enter":
            self.text_input.handle_key(key)
            return []
        self.ritual_answers[self.ritual_step] = self.text_input.value.strip()
        self.ritual_step += 1
        if self.ritual_step >= len(RITUAL_STEPS):
            return self._finish_ritual()
        self.text_input = TextInput(placeholder=RITUAL_STEPS[self.ritual_step].rstrip(":"))
        return []

    def _finish_ritual(self) -> list[Effect]:
        self.overlay = ""
        self.shutdown_complete = True
        self.accomplishment_saved = True
        self.ritual = ShutdownRitual(*self.ritual_answers)
        logger.info("Shutdown ritual complete")
        self._maybe_open_review()
        return [Effect("record_ritual", (self.ritual,))]

    def _maybe_open_review(self) -> None:
        if self.distractions_outstanding:
            self.overlay = "distraction_review"

    def _review_key(self, key: str, _methodology: MethodologyDescriptor) -> list[Effect]:
        if key in ("enter", "esc"):
            self.overlay = ""
            self.distraction_review_done = True
        return []

    def _outcome_key(self, key: str, _methodology: MethodologyDescriptor) -> list[Effect]:
        if key == "esc":
            self.overlay = ""
            return []
        if key == "enter":
            self.overlay = ""
            self.outcome_review_done = True
            return []
        if key in OUTCOME_KEYS:
            self.overlay = ""
            self.outcome_review_done = True
            self.outcome_answer = OUTCOME_KEYS[key]
            return [Effect("record_outcome", (self.outcome_answer,))]
        return []
