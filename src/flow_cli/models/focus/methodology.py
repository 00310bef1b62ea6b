"""Methodology descriptors for the three supported focus methodologies.

``for_methodology`` is a pure lookup: it builds an immutable
:class:`MethodologyDescriptor` from the built-in defaults, optionally
overriding duration presets (and the deep-work goal) from ``AppConfig``.
Descriptors are safe to share by reference.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, get_args

if TYPE_CHECKING:
    from flow_cli.models.config_models import AppConfig

Methodology = Literal["pomodoro", "deepwork", "maketime"]

METHODOLOGIES: tuple[Methodology, ...] = get_args(Methodology)
MAX_PRESETS = 3


@dataclass(frozen=True)
class SessionPreset:
    """A named work-session length."""

    name: str
    minutes: int

    @property
    def label(self) -> str:
        return f"{self.name} ({self.minutes}m)"


@dataclass(frozen=True)
class MethodologyDescriptor:
    """Immutable capability set of one methodology."""

    id: Methodology
    label: str
    presets: tuple[SessionPreset, ...]
    task_prompt: str
    outcome_prompt: str
    has_distraction_log: bool
    has_energize_reminder: bool
    has_focus_score: bool
    has_shutdown_ritual: bool
    has_highlight: bool
    title: str
    description: str
    completion_title: str
    menu_hint: str
    deep_work_goal_hours: float = 0.0

    @property
    def requires_laser_checklist(self) -> bool:
        """Highlight-based sessions open with the laser-mode checklist."""
        return self.has_highlight

    @property
    def has_outcome_prompt(self) -> bool:
        return bool(self.outcome_prompt)

    @property
    def has_completion_prompts(self) -> bool:
        """Whether a completed work session can be gated by any prompt."""
        return (
            self.has_shutdown_ritual
            or self.has_focus_score
            or self.has_distraction_log
            or self.has_energize_reminder
        )


_DEFAULT_PRESETS: dict[Methodology, tuple[SessionPreset, ...]] = {
    "pomodoro": (
        SessionPreset("Focus", 25),
        SessionPreset("Short", 15),
        SessionPreset("Deep", 50),
    ),
    "deepwork": (
        SessionPreset("Deep", 90),
        SessionPreset("Focus", 50),
        SessionPreset("Shallow", 25),
    ),
    "maketime": (
        SessionPreset("Highlight", 60),
        SessionPreset("Sprint", 25),
        SessionPreset("Quick", 15),
    ),
}


def default_presets(methodology: Methodology) -> tuple[SessionPreset, ...]:
    """Return the built-in presets for a methodology."""
    return _DEFAULT_PRESETS.get(methodology, _DEFAULT_PRESETS["pomodoro"])


def _configured_presets(
    methodology: Methodology, config: AppConfig | None
) -> tuple[SessionPreset, ...]:
    if config is None:
        return default_presets(methodology)
    block = getattr(config, methodology)
    if not block.presets:
        return default_presets(methodology)
    return tuple(SessionPreset(p.name, p.minutes) for p in block.presets)


def for_methodology(
    methodology: str, config: AppConfig | None = None
) -> MethodologyDescriptor:
    """Return the descriptor for ``methodology``.

    Unknown identifiers fall back to Pomodoro. Raises ``ValueError`` when the
    resolved preset list is empty or longer than the three numeric shortcuts
    can address.
    """
    if methodology not in METHODOLOGIES:
        methodology = "pomodoro"
    presets = _configured_presets(methodology, config)
    if not presets or len(presets) > MAX_PRESETS:
        raise ValueError(
            f"{methodology} needs between 1 and {MAX_PRESETS} presets, "
            f"got {len(presets)}"
        )

    if methodology == "deepwork":
        goal = config.deepwork.goal_hours if config is not None else 4.0
        return MethodologyDescriptor(
            id="deepwork",
            label="Deep Work",
            presets=presets,
            task_prompt="What will you focus on deeply?",
            outcome_prompt="Intended outcome for this session:",
            has_distraction_log=True,
            has_energize_reminder=False,
            has_focus_score=False,
            has_shutdown_ritual=True,
            has_highlight=False,
            title="Deep Work",
            description=(
                "Cal Newport's Deep Work: distraction-free blocks of cognitively "
                "demanding work that push your abilities to their limit."
            ),
            completion_title="Deep Work Session Complete.",
            menu_hint="Longer sessions, distraction tracking",
            deep_work_goal_hours=goal,
        )
    if methodology == "maketime":
        return MethodologyDescriptor(
            id="maketime",
            label="Make Time",
            presets=presets,
            task_prompt="What's your Highlight for today?",
            outcome_prompt="",
            has_distraction_log=False,
            has_energize_reminder=True,
            has_focus_score=True,
            has_shutdown_ritual=False,
            has_highlight=True,
            title="Make Time",
            description=(
                "Jake Knapp's Make Time: choose a daily Highlight and laser focus "
                "on it. Energize your body to fuel your mind."
            ),
            completion_title="Session Complete!",
            menu_hint="Daily Highlight, focus scoring",
        )
    return MethodologyDescriptor(
        id="pomodoro",
        label="Pomodoro",
        presets=presets,
        task_prompt="What are you working on? (Enter to skip):",
        outcome_prompt="",
        has_distraction_log=False,
        has_energize_reminder=False,
        has_focus_score=False,
        has_shutdown_ritual=False,
        has_highlight=False,
        title="Flow - Pomodoro Timer",
        description=(
            "The Pomodoro Technique: 25-minute focused sprints with short breaks "
            "to maintain sustainable productivity."
        ),
        completion_title="Session complete! Great work.",
        menu_hint="Classic 25/5 timer",
    )
