"""Phase content shared by the fullscreen and inline presentations.

``build_screen`` turns the controller state into a :class:`Screen` (title,
body lines, key hints). The two render targets in :mod:`.ui` only decide how
to lay that out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.text import Text

from .completion import RITUAL_STEPS
from .controller import LASER_CHECKLIST, MAIN_MENU_OPTIONS
from .methodology import METHODOLOGIES, for_methodology
from .snapshot import ActiveSession

if TYPE_CHECKING:
    from .controller import SessionController
    from .runtime import SessionRuntime

ACCENT = "bold cyan"
DIM = "dim"
WARN = "bold yellow"

SESSION_LABELS = {
    "work": "Work Session",
    "short_break": "Short Break",
    "long_break": "Long Break",
}


@dataclass
class Screen:
    title: str
    lines: list[Text] = field(default_factory=list)
    hints: str = ""

    def add(self, text: str = "", style: str = "") -> None:
        self.lines.append(Text(text, style=style))


def format_clock(seconds: int) -> str:
    """Format seconds as MM:SS, or H:MM:SS from one hour up."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    mins, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def format_minutes(seconds: int) -> str:
    """Compact duration such as ``1h30m`` or ``25m``."""
    hours, rest = divmod(max(0, int(seconds)) // 60, 60)
    if hours:
        return f"{hours}h{rest}m"
    return f"{rest}m"


def progress_bar(progress: float, width: int = 40) -> str:
    pct = min(100, int(progress * 100))
    filled = int(width * pct / 100)
    return "▓" * filled + "░" * (width - filled) + f"  {pct}%"


def _option(index: int, label: str, selected: bool, detail: str = "") -> Text:
    text = Text("▸ " if selected else "  ", style=ACCENT)
    text.append(f"{index + 1}. {label}", style=ACCENT if selected else "")
    if detail:
        text.append(f"  {detail}", style=DIM)
    return text


# ---------------------------------------------------------------------------
# Setup phases
# ---------------------------------------------------------------------------


def _welcome(ctl: SessionController) -> Screen:
    screen = Screen("Welcome to Flow!", hints="enter continue · c close")
    screen.add("Three methodologies to choose from:", DIM)
    screen.add("Pomodoro   25m sprints, short breaks")
    screen.add("Deep Work  long blocks, distraction tracking, shutdown ritual")
    screen.add("Make Time  daily Highlight, focus score, energize")
    return screen


def _main_menu(ctl: SessionController) -> Screen:
    screen = Screen("Flow", hints="↑/↓ move · enter select · 1-3 shortcut · c close")
    for i, (_action, label) in enumerate(MAIN_MENU_OPTIONS):
        screen.lines.append(_option(i, label, i == ctl.menu_cursor))
    return screen


def _mode_picker(ctl: SessionController) -> Screen:
    if ctl.onboarding:
        screen = Screen(ctl.methodology.title, hints="enter continue · esc back")
        screen.add(ctl.methodology.description)
        return screen
    screen = Screen("Choose a methodology", hints="←/→ move · enter select · esc back")
    for i, methodology in enumerate(METHODOLOGIES):
        descriptor = for_methodology(methodology)
        screen.lines.append(
            _option(i, descriptor.label, i == ctl.mode_cursor, descriptor.menu_hint)
        )
    return screen


def _duration_picker(ctl: SessionController) -> Screen:
    screen = Screen(
        f"{ctl.methodology.label}: session length",
        hints="↑/↓ move · enter select · 1-3 shortcut · esc back",
    )
    for i, preset in enumerate(ctl.methodology.presets):
        screen.lines.append(
            _option(i, preset.name, i == ctl.preset_cursor, f"{preset.minutes}m")
        )
    return screen


def _laser_checklist(ctl: SessionController) -> Screen:
    screen = Screen("Laser Checklist", hints="y/n answer · enter continue · esc back")
    for i, item in enumerate(LASER_CHECKLIST):
        answer = ctl.checklist[i]
        mark = "[✓]" if answer else "[✗]" if answer is False else "[ ]"
        style = ACCENT if i == ctl.checklist_cursor else ""
        screen.add(f"{mark} {item}", style)
    return screen


def _task_select(ctl: SessionController) -> Screen:
    screen = Screen(ctl.methodology.task_prompt, hints="↑/↓ move · enter select · esc back")
    index = 0
    if ctl.yesterday_highlight is not None:
        selected = ctl.task_cursor == 0
        text = Text("▸ " if selected else "  ", style=ACCENT)
        text.append(f"Carry over yesterday's Highlight: {ctl.yesterday_highlight.title}")
        screen.lines.append(text)
        index = 1
    for i, task in enumerate(ctl.recent_tasks):
        screen.lines.append(_option(i, task.title, ctl.task_cursor == index + i))
    new_selected = ctl.task_cursor == len(ctl.task_options)
    text = Text("▸ " if new_selected else "  ", style=ACCENT)
    text.append("New task...", style=ACCENT if new_selected else DIM)
    screen.lines.append(text)
    return screen


def _task_name(ctl: SessionController) -> Screen:
    screen = Screen(ctl.methodology.task_prompt, hints="enter confirm · esc back")
    screen.lines.append(ctl.task_input.render())
    screen.add("Add #tags to label the session", DIM)
    return screen


def _outcome_prompt(ctl: SessionController) -> Screen:
    screen = Screen(ctl.methodology.outcome_prompt, hints="enter start · esc back")
    if ctl.task_input.value:
        screen.add(f"Task: {ctl.task_input.value}", DIM)
    screen.lines.append(ctl.outcome_input.render())
    return screen


# ---------------------------------------------------------------------------
# Timer phase
# ---------------------------------------------------------------------------


def _active(rt: SessionRuntime, session: ActiveSession) -> Screen:
    methodology = rt.methodology
    label = SESSION_LABELS.get(session.session_type, session.session_type)
    if session.is_paused:
        label += " (paused)"
    screen = Screen(methodology.title)
    screen.add(label, WARN if session.is_paused else ACCENT)
    if session.task_title:
        screen.add(session.task_title[:60], "bold")
    if session.intended_outcome:
        screen.add(f"Goal: {session.intended_outcome}", DIM)
    if session.tags:
        screen.add(" ".join(f"#{tag}" for tag in session.tags), DIM)
    screen.add()

    if session.is_paused:
        clock_style = "bold yellow"
    elif session.remaining_seconds < 60:
        clock_style = "bold red"
    else:
        clock_style = ACCENT
    screen.add(format_clock(session.remaining_seconds), clock_style)
    screen.add(progress_bar(session.progress), DIM)

    completion = rt.completion
    if completion.distractions:
        screen.add(f"Distractions: {len(completion.distractions)}", DIM)
    if rt.energize_ticks > 0:
        screen.add("Halfway there! Stand up, stretch, drink some water.", WARN)

    if completion.overlay == "distraction":
        screen.add()
        screen.add("Distraction:", ACCENT)
        screen.lines.append(completion.text_input.render())
        screen.hints = "enter save · esc cancel"
        return screen
    if completion.overlay == "distraction_category":
        screen.add()
        screen.add(f"'{completion.pending_distraction}'", DIM)
        screen.add("[i]nternal  [e]xternal  [enter] skip", ACCENT)
        screen.hints = "i internal · e external · enter skip"
        return screen

    if rt.confirm_finish:
        screen.add("Press f again to finish this session", WARN)
    elif rt.confirm_break:
        screen.add("Press b again to stop and take a break", WARN)

    hints = ["p resume" if session.is_paused else "p pause", "f finish"]
    if session.is_work:
        hints.append("b break")
    if methodology.has_distraction_log and session.is_work:
        hints.append("d distraction")
    notif = "on" if rt.notifications_enabled else "off"
    hints += [f"tab notifications {notif}", "c close"]
    screen.hints = " · ".join(hints)
    return screen


def _ritual_lines(screen: Screen, rt: SessionRuntime) -> None:
    completion = rt.completion
    step = completion.ritual_step
    screen.add(f"Shutdown Ritual (step {step + 1}/{len(RITUAL_STEPS)}):", ACCENT)
    screen.add(RITUAL_STEPS[step], DIM)
    screen.lines.append(completion.text_input.render())
    screen.hints = "enter save/skip step · esc exit ritual"


def _completed(rt: SessionRuntime, ctl: SessionController) -> Screen:
    methodology = rt.methodology
    completion = rt.completion
    today = rt.snapshot.today
    screen = Screen(methodology.title)

    if rt.completed_type != "work":
        screen.add("Break over!", ACCENT)
        screen.add("Start your next session or call it a day.", DIM)
        screen.hints = "n new session · s start · q quit"
        return screen

    screen.add(methodology.completion_title, ACCENT)
    if rt.completed_elapsed:
        screen.add(f"{format_minutes(rt.completed_elapsed)} worked", DIM)
    if rt.completed_outcome:
        screen.add(f"Goal: {rt.completed_outcome}", DIM)
    if completion.distractions:
        screen.add(f"Distractions: {len(completion.distractions)}", DIM)

    if methodology.deep_work_goal_hours:
        goal = methodology.deep_work_goal_hours
        pct = today.total_work_seconds / 3600 / goal * 100
        screen.add(
            f"Deep Work: {format_minutes(today.total_work_seconds)} today "
            f"({pct:.0f}% of {goal:.0f}h)",
            DIM,
        )
    else:
        screen.add(
            f"{today.work_sessions} sessions, {format_minutes(today.total_work_seconds)} today",
            DIM,
        )

    if methodology.has_highlight:
        task = ctl.snapshot.active_task
        if task is not None and task.highlight_date is not None:
            screen.add("You made time for your Highlight today.", ACCENT)
        if completion.focus_score_saved:
            screen.add(f"Focus score: {completion.focus_score}/5", DIM)
        else:
            screen.add("How focused? [1] [2] [3] [4] [5]", ACCENT)
        if completion.energize_saved:
            screen.add(f"Energize: {completion.energize_activity}", DIM)
        else:
            screen.add("Energize? [w]alk [t]stretch [e]xercise [n]one", ACCENT)

    overlay = completion.overlay
    screen.add()
    if overlay == "ritual":
        _ritual_lines(screen, rt)
        return screen
    if overlay == "accomplishment":
        screen.add("Accomplishment:", ACCENT)
        screen.lines.append(completion.text_input.render())
        screen.hints = "enter save · esc cancel"
        return screen
    if overlay == "outcome_review":
        screen.add("Did you achieve your intended outcome?", ACCENT)
        screen.hints = "y yes · p partially · n no · enter skip"
        return screen
    if overlay == "distraction_review":
        screen.add("Distraction Review:", ACCENT)
        for i, item in enumerate(completion.distractions, 1):
            category = f" ({item.category})" if item.category else ""
            screen.add(f"  {i}. {item.text}{category}", DIM)
        screen.add("Consider batching these for tomorrow.", DIM)
        screen.hints = "enter dismiss"
        return screen

    if methodology.has_shutdown_ritual and completion.shutdown_complete:
        screen.add("Shutdown ritual complete.", ACCENT)
    if completion.outcome_answer:
        screen.add(f"Outcome: {completion.outcome_answer}", DIM)

    if rt.auto_break_ticks > 0:
        screen.add(
            f"Break starting in {rt.auto_break_ticks}s... press any key to cancel", WARN
        )

    hints: list[str] = []
    outstanding = rt.outstanding_prompt()
    if outstanding is None:
        hints.append("n new session")
    else:
        description, key = outstanding
        screen.add(f"→ new session locked: {description} [{key}]", WARN)
        if key == "a":
            hints += ["a shutdown ritual", "l quick note"]
        else:
            hints.append(f"{key} {description.split(' first')[0]}")
    if (
        methodology.has_outcome_prompt
        and rt.completed_outcome
        and not completion.outcome_review_done
    ):
        hints.append("o outcome review")
    hints += ["b break", "q quit"]
    screen.hints = " · ".join(hints)
    return screen


def _summary(rt: SessionRuntime) -> Screen:
    today = rt.snapshot.today
    screen = Screen("Today", hints="any key to exit")
    screen.add(f"Work sessions: {today.work_sessions}", ACCENT)
    screen.add(f"Breaks taken: {today.breaks_taken}", DIM)
    screen.add(f"Focused: {format_minutes(today.total_work_seconds)}", DIM)
    return screen


def _timer(ctl: SessionController) -> Screen:
    rt = ctl.runtime
    if rt.showing_summary:
        return _summary(rt)
    if rt.completed:
        return _completed(rt, ctl)
    if rt.session is None:
        screen = Screen(rt.methodology.title, hints="s start · c close")
        screen.add("No active session", DIM)
        return screen
    return _active(rt, rt.session)


_BUILDERS = {
    "welcome": _welcome,
    "main_menu": _main_menu,
    "mode_picker": _mode_picker,
    "duration_picker": _duration_picker,
    "laser_checklist": _laser_checklist,
    "task_select": _task_select,
    "task_name": _task_name,
    "outcome_prompt": _outcome_prompt,
    "timer": _timer,
}


def build_screen(ctl: SessionController) -> Screen:
    """Build the content for the controller's current phase."""
    return _BUILDERS[ctl.phase](ctl)
