"""Unit tests for models/focus/views.py and models/focus/ui.py.

Both presentations render the same Screen content, so most assertions are
made on ``build_screen`` and a few on the final rich output.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.layout import Layout

from flow_cli.models.focus.controller import SessionController
from flow_cli.models.focus.events import KeyEvent, SnapshotEvent
from flow_cli.models.focus.methodology import for_methodology
from flow_cli.models.focus.snapshot import Task
from flow_cli.models.focus.ui import FullscreenView, InlineView, TimerDisplay
from flow_cli.models.focus.views import (
    build_screen,
    format_clock,
    format_minutes,
    progress_bar,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _string_console() -> tuple[Console, StringIO]:
    """Return a Console that writes to a StringIO buffer."""
    buf = StringIO()
    con = Console(file=buf, force_terminal=False, no_color=True, width=100, height=30)
    return con, buf


def _screen_text(ctl: SessionController) -> str:
    screen = build_screen(ctl)
    return "\n".join([screen.title, *(line.plain for line in screen.lines), screen.hints])


def _press(ctl: SessionController, *keys: str) -> None:
    for key in keys:
        ctl.dispatch(KeyEvent(key))


def _completed(methodology, make_session, make_snapshot, **session_kwargs):
    ctl = SessionController(
        for_methodology(methodology), make_snapshot(make_session(**session_kwargs))
    )
    ctl.dispatch(SnapshotEvent(make_snapshot(None, work_sessions=1)))
    return ctl


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


class TestFormatting:
    def test_format_clock(self):
        assert format_clock(0) == "00:00"
        assert format_clock(25 * 60) == "25:00"
        assert format_clock(3725) == "1:02:05"
        assert format_clock(-5) == "00:00"

    def test_format_minutes(self):
        assert format_minutes(25 * 60) == "25m"
        assert format_minutes(90 * 60) == "1h30m"

    def test_progress_bar(self):
        bar = progress_bar(0.5, width=10)
        assert bar.startswith("▓" * 5 + "░" * 5)
        assert bar.endswith("50%")


# ---------------------------------------------------------------------------
# Setup screens
# ---------------------------------------------------------------------------


class TestSetupScreens:
    def test_main_menu(self):
        text = _screen_text(SessionController(for_methodology("pomodoro")))
        assert "1. Start session" in text
        assert "3. Reflect" in text

    def test_duration_picker_lists_presets(self):
        ctl = SessionController(for_methodology("deepwork"), locked=True)
        text = _screen_text(ctl)
        assert "Deep Work: session length" in text
        assert "1. Deep  90m" in text

    def test_task_select_offers_highlight(self):
        ctl = SessionController(
            for_methodology("maketime"),
            locked=True,
            recent_tasks=[Task("t1", "Inbox zero")],
            yesterday_highlight=Task("h", "Launch page"),
        )
        _press(ctl, "enter", "enter")
        text = _screen_text(ctl)
        assert "Carry over yesterday's Highlight: Launch page" in text
        assert "1. Inbox zero" in text
        assert "New task..." in text

    def test_laser_checklist_marks(self):
        ctl = SessionController(for_methodology("maketime"), locked=True)
        _press(ctl, "enter", "y", "n")
        text = _screen_text(ctl)
        assert "[✓] Phone on Do Not Disturb?" in text
        assert "[✗] Notifications off?" in text
        assert "[ ] Distracting tabs/apps closed?" in text


# ---------------------------------------------------------------------------
# Timer screens
# ---------------------------------------------------------------------------


class TestTimerScreens:
    def test_active_session(self, make_session, make_snapshot):
        ctl = SessionController(
            for_methodology("deepwork"), make_snapshot(make_session(elapsed=60))
        )
        text = _screen_text(ctl)
        assert "Work Session" in text
        assert "24:00" in text
        assert "d distraction" in text

    def test_finish_confirmation_prompt(self, make_session, make_snapshot):
        ctl = SessionController(for_methodology("pomodoro"), make_snapshot(make_session()))
        _press(ctl, "f")
        assert "Press f again to finish this session" in _screen_text(ctl)

    def test_locked_new_session_shows_prompt_and_key(self, make_session, make_snapshot):
        ctl = _completed("deepwork", make_session, make_snapshot)
        text = _screen_text(ctl)
        assert "Deep Work Session Complete." in text
        assert "→ new session locked: complete the shutdown ritual first [a]" in text
        assert "n new session" not in text

    def test_unlocked_after_prompts(self, make_session, make_snapshot):
        ctl = _completed("maketime", make_session, make_snapshot)
        assert "[1-5]" in _screen_text(ctl)
        _press(ctl, "5", "e")
        text = _screen_text(ctl)
        assert "Focus score: 5/5" in text
        assert "Energize: exercise" in text
        assert "n new session" in text

    def test_ritual_overlay(self, make_session, make_snapshot):
        ctl = _completed("deepwork", make_session, make_snapshot)
        _press(ctl, "a", "enter")
        text = _screen_text(ctl)
        assert "Shutdown Ritual (step 2/4):" in text

    def test_auto_break_countdown(self, make_session, make_snapshot):
        ctl = SessionController(
            for_methodology("pomodoro"),
            make_snapshot(make_session()),
            auto_break=True,
        )
        ctl.dispatch(SnapshotEvent(make_snapshot(None)))
        assert "Break starting in 3s" in _screen_text(ctl)

    def test_summary(self, make_session, make_snapshot):
        ctl = _completed("pomodoro", make_session, make_snapshot)
        _press(ctl, "q")
        assert "Work sessions: 1" in _screen_text(ctl)


# ---------------------------------------------------------------------------
# Render targets
# ---------------------------------------------------------------------------


class TestRenderTargets:
    def test_fullscreen_returns_layout(self):
        ctl = SessionController(for_methodology("pomodoro"))
        layout = FullscreenView().render(ctl)
        assert isinstance(layout, Layout)
        con, buf = _string_console()
        con.print(layout)
        assert "Start session" in buf.getvalue()

    def test_inline_renders_same_content(self):
        ctl = SessionController(for_methodology("pomodoro"))
        con, buf = _string_console()
        con.print(InlineView().render(ctl))
        output = buf.getvalue()
        assert "Start session" in output
        assert "enter select" in output

    def test_timer_display_picks_view(self):
        con, _ = _string_console()
        assert isinstance(TimerDisplay(con, inline=True).view, InlineView)
        assert isinstance(TimerDisplay(con).view, FullscreenView)
