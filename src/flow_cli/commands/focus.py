"""Focus session commands.

``flow start`` runs the interactive session controller; the other commands
print the local session state and history without entering the UI.
"""

from __future__ import annotations

from datetime import date

import typer
from rich.markup import escape
from rich.table import Table

from flow_cli.models.config_models import AppConfig
from flow_cli.models.focus.controller import SessionController
from flow_cli.models.focus.history import HistoryStore
from flow_cli.models.focus.methodology import METHODOLOGIES, for_methodology
from flow_cli.models.focus.ports import TimerCommand
from flow_cli.models.focus.snapshot import DailyStats, SessionType
from flow_cli.models.focus.state import SessionStateManager
from flow_cli.models.focus.views import format_clock, format_minutes
from flow_cli.services.config_service import ConfigService, get_config_service
from flow_cli.services.session_service import LocalSessionService
from flow_cli.utils.logger import get_logger
from flow_cli.utils.ui.console import get_console

console = get_console()
logger = get_logger("commands.focus")
app = typer.Typer(help="Focus sessions")


def _load_config_service() -> ConfigService:
    try:
        config_service = get_config_service()
        config_service.load_config()
    except RuntimeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    return config_service


def _session_service(config: AppConfig) -> LocalSessionService:
    return LocalSessionService(
        config, state_manager=SessionStateManager(), history=HistoryStore()
    )


def notify_complete(config: AppConfig, session_type: SessionType) -> None:
    """Ring the terminal bell when a session ends, if notifications are on."""
    logger.info("Session complete: %s", session_type)
    if config.notifications.enabled:
        console.bell()


def print_daily_stats(stats: DailyStats) -> None:
    console.print("\n[bold cyan]Today[/bold cyan]\n")
    console.print(f"  Work sessions: {stats.work_sessions}")
    console.print(f"  Breaks taken:  {stats.breaks_taken}")
    console.print(f"  Focus time:    {format_minutes(stats.total_work_seconds)}")
    console.print()


def print_reflection(history: HistoryStore, days: int = 7) -> None:
    table = Table(title=f"Last {days} days", title_style="bold cyan")
    table.add_column("Day", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Focus time", justify="right")
    table.add_column("Avg focus", justify="right")
    table.add_column("Distractions", justify="right")

    total_minutes = 0
    for row in history.weekly_summary(days):
        total_minutes += row["work_minutes"]
        day: date = row["date"]
        avg = row["avg_focus"]
        table.add_row(
            day.strftime("%a %d %b"),
            str(row["work_sessions"]),
            f"{row['work_minutes']}m",
            f"{avg:.1f}" if avg is not None else "-",
            str(row["distractions"]),
        )

    console.print()
    console.print(table)
    console.print(f"\nTotal focus time: [bold]{total_minutes // 60}h {total_minutes % 60}m[/bold]\n")


@app.command("start")
def start_focus(
    inline: bool = typer.Option(
        False, "--inline", "-i", help="Render below the prompt instead of fullscreen"
    ),
    mode: str | None = typer.Option(
        None,
        "--mode",
        "-m",
        help=f"Lock the methodology ({', '.join(METHODOLOGIES)})",
    ),
):
    """Start an interactive focus session."""
    from flow_cli.models.focus.ui import TimerDisplay

    config_service = _load_config_service()
    config = config_service.config

    if mode is not None and mode not in METHODOLOGIES:
        console.print(
            f"[red]Unknown mode '{mode}'. Choose from: {', '.join(METHODOLOGIES)}[/red]"
        )
        raise typer.Exit(1)

    try:
        descriptor = for_methodology(mode or config.methodology, config)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    service = _session_service(config)
    service.set_methodology(descriptor.id)

    controller = SessionController(
        descriptor,
        service.fetch_snapshot(),
        config=config,
        locked=mode is not None,
        first_run=config.first_run,
        auto_break=config.pomodoro.auto_break,
        notifications=config.notifications.enabled,
        recent_tasks=service.recent_tasks(),
        yesterday_highlight=service.yesterday_highlight(),
    )
    ports = service.ports(
        on_session_complete=lambda kind: notify_complete(config, kind),
        on_mode_selected=config_service.set_methodology,
        on_notifications_toggled=config_service.set_notifications,
        on_first_run_done=config_service.mark_first_run_done,
    )

    display = TimerDisplay(console, inline=inline or config.ui.inline)
    display.run(controller, ports)

    if controller.selected_action == "stats":
        print_daily_stats(service.history.daily_stats())
    elif controller.selected_action == "reflect":
        print_reflection(service.history)


@app.command("status")
def focus_status():
    """Show the current focus session."""
    config = _load_config_service().config
    snapshot = _session_service(config).fetch_snapshot()
    session = snapshot.active_session

    if session is None:
        console.print("[dim]No active focus session[/dim]")
        raise typer.Exit(0)

    kind = "Work" if session.is_work else session.session_type.replace("_", " ").title()
    console.print("\n[bold cyan]Current Session[/bold cyan]\n")
    console.print(f"Type: {kind}")
    if session.task_title:
        console.print(f"Task: {session.task_title}")
    if session.tags:
        console.print(f"Tags: {' '.join('#' + tag for tag in session.tags)}")
    console.print(f"Status: {session.status}")
    console.print(f"Time remaining: {format_clock(session.remaining_seconds)}")
    console.print()


def _issue(kind: TimerCommand) -> LocalSessionService:
    """Send one timer command to the local backend, exiting 1 if it is refused."""
    service = _session_service(_load_config_service().config)
    try:
        service.issue_command(kind)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    return service


@app.command("pause")
def focus_pause():
    """Pause the current session."""
    _issue("pause")
    console.print("[yellow]⏸ Session paused[/yellow]")


@app.command("resume")
def focus_resume():
    """Resume a paused session."""
    service = _issue("resume")
    session = service.fetch_snapshot().active_session
    remaining = format_clock(session.remaining_seconds) if session else "00:00"
    console.print(f"[green]▶ Session resumed[/green] ({remaining} remaining)")


@app.command("stop")
def focus_stop():
    """Stop the current session early (it still counts as a session)."""
    _issue("stop")
    console.print("[green]✓ Session stopped[/green]")


@app.command("break")
def focus_break():
    """Start a break (long or short depending on today's work sessions)."""
    service = _issue("break")
    session = service.fetch_snapshot().active_session
    if session is not None:
        label = session.session_type.replace("_", " ").title()
        console.print(
            f"[cyan]☕ {label} started[/cyan] ({format_minutes(session.duration_seconds)})"
        )


@app.command("void")
def focus_void():
    """Discard the current session; it is not counted in stats."""
    service = _session_service(_load_config_service().config)
    try:
        session = service.void_session()
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    console.print(
        f"[yellow]Session voided after {format_clock(session.time_elapsed())} "
        "(not counted in stats)[/yellow]"
    )


@app.command("stats")
def focus_stats():
    """Show today's focus statistics."""
    config = _load_config_service().config
    print_daily_stats(_session_service(config).history.daily_stats())


@app.command("reflect")
def focus_reflect(
    days: int = typer.Option(7, "--days", "-d", min=1, max=31, help="Days to include"),
):
    """Show a per-day reflection of recent sessions."""
    config = _load_config_service().config
    print_reflection(_session_service(config).history, days)
