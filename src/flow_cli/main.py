"""Main entry point for Flow CLI."""

import typer
from rich.markup import escape

from flow_cli import __version__
from flow_cli.commands import focus
from flow_cli.services.config_service import ConfigService, get_config_service
from flow_cli.utils.ui.console import get_console

app = typer.Typer(
    name="flow",
    help="Focus timer with Pomodoro, Deep Work and Make Time sessions",
    no_args_is_help=True,
)

console = get_console()


# Focus commands live at the top level: `flow start`, `flow status`, ...
app.command("start")(focus.start_focus)
app.command("status")(focus.focus_status)
app.command("stats")(focus.focus_stats)
app.command("reflect")(focus.focus_reflect)
app.command("pause")(focus.focus_pause)
app.command("resume")(focus.focus_resume)
app.command("stop")(focus.focus_stop)
app.command("break")(focus.focus_break)
app.command("void")(focus.focus_void)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Flow CLI[/bold] version [cyan]{__version__}[/cyan]")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes and not typer.confirm("Reset all settings to defaults?"):
        raise typer.Exit(0)
    try:
        # A corrupt config file must not block the reset, so skip loading it.
        ConfigService().reset_config()
        get_config_service.cache_clear()
    except RuntimeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    console.print("[green]✓ Configuration reset[/green]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
