"""Fullscreen and inline presentations of the focus session.

Both views render the same :class:`~flow_cli.models.focus.views.Screen`;
``TimerDisplay`` wires one of them to the keyboard, a rich ``Live`` display
and the :class:`~flow_cli.models.focus.sync.SyncLoop`.
"""

from __future__ import annotations

import asyncio
import signal

from rich.align import Align
from rich.console import Console, Group, RenderableType
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from flow_cli.utils.logger import get_logger

from .controller import SessionController
from .events import KeyEvent, ResizeEvent
from .ports import SessionPorts
from .sync import SyncLoop
from .views import Screen, build_screen

logger = get_logger("ui")


class FullscreenView:
    """Header/body/footer layout filling the terminal."""

    def render(self, controller: SessionController) -> Layout:
        screen = build_screen(controller)
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=3),
        )

        header_text = Text(screen.title, style="bold cyan", justify="center")
        layout["header"].update(Align.center(header_text, vertical="middle"))

        body = Group(*[Align.center(line) for line in screen.lines])
        layout["body"].update(
            Align.center(Panel(body, border_style="cyan", padding=(1, 4)), vertical="middle")
        )

        footer_text = Text(screen.hints, style="dim", justify="center")
        layout["footer"].update(Align.center(footer_text, vertical="middle"))
        return layout


class InlineView:
    """A few indented lines rendered below the prompt."""

    def render(self, controller: SessionController) -> RenderableType:
        screen: Screen = build_screen(controller)
        lines: list[Text] = [Text(f"  {screen.title}", style="bold cyan")]
        for line in screen.lines:
            lines.append(Text("  ") + line)
        if screen.hints:
            lines.append(Text(f"  {screen.hints}", style="dim"))
        return Group(*lines)


class TimerDisplay:
    """Runs the interactive session in the terminal."""

    def __init__(self, console: Console | None = None, inline: bool = False):
        self.console = console or Console()
        self.inline = inline
        self.view = InlineView() if inline else FullscreenView()

    def render(self, controller: SessionController) -> RenderableType:
        return self.view.render(controller)

    def run(self, controller: SessionController, ports: SessionPorts) -> SessionController:
        """Block until the user quits. Returns the controller for inspection."""
        from .keyboard import KeyboardHandler

        keyboard = KeyboardHandler()
        try:
            with Live(
                self.render(controller),
                console=self.console,
                refresh_per_second=8,
                screen=not self.inline,
                transient=self.inline,
            ) as live:
                sync = SyncLoop(
                    controller,
                    ports,
                    on_update=lambda ctl: live.update(self.render(ctl)),
                )
                asyncio.run(self._run(sync, keyboard.get_key))
        finally:
            keyboard.stop()
        return controller

    async def _run(self, sync: SyncLoop, key_source) -> None:
        loop = asyncio.get_running_loop()
        width, height = self.console.size
        sync.post(ResizeEvent(width, height))

        def on_resize() -> None:
            w, h = self.console.size
            sync.post(ResizeEvent(w, h))

        installed: list[int] = []
        for signum, handler in (
            (signal.SIGINT, lambda: sync.post(KeyEvent("ctrl+c"))),
            (getattr(signal, "SIGWINCH", None), on_resize),
        ):
            if signum is None:
                continue
            try:
                loop.add_signal_handler(signum, handler)
                installed.append(signum)
            except (NotImplementedError, RuntimeError, ValueError):
                logger.debug("Signal %s not supported here", signum)
        try:
            await sync.run(key_source=key_source)
        finally:
            for signum in installed:
                loop.remove_signal_handler(signum)
