"""Asyncio loop that feeds events to the controller and runs its effects.

All controller state changes happen in :meth:`SyncLoop.run`, one event at a
time, in arrival order. Everything that touches the outside world runs off
the loop:

* snapshot fetches are independent tasks (``asyncio.to_thread``); several
  may be in flight at once and may finish out of order, each result is
  posted back as a :class:`SnapshotEvent`;
* commands and logging callbacks go through one worker queue, so they run
  in the order they were issued (``stop`` always lands before ``break``).

Every port call goes through :func:`best_effort`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from flow_cli.utils.logger import get_logger

from .controller import SessionController
from .events import Effect, Event, KeyEvent, SnapshotEvent, TasksEvent, TickEvent
from .ports import SessionPorts, best_effort

logger = get_logger("sync")

TICK_INTERVAL = 1.0
KEY_POLL_INTERVAL = 0.05

# Effect kind -> SessionPorts attribute
_PORT_FOR_EFFECT = {
    "command": "issue_command",
    "start_session": "start_session",
    "session_complete": "on_session_complete",
    "log_distraction": "log_distraction",
    "record_accomplishment": "record_accomplishment",
    "record_ritual": "record_ritual",
    "record_focus_score": "record_focus_score",
    "record_energize_activity": "record_energize_activity",
    "record_outcome": "record_outcome",
    "mode_selected": "on_mode_selected",
    "notifications": "on_notifications_toggled",
    "first_run_done": "on_first_run_done",
}


class SyncLoop:
    """Serialized event loop around one :class:`SessionController`."""

    def __init__(
        self,
        controller: SessionController,
        ports: SessionPorts,
        interval: float = TICK_INTERVAL,
        on_update: Callable[[SessionController], None] | None = None,
        recent_task_limit: int = 3,
    ):
        self.controller = controller
        self.ports = ports
        self.interval = interval
        self.on_update = on_update
        self.recent_task_limit = recent_task_limit
        self._events: asyncio.Queue[Event] = asyncio.Queue()
        self._commands: asyncio.Queue[tuple[str, Callable[..., Any], tuple]] = (
            asyncio.Queue()
        )
        self._fetches: set[asyncio.Task] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    def post(self, event: Event) -> None:
        """Queue an event. Safe to call from other threads once running."""
        if self._loop is not None and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._events.put_nowait, event)
        else:
            self._events.put_nowait(event)

    async def run(self, key_source: Callable[[], str | None] | None = None) -> None:
        """Process events until the controller asks to quit."""
        self._loop = asyncio.get_running_loop()
        background = [
            asyncio.create_task(self._ticker()),
        ]
        worker = asyncio.create_task(self._command_worker())
        if key_source is not None:
            background.append(asyncio.create_task(self._poll_keys(key_source)))

        self._render()
        try:
            while True:
                event = await self._events.get()
                effects = self.controller.dispatch(event)
                if self._execute(effects):
                    break
                self._render()
        finally:
            for task in background + list(self._fetches):
                task.cancel()
            await asyncio.gather(*background, *self._fetches, return_exceptions=True)
            # Queued commands are fire-and-forget but still delivered.
            await self._commands.join()
            worker.cancel()
            await asyncio.gather(worker, return_exceptions=True)
            logger.debug("Sync loop stopped in phase %s", self.controller.phase)

    def _render(self) -> None:
        if self.on_update is not None:
            self.on_update(self.controller)

    def _execute(self, effects: list[Effect]) -> bool:
        """Run effects; returns True when the loop should stop."""
        for effect in effects:
            if effect.kind == "quit":
                return True
            if effect.kind == "fetch":
                self._spawn(self._fetch_snapshot())
            elif effect.kind == "refresh_tasks":
                self._spawn(self._fetch_tasks())
            else:
                port = _PORT_FOR_EFFECT[effect.kind]
                self._commands.put_nowait(
                    (effect.kind, getattr(self.ports, port), effect.args)
                )
        return False

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)

    async def _ticker(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._events.put_nowait(TickEvent())

    async def _poll_keys(self, key_source: Callable[[], str | None]) -> None:
        while True:
            key = key_source()
            if key:
                self._events.put_nowait(KeyEvent(key))
                await asyncio.sleep(0)
            else:
                await asyncio.sleep(KEY_POLL_INTERVAL)

    async def _fetch_snapshot(self) -> None:
        snapshot = await asyncio.to_thread(
            best_effort, "fetch snapshot", self.ports.fetch_snapshot
        )
        # A failed fetch posts nothing; the previous snapshot stays current.
        if snapshot is not None:
            self._events.put_nowait(SnapshotEvent(snapshot))

    async def _fetch_tasks(self) -> None:
        recent = await asyncio.to_thread(
            best_effort,
            "fetch recent tasks",
            self.ports.fetch_recent_tasks,
            self.recent_task_limit,
            default=[],
        )
        highlight = await asyncio.to_thread(
            best_effort, "fetch yesterday's highlight", self.ports.fetch_yesterday_highlight
        )
        self._events.put_nowait(TasksEvent(tuple(recent or ()), highlight))

    async def _command_worker(self) -> None:
        while True:
            action, fn, args = await self._commands.get()
            try:
                await asyncio.to_thread(best_effort, action, fn, *args)
            finally:
                self._commands.task_done()
