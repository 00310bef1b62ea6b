"""Tests for the asyncio synchronization loop."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from flow_cli.models.focus.controller import SessionController
from flow_cli.models.focus.events import KeyEvent, SnapshotEvent
from flow_cli.models.focus.methodology import for_methodology
from flow_cli.models.focus.ports import SessionPorts, best_effort
from flow_cli.models.focus.snapshot import EMPTY_SNAPSHOT, Task
from flow_cli.models.focus.sync import SyncLoop

TIMEOUT = 5


def make_ports(**overrides) -> SessionPorts:
    ports = SessionPorts(
        fetch_snapshot=MagicMock(return_value=EMPTY_SNAPSHOT),
        issue_command=MagicMock(),
        start_session=MagicMock(),
        on_session_complete=MagicMock(),
        fetch_recent_tasks=MagicMock(return_value=[]),
        fetch_yesterday_highlight=MagicMock(return_value=None),
        on_first_run_done=MagicMock(),
    )
    for name, value in overrides.items():
        setattr(ports, name, value)
    return ports


class TestBestEffort:
    def test_returns_result(self):
        assert best_effort("add", lambda a, b: a + b, 1, 2) == 3

    def test_swallows_and_returns_default(self):
        def boom():
            raise RuntimeError("backend down")

        assert best_effort("boom", boom, default="fallback") == "fallback"

    def test_missing_callback_is_noop(self):
        assert best_effort("nothing", None) is None


class TestSyncLoop:
    @pytest.mark.asyncio
    async def test_quit_key_stops_loop(self):
        ctl = SessionController(for_methodology("pomodoro"))
        loop = SyncLoop(ctl, make_ports(), interval=0.01)
        loop.post(KeyEvent("c"))
        await asyncio.wait_for(loop.run(), TIMEOUT)

    @pytest.mark.asyncio
    async def test_events_processed_in_order(self):
        ctl = SessionController(for_methodology("pomodoro"), locked=True)
        ports = make_ports()
        loop = SyncLoop(ctl, ports, interval=0.01)
        for key in ("enter", "O", "k", "enter", "ctrl+c"):
            loop.post(KeyEvent(key))

        await asyncio.wait_for(loop.run(), TIMEOUT)

        ports.start_session.assert_called_once_with(0, "Ok", "")
        assert ctl.phase == "timer"

    @pytest.mark.asyncio
    async def test_commands_delivered_in_issue_order(self, make_session, make_snapshot):
        running = make_snapshot(make_session())
        ctl = SessionController(for_methodology("pomodoro"), running)
        ports = make_ports(fetch_snapshot=MagicMock(return_value=running))
        loop = SyncLoop(ctl, ports, interval=10)
        for key in ("b", "b", "ctrl+c"):
            loop.post(KeyEvent(key))

        await asyncio.wait_for(loop.run(), TIMEOUT)

        assert [c.args for c in ports.issue_command.call_args_list] == [("stop",), ("break",)]

    @pytest.mark.asyncio
    async def test_tick_fetch_detects_completion_once(self, make_session, make_snapshot):
        ctl = SessionController(for_methodology("pomodoro"), make_snapshot(make_session()))
        ports = make_ports(fetch_snapshot=MagicMock(return_value=make_snapshot(None)))
        ticks_after_completion = []

        def on_update(controller):
            if controller.runtime.completed:
                ticks_after_completion.append(1)
                if len(ticks_after_completion) == 5:
                    loop.post(KeyEvent("ctrl+c"))

        loop = SyncLoop(ctl, ports, interval=0.01, on_update=on_update)
        await asyncio.wait_for(loop.run(), TIMEOUT)

        ports.on_session_complete.assert_called_once_with("work")
        assert ports.fetch_snapshot.call_count >= 1

    @pytest.mark.asyncio
    async def test_failed_command_does_not_stop_loop(self):
        ctl = SessionController(for_methodology("pomodoro"))
        ports = make_ports(issue_command=MagicMock(side_effect=RuntimeError("offline")))
        loop = SyncLoop(ctl, ports, interval=10)
        for key in ("s", "ctrl+c"):
            loop.post(KeyEvent(key))

        await asyncio.wait_for(loop.run(), TIMEOUT)

        ports.issue_command.assert_called_once_with("start")

    @pytest.mark.asyncio
    async def test_failed_fetch_keeps_previous_snapshot(self, make_session, make_snapshot):
        running = make_snapshot(make_session())
        ctl = SessionController(for_methodology("pomodoro"), running)
        fetch = MagicMock(side_effect=RuntimeError("timeout"))
        ports = make_ports(fetch_snapshot=fetch)

        def on_update(controller):
            if fetch.call_count >= 3:
                loop.post(KeyEvent("ctrl+c"))

        loop = SyncLoop(ctl, ports, interval=0.01, on_update=on_update)
        await asyncio.wait_for(loop.run(), TIMEOUT)

        assert ctl.snapshot is running
        assert not ctl.runtime.completed

    @pytest.mark.asyncio
    async def test_new_session_refreshes_tasks(self, make_session, make_snapshot):
        ctl = SessionController(for_methodology("pomodoro"), make_snapshot(make_session()))
        ports = make_ports(
            fetch_recent_tasks=MagicMock(return_value=[Task("t1", "Fresh")]),
        )

        def on_update(controller):
            if controller.recent_tasks:
                loop.post(KeyEvent("ctrl+c"))

        loop = SyncLoop(ctl, ports, interval=10, on_update=on_update)
        loop.post(SnapshotEvent(make_snapshot(None)))
        loop.post(KeyEvent("n"))
        await asyncio.wait_for(loop.run(), TIMEOUT)

        assert ctl.phase == "duration_picker"
        assert [t.title for t in ctl.recent_tasks] == ["Fresh"]
        ports.fetch_recent_tasks.assert_called_once_with(3)

    @pytest.mark.asyncio
    async def test_key_source_is_polled(self):
        ctl = SessionController(for_methodology("pomodoro"))
        keys = iter(["down", None, "c"])
        loop = SyncLoop(ctl, make_ports(), interval=10)

        await asyncio.wait_for(loop.run(key_source=lambda: next(keys, None)), TIMEOUT)

        assert ctl.menu_cursor == 1
