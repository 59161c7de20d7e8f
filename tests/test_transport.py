"""
Tests for TransportSession — event surfacing, send gating and fixed-delay
reconnection. Most tests use an in-memory connection double; one test talks
to a real websockets server on the loopback interface.
"""

from __future__ import annotations

import asyncio
import unittest

from websockets.asyncio.server import serve
from websockets.protocol import State

from chessclient.transport import TransportSession


# --------------------------------------------------------------------------- #
# Helpers                                                                      #
# --------------------------------------------------------------------------- #

class FakeConnection:
    """Yields the given frames, then behaves like a cleanly closed socket."""

    def __init__(self, frames: list[str | bytes], close_reason: str = "bye") -> None:
        self._frames = list(frames)
        self.state = State.OPEN
        self.sent: list[str] = []
        self.close_code = 1000
        self.close_reason = close_reason

    async def __aenter__(self) -> "FakeConnection":
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.state = State.CLOSED

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self._frames:
            yield frame
        self.state = State.CLOSED

    async def send(self, text: str) -> None:
        self.sent.append(text)

    async def close(self) -> None:
        self.state = State.CLOSED


class FakeConnector:
    """Hands out prepared connections in order; raises OSError once they run out."""

    def __init__(self, connections: list[FakeConnection] | None = None) -> None:
        self._connections = list(connections or [])
        self.calls: list[tuple[str, float]] = []
        self.call_times: list[float] = []

    def __call__(self, url: str, *, open_timeout: float) -> FakeConnection:
        self.calls.append((url, open_timeout))
        self.call_times.append(asyncio.get_running_loop().time())
        if not self._connections:
            raise ConnectionRefusedError("connection refused")
        return self._connections.pop(0)


class Recorder:
    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def on_open(self) -> None:
        self.events.append(("open", None))

    def on_message(self, text: str) -> None:
        self.events.append(("message", text))

    def on_close(self, reason: str) -> None:
        self.events.append(("close", reason))

    def on_error(self, exc: Exception) -> None:
        self.events.append(("error", exc))


# --------------------------------------------------------------------------- #
# Tests                                                                        #
# --------------------------------------------------------------------------- #

class TransportSessionTests(unittest.IsolatedAsyncioTestCase):
    async def test_events_surface_in_order(self) -> None:
        recorder = Recorder()
        connector = FakeConnector([FakeConnection(['{"a": 1}', b'{"b": 2}'])])
        session = TransportSession("ws://test", recorder, connector=connector, open_timeout=2.0)

        await session.connect()

        self.assertEqual(
            recorder.events,
            [
                ("open", None),
                ("message", '{"a": 1}'),
                ("message", '{"b": 2}'),
                ("close", "bye (code 1000)"),
            ],
        )
        self.assertEqual(connector.calls, [("ws://test", 2.0)])
        self.assertEqual(session.status, "disconnected-retrying")
        self.assertFalse(session.is_open)

    async def test_refused_connection_reports_error_then_close(self) -> None:
        recorder = Recorder()
        session = TransportSession("ws://test", recorder, connector=FakeConnector())

        with self.assertLogs("chessclient.transport", level="ERROR"):
            await session.connect()

        kinds = [kind for kind, _ in recorder.events]
        self.assertEqual(kinds, ["error", "close"])
        self.assertIsInstance(recorder.events[0][1], ConnectionRefusedError)

    async def test_send_without_connection_fails_quietly(self) -> None:
        session = TransportSession("ws://test", Recorder(), connector=FakeConnector())
        with self.assertLogs("chessclient.transport", level="ERROR") as logs:
            self.assertFalse(await session.send("e2e4"))
        self.assertIn("not connected", logs.output[0])

    async def test_send_while_open(self) -> None:
        session = TransportSession("ws://test", Recorder(), connector=FakeConnector())
        conn = FakeConnection([])
        session._ws = conn  # type: ignore[assignment]
        self.assertTrue(await session.send("e7e8q"))
        self.assertEqual(conn.sent, ["e7e8q"])

    async def test_restart_closes_the_current_connection(self) -> None:
        session = TransportSession("ws://test", Recorder(), connector=FakeConnector())
        conn = FakeConnection([])
        session._ws = conn  # type: ignore[assignment]
        await session.restart()
        self.assertIs(conn.state, State.CLOSED)
        self.assertFalse(session.is_open)
        with self.assertLogs("chessclient.transport", level="ERROR"):
            self.assertFalse(await session.send("e2e4"))
        self.assertEqual(conn.sent, [])

    async def test_run_retries_forever_with_fixed_delay(self) -> None:
        recorder = Recorder()
        connector = FakeConnector()
        stop = asyncio.Event()
        session = TransportSession(
            "ws://test", recorder, reconnect_delay=0.05, connector=connector
        )

        def on_close(reason: str) -> None:
            recorder.events.append(("close", reason))
            if len(connector.calls) >= 3:
                stop.set()

        recorder.on_close = on_close  # type: ignore[method-assign]

        with self.assertLogs("chessclient.transport", level="ERROR"):
            await asyncio.wait_for(session.run(stop), timeout=5)

        self.assertEqual(len(connector.calls), 3)
        gaps = [b - a for a, b in zip(connector.call_times, connector.call_times[1:])]
        for gap in gaps:
            self.assertGreaterEqual(gap, 0.04)
        self.assertEqual([k for k, _ in recorder.events].count("close"), 3)

    async def test_stop_closes_an_open_connection(self) -> None:
        stop = asyncio.Event()
        release = asyncio.Event()

        class HangingConnection(FakeConnection):
            async def _iterate(self):
                await release.wait()
                return
                yield  # pragma: no cover

            async def close(self) -> None:
                self.state = State.CLOSED
                release.set()

        recorder = Recorder()
        session = TransportSession(
            "ws://test", recorder, connector=FakeConnector([HangingConnection([])])
        )
        task = asyncio.create_task(session.run(stop))
        await asyncio.sleep(0.01)
        self.assertTrue(session.is_open)

        stop.set()
        await asyncio.wait_for(task, timeout=2)
        self.assertEqual([k for k, _ in recorder.events], ["open", "close"])


class LoopbackTests(unittest.IsolatedAsyncioTestCase):
    async def test_round_trip_against_real_server(self) -> None:
        received: list[str] = []

        async def server_handler(ws) -> None:
            await ws.send('{"type": "game_start", "role": "Player 1 (White)"}')
            received.append(await ws.recv())
            await ws.close(1000, "game over")

        recorder = Recorder()
        sends: list[asyncio.Task] = []

        async with serve(server_handler, "127.0.0.1", 0) as server:
            port = server.sockets[0].getsockname()[1]
            session = TransportSession(f"ws://127.0.0.1:{port}", recorder)

            def on_message(text: str) -> None:
                recorder.events.append(("message", text))
                sends.append(asyncio.get_running_loop().create_task(session.send("e2e4")))

            recorder.on_message = on_message  # type: ignore[method-assign]
            await asyncio.wait_for(session.connect(), timeout=5)

        self.assertEqual(received, ["e2e4"])
        self.assertTrue(all(task.result() for task in sends))
        kinds = [kind for kind, _ in recorder.events]
        self.assertEqual(kinds, ["open", "message", "close"])
        self.assertIn("game over", recorder.events[-1][1])
