"""
WebSocket transport session.

Owns the connection lifecycle and nothing else: it surfaces open / message /
close / error to a TransportHandler and never interprets frames. When a
connection ends for any reason the handler gets on_close() and the session
retries after a fixed delay, forever, until the stop event is set.

Everything runs on the caller's event loop; handlers are plain (synchronous)
methods so each one runs to completion before the next network event.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Protocol

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.protocol import State

from chessclient.events import ConnectionStatus

logger = logging.getLogger(__name__)

DEFAULT_RECONNECT_DELAY = 3.0

Connector = Callable[..., Any]   # websockets.asyncio.client.connect or a test double


class TransportHandler(Protocol):
    def on_open(self) -> None: ...

    def on_message(self, text: str) -> None: ...

    def on_close(self, reason: str) -> None: ...

    def on_error(self, exc: Exception) -> None: ...


class TransportSession:
    def __init__(
        self,
        url: str,
        handler: TransportHandler,
        *,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        open_timeout: float = 10.0,
        connector: Connector = connect,
    ) -> None:
        self.url = url
        self.reconnect_delay = reconnect_delay
        self.open_timeout = open_timeout
        self.status: ConnectionStatus = "connecting"
        self._handler = handler
        self._connector = connector
        self._ws: ClientConnection | None = None

    @property
    def is_open(self) -> bool:
        return self._ws is not None and self._ws.state is State.OPEN

    # ------------------------------------------------------------------ #
    # Lifecycle                                                           #
    # ------------------------------------------------------------------ #

    async def run(self, stop_event: asyncio.Event) -> None:
        """Connect, pump, reconnect after a fixed delay, until *stop_event* is set."""
        closer = asyncio.create_task(self._close_when_stopped(stop_event))
        try:
            while not stop_event.is_set():
                await self.connect()
                if stop_event.is_set():
                    break
                logger.info("Reconnecting in %.1fs", self.reconnect_delay)
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self.reconnect_delay)
                except TimeoutError:
                    pass
        finally:
            closer.cancel()

    async def connect(self) -> None:
        """Open one connection and pump it until it closes. Never raises transport errors."""
        self._set_status("connecting")
        reason = "Unknown"
        try:
            async with self._connector(self.url, open_timeout=self.open_timeout) as ws:
                self._ws = ws
                self._set_status("connected")
                self._handler.on_open()
                async for raw in ws:
                    text = raw if isinstance(raw, str) else raw.decode("utf-8", errors="replace")
                    self._handler.on_message(text)
                reason = _close_reason(ws)
        except (OSError, TimeoutError, WebSocketException) as exc:
            logger.error("Connection to %s failed: %s", self.url, exc)
            reason = str(exc) or exc.__class__.__name__
            self._handler.on_error(exc)
        finally:
            self._ws = None
            self._set_status("disconnected-retrying")
        self._handler.on_close(reason)

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()

    async def restart(self) -> None:
        """Drop the current connection; the run loop reconnects as after any close."""
        await self.close()

    # ------------------------------------------------------------------ #
    # Sending                                                             #
    # ------------------------------------------------------------------ #

    async def send(self, text: str) -> bool:
        """Forward *text* if the connection is open. Returns False (and logs) otherwise."""
        if not self.is_open:
            logger.error("WebSocket not connected. Cannot send %r.", text)
            return False
        assert self._ws is not None
        try:
            await self._ws.send(text)
        except ConnectionClosed as exc:
            logger.error("Connection closed while sending %r: %s", text, exc)
            return False
        return True

    # ------------------------------------------------------------------ #
    # Internal                                                            #
    # ------------------------------------------------------------------ #

    async def _close_when_stopped(self, stop_event: asyncio.Event) -> None:
        await stop_event.wait()
        await self.close()

    def _set_status(self, status: ConnectionStatus) -> None:
        if status != self.status:
            logger.debug("Transport %s -> %s", self.status, status)
        self.status = status


def _close_reason(ws: ClientConnection) -> str:
    return f"{ws.close_reason or 'Unknown'} (code {ws.close_code})"
