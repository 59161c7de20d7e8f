"""
Chess client — the core orchestrator.

ChessClient owns the GameViewModel and the MoveInputMachine and is the
TransportHandler for its TransportSession. It is the only place where:

  server frames are decoded and applied  (on_message)
  derived state is reset                 (on_close)
  user input is turned into sends        (click / choose_promotion / handle_command)

All of these run on the asyncio event loop thread, one at a time, so the
view model and the selection are never seen half-updated.

Usage:
    client = ChessClient(config, display=BoardDisplay(...))
    await client.run(stop_event)
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading

from websockets.asyncio.client import connect

from chessclient.board import Coord, parse_promotion_kind, parse_square_label
from chessclient.cli.display import BoardDisplay
from chessclient.config import Config
from chessclient.frame_logger import FrameLogger
from chessclient.protocol import ProtocolError, decode_frame
from chessclient.renderer import BoardFrame, render_frame
from chessclient.selection import AwaitingPromotion, MoveInputMachine
from chessclient.transport import Connector, TransportSession
from chessclient.view_model import GameViewModel

logger = logging.getLogger(__name__)

_DISPLAY_COORD = re.compile(r"^\s*(\d)\s*[, ]\s*(\d)\s*$")
_QUIT_COMMANDS = {"quit", "exit"}
_CANCEL_COMMANDS = {"cancel"}


class ChessClient:
    def __init__(
        self,
        config: Config,
        *,
        display: BoardDisplay | None = None,
        frame_logger: FrameLogger | None = None,
        connector: Connector = connect,
    ) -> None:
        self.view = GameViewModel()
        self.input = MoveInputMachine()
        self.transport = TransportSession(
            config.client.server_url,
            self,
            reconnect_delay=config.client.reconnect_delay,
            open_timeout=config.client.open_timeout,
            connector=connector,
        )
        self._display = display
        self._frame_logger = frame_logger

    # ------------------------------------------------------------------ #
    # Running                                                             #
    # ------------------------------------------------------------------ #

    async def run(self, stop_event: asyncio.Event) -> None:
        """Run the transport and the stdin reader until *stop_event* is set."""
        self.redraw()
        reader = asyncio.create_task(self._read_input(stop_event))
        try:
            await self.transport.run(stop_event)
        finally:
            reader.cancel()

    async def _read_input(self, stop_event: asyncio.Event) -> None:
        # input() blocks, so it runs on a daemon thread (a pending read must not
        # keep the process alive on exit); lines are handled on the loop thread.
        loop = asyncio.get_running_loop()
        lines: asyncio.Queue[str | None] = asyncio.Queue()

        def _pump() -> None:
            while True:
                try:
                    line: str | None = input()
                except EOFError:
                    line = None
                try:
                    loop.call_soon_threadsafe(lines.put_nowait, line)
                except RuntimeError:   # loop already closed
                    return
                if line is None:
                    return

        threading.Thread(target=_pump, name="stdin-reader", daemon=True).start()
        while not stop_event.is_set():
            line = await lines.get()
            if line is None or not await self.handle_command(line):
                stop_event.set()
                return

    # ------------------------------------------------------------------ #
    # TransportHandler                                                    #
    # ------------------------------------------------------------------ #

    def on_open(self) -> None:
        logger.info("Connected to %s", self.transport.url)
        if self._frame_logger:
            self._frame_logger.log_event(f"connected to {self.transport.url}")
        self.view.set_status("Connected. Waiting for game...")
        self.redraw()

    def on_message(self, text: str) -> None:
        if self._frame_logger:
            self._frame_logger.log_inbound(text)
        try:
            frame = decode_frame(text)
        except ProtocolError as exc:
            logger.error("Error parsing server frame: %s", exc)
            self.view.set_status("Error processing server message.", is_error=True)
            self.redraw()
            return

        result = self.view.apply(frame)
        if result.reset_selection or result.game_ended:
            self.input.reset()
        self.redraw()

    def on_close(self, reason: str) -> None:
        logger.error("Disconnected: %s", reason)
        if self._frame_logger:
            self._frame_logger.log_event(f"disconnected: {reason}")
        self.view.reset()
        self.input.reset()
        self.redraw()

    def on_error(self, exc: Exception) -> None:
        self.view.set_status("WebSocket connection error.", is_error=True)

    # ------------------------------------------------------------------ #
    # User input                                                          #
    # ------------------------------------------------------------------ #

    async def click(self, coord: Coord) -> None:
        """Single input-dispatch point: a click on logical square *coord*."""
        move = self.input.click(coord, self.view)
        if move is not None:
            await self._send_move(move)
        self.redraw()

    async def click_display(self, display: Coord) -> None:
        coord = self.frame().hit_test(display)
        if coord is None:
            logger.info("No square at display position %d,%d", display[0] + 1, display[1] + 1)
            self.redraw()
            return
        await self.click(coord)

    async def choose_promotion(self, text: str) -> None:
        kind = parse_promotion_kind(text)
        if kind is None:
            logger.info("Unknown promotion piece %r; choose q, r, b or n", text)
            self.redraw()
            return
        move = self.input.choose_promotion(kind, self.view)
        if move is not None:
            await self._send_move(move)
        self.redraw()

    async def handle_command(self, line: str) -> bool:
        """
        Dispatch one line of user input. Returns False when the user asked to quit.

        Accepted input: a square label ("e2"), a 1-based display position
        ("7,5" = row 7 from the top, column 5 from the left), a promotion
        piece while one is pending ("q" / "queen"), "cancel", "new" and "quit".
        """
        command = line.strip().lower()
        if not command:
            return True
        if command in _QUIT_COMMANDS:
            return False
        if command == "new":
            logger.info("Starting a new game...")
            await self.transport.restart()
            return True
        if command in _CANCEL_COMMANDS:
            self.input.reset()
            logger.info("Selection cleared")
            self.redraw()
            return True
        if isinstance(self.input.state, AwaitingPromotion) and parse_promotion_kind(command):
            await self.choose_promotion(command)
            return True

        match_display = _DISPLAY_COORD.match(command)
        if match_display:
            row, col = (int(g) - 1 for g in match_display.groups())
            await self.click_display((row, col))
            return True

        try:
            coord = parse_square_label(command)
        except ValueError:
            logger.info("Unrecognised input %r", line.strip())
            self.redraw()
            return True
        await self.click(coord)
        return True

    # ------------------------------------------------------------------ #
    # Rendering                                                           #
    # ------------------------------------------------------------------ #

    def frame(self) -> BoardFrame:
        return render_frame(self.view, self.input.state)

    def redraw(self) -> None:
        if self._display is not None:
            self._display.draw(self.view, self.frame(), self.transport.status)

    # ------------------------------------------------------------------ #
    # Internal                                                            #
    # ------------------------------------------------------------------ #

    async def _send_move(self, move: str) -> None:
        logger.info("Attempting move: %s", move)
        if await self.transport.send(move) and self._frame_logger:
            self._frame_logger.log_outbound(move)
