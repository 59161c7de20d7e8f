"""
Client-side snapshot of the game as the server last described it.

GameViewModel.apply() is the single entry point that mutates it: one decoded
ServerFrame in, facets applied in a fixed order (status, seat, board, event).
The renderer and the input state machine only read it. The model never works
out legality, check or turn order on its own; every field is either a copy of
what the server asserted or display text derived from it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import chess

from chessclient.board import Board, Coord, find_king
from chessclient.events import (
    GameOverEvent,
    GameStartEvent,
    MoveAckEvent,
    MoveDetails,
    OpponentDisconnectedEvent,
    OpponentMoveEvent,
    Seat,
    ServerErrorEvent,
    ServerFrame,
    UnknownEvent,
)
from chessclient.protocol import SEAT_LABELS, describe_move, game_over_message

logger = logging.getLogger(__name__)

NO_LAST_MOVE_TEXT = "Last move: N/A"
DISCONNECTED_TEXT = "Disconnected. Attempting to reconnect..."
OPPONENT_DISCONNECTED_TEXT = "Opponent disconnected. Game over."


@dataclass
class ApplyResult:
    """What the caller has to do after a frame has been applied."""

    reset_selection: bool = False   # the server rejected something; drop any pending selection
    game_ended: bool = False


@dataclass
class GameViewModel:
    board: Board | None = None
    seat: Seat | None = None
    my_turn: bool = False
    last_move: tuple[str, str] | None = None
    terminal: bool = False
    check_square: Coord | None = None   # own king, when the opponent's move gave check

    status_text: str = "Connecting..."
    status_is_error: bool = False
    turn_text: str = "Turn: Waiting for game"
    last_move_text: str = NO_LAST_MOVE_TEXT
    game_over_text: str | None = None

    # ------------------------------------------------------------------ #
    # Read-only views                                                     #
    # ------------------------------------------------------------------ #

    @property
    def my_color(self) -> chess.Color | None:
        if self.seat is None:
            return None
        return chess.WHITE if self.seat == "PlayerWhite" else chess.BLACK

    @property
    def role_text(self) -> str:
        if self.seat is None:
            return "Your Role: Not assigned"
        return f"Your Role: {SEAT_LABELS[self.seat]}"

    @property
    def accepts_input(self) -> bool:
        return self.my_turn and self.board is not None and not self.terminal

    # ------------------------------------------------------------------ #
    # Mutation                                                            #
    # ------------------------------------------------------------------ #

    def reset(self, status_text: str = DISCONNECTED_TEXT) -> None:
        """Back to the unassigned, board-less state (connection lost)."""
        self.board = None
        self.seat = None
        self.my_turn = False
        self.last_move = None
        self.terminal = False
        self.check_square = None
        self.status_text = status_text
        self.status_is_error = True
        self.turn_text = "Turn: Disconnected"
        self.last_move_text = NO_LAST_MOVE_TEXT
        self.game_over_text = None

    def set_status(self, text: str, *, is_error: bool = False) -> None:
        self.status_text = text
        self.status_is_error = is_error

    def apply(self, frame: ServerFrame) -> ApplyResult:
        result = ApplyResult()

        if frame.status is not None:
            self.set_status(frame.status.text, is_error=frame.status.is_error)

        if frame.seat is not None:
            self._assign_seat(frame.seat)

        if frame.board is not None:
            self.board = frame.board.board
            # A fresh snapshot redraws everything; the check mark only survives
            # if this same frame asserts check again.
            self.check_square = None
            if frame.board.last_move is not None:
                self.last_move = frame.board.last_move

        match frame.event:
            case None:
                pass
            case GameStartEvent():
                self.my_turn = self.seat == "PlayerWhite"
                self.terminal = False
                self.game_over_text = None
                self.check_square = None
                self.turn_text = f"Turn: {SEAT_LABELS['PlayerWhite']}"
                self.last_move_text = NO_LAST_MOVE_TEXT
                if frame.board is None:
                    logger.warning("game_start frame is missing board data")
            case OpponentMoveEvent(details=details):
                self.my_turn = True
                self.turn_text = "Turn: Your turn"
                self._record_move(details)
                self.check_square = self._own_king() if details.is_check else None
            case MoveAckEvent(details=details):
                self.my_turn = False
                self.turn_text = f"Turn: {self._opponent_label()}'s turn"
                self._record_move(details)
            case OpponentDisconnectedEvent():
                self.my_turn = False
                self.terminal = True
                self.turn_text = "Game Over: Opponent Disconnected"
                self.set_status(OPPONENT_DISCONNECTED_TEXT)
                self.game_over_text = OPPONENT_DISCONNECTED_TEXT
                result.game_ended = True
            case GameOverEvent():
                self.my_turn = False
                self.terminal = True
                self.turn_text = "Game Over"
                self.game_over_text = game_over_message(frame.event)
                result.game_ended = True
            case ServerErrorEvent(message=message):
                logger.warning("Server error: %s", message)
                result.reset_selection = True
            case UnknownEvent(kind=kind):
                logger.info("Ignoring server frame of type %r", kind)

        return result

    # ------------------------------------------------------------------ #
    # Internal                                                            #
    # ------------------------------------------------------------------ #

    def _assign_seat(self, seat: Seat) -> None:
        if self.seat is None:
            self.seat = seat
            logger.info("Assigned seat: %s", SEAT_LABELS[seat])
        elif self.seat != seat:
            logger.warning(
                "Ignoring seat change from %s to %s on the same connection",
                SEAT_LABELS[self.seat],
                SEAT_LABELS[seat],
            )

    def _record_move(self, details: MoveDetails) -> None:
        description = describe_move(details)
        if description is not None:
            self.last_move_text = f"Last move: {description}"

    def _own_king(self) -> Coord | None:
        if self.board is None or self.my_color is None:
            return None
        return find_king(self.board, self.my_color)

    def _opponent_label(self) -> str:
        opponent: Seat = "PlayerBlack" if self.seat == "PlayerWhite" else "PlayerWhite"
        return SEAT_LABELS[opponent]
