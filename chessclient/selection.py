"""
Move input state machine.

Turns square clicks into wire move strings:

    Idle --click own piece--> Selected --click same square--> Idle
                              Selected --click elsewhere----> Idle (emits "e2e4")
                              Selected --pawn to far rank---> AwaitingPromotion
    AwaitingPromotion --choose kind--> Idle (emits "e7e8q")

Nothing here checks legality. A sent move is not confirmed locally: the machine
goes straight back to Idle and the next server frame (move_ack or error)
decides what actually happened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import chess

from chessclient.board import (
    PROMOTION_KINDS,
    BOARD_SIZE,
    Coord,
    encode_move,
    glyph,
    on_board,
    piece_at,
    square_label,
)
from chessclient.view_model import GameViewModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Selected:
    origin: Coord
    piece: chess.Piece


@dataclass(frozen=True)
class AwaitingPromotion:
    origin: Coord
    destination: Coord


SelectionState = Idle | Selected | AwaitingPromotion

IDLE = Idle()


def far_row(color: chess.Color) -> int:
    """Logical row a pawn of *color* promotes on."""
    return BOARD_SIZE - 1 if color == chess.WHITE else 0


class MoveInputMachine:
    def __init__(self) -> None:
        self.state: SelectionState = IDLE

    def reset(self) -> None:
        self.state = IDLE

    def click(self, coord: Coord, view: GameViewModel) -> str | None:
        """
        Feed one click on logical square *coord*.

        Returns the move string to send, or None when the click only changed
        (or didn't change) the selection.
        """
        if not self._input_allowed(view):
            return None
        if not on_board(coord):
            logger.debug("Ignoring click outside the board: %r", coord)
            return None

        match self.state:
            case Idle():
                self._select(coord, view)
                return None
            case Selected(origin=origin, piece=piece):
                if coord == origin:
                    self.state = IDLE
                    logger.debug("Deselected %s", square_label(origin))
                    return None
                if piece.piece_type == chess.PAWN and coord[0] == far_row(piece.color):
                    self.state = AwaitingPromotion(origin, coord)
                    logger.info(
                        "Promote your pawn: choose q (queen), r (rook), b (bishop) or n (knight)"
                    )
                    return None
                self.state = IDLE
                return encode_move(origin, coord)
            case AwaitingPromotion():
                # Abandon the pending promotion; the click starts a fresh selection.
                self.state = IDLE
                logger.info("Promotion cancelled")
                self._select(coord, view)
                return None

    def choose_promotion(self, kind: chess.PieceType, view: GameViewModel) -> str | None:
        """Complete a pending promotion. Returns the 5-character move string."""
        if not self._input_allowed(view):
            return None
        match self.state:
            case AwaitingPromotion(origin=origin, destination=destination):
                if kind not in PROMOTION_KINDS:
                    logger.warning("Cannot promote to %s", chess.piece_name(kind))
                    return None
                self.state = IDLE
                return encode_move(origin, destination, promotion=kind)
            case _:
                logger.debug("No promotion pending")
                return None

    # ------------------------------------------------------------------ #
    # Internal                                                            #
    # ------------------------------------------------------------------ #

    def _input_allowed(self, view: GameViewModel) -> bool:
        if view.board is None:
            logger.info("Board state not available.")
            return False
        if view.terminal:
            logger.info("The game is over.")
            return False
        if not view.my_turn:
            logger.info("Not your turn.")
            return False
        return True

    def _select(self, coord: Coord, view: GameViewModel) -> None:
        assert view.board is not None
        piece = piece_at(view.board, coord)
        if piece is None:
            return
        if view.my_color is None or piece.color != view.my_color:
            logger.warning("Cannot select opponent's piece at %s.", square_label(coord))
            return
        self.state = Selected(coord, piece)
        logger.info("Selected %s at %s", glyph(piece), square_label(coord))
