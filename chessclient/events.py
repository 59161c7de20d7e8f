"""
Typed server frames — the shared language between the protocol decoder and the view model.

protocol.decode_frame() produces a ServerFrame. GameViewModel.apply() is the
only consumer that mutates state from it. Every facet of a frame is optional;
the kind-specific part lives in ServerFrame.event as one of the dataclasses
below, so consumers can pattern-match on it instead of poking at raw dicts.

All frames are frozen (immutable): applying the same frame twice must give the
same result, and nothing downstream is allowed to edit what the server said.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from chessclient.board import Board

Seat = Literal["PlayerWhite", "PlayerBlack"]
ConnectionStatus = Literal["connecting", "connected", "disconnected-retrying"]
SpecialMove = Literal["castling_kingside", "castling_queenside", "en_passant"]


@dataclass(frozen=True)
class StatusText:
    text: str
    is_error: bool = False   # styling only


@dataclass(frozen=True)
class BoardSnapshot:
    board: Board
    last_move: tuple[str, str] | None = None   # (from, to) labels from a 4-char move code


@dataclass(frozen=True)
class MoveDetails:
    """Optional annotations carried by opponent_move / move_ack frames."""

    move: str | None = None
    special_move: SpecialMove | None = None
    captured: str | None = None   # raw piece token, e.g. "bN"
    promoted: str | None = None
    is_check: bool = False
    is_checkmate: bool = False


@dataclass(frozen=True)
class GameStartEvent:
    pass


@dataclass(frozen=True)
class OpponentMoveEvent:
    details: MoveDetails


@dataclass(frozen=True)
class MoveAckEvent:
    details: MoveDetails


@dataclass(frozen=True)
class OpponentDisconnectedEvent:
    pass


@dataclass(frozen=True)
class GameOverEvent:
    result: str | None = None    # "checkmate" | "stalemate" | anything else
    winner: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class ServerErrorEvent:
    message: str


@dataclass(frozen=True)
class UnknownEvent:
    kind: str


# Union type for type-safe pattern matching in consumers
ServerEvent = (
    GameStartEvent
    | OpponentMoveEvent
    | MoveAckEvent
    | OpponentDisconnectedEvent
    | GameOverEvent
    | ServerErrorEvent
    | UnknownEvent
)


@dataclass(frozen=True)
class ServerFrame:
    """One decoded inbound frame. Facets are applied in field order."""

    status: StatusText | None = None
    seat: Seat | None = None
    board: BoardSnapshot | None = None
    event: ServerEvent | None = None
