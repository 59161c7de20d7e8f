"""
Protocol decoder and move-description helpers.

decode_frame() turns one inbound text frame into a typed ServerFrame. It never
touches client state: a frame that can't be parsed raises ProtocolError and the
caller keeps its previous view. Field-level problems (a malformed board, a
mistyped optional field, an unknown event type) are degraded to safe defaults
and reported as log warnings rather than failing the whole frame.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from chessclient.board import (
    BOARD_SIZE,
    Board,
    Row,
    empty_board,
    empty_row,
    parse_piece_token,
    parse_square_label,
    token_glyph,
)
from chessclient.events import (
    BoardSnapshot,
    GameOverEvent,
    GameStartEvent,
    MoveAckEvent,
    MoveDetails,
    OpponentDisconnectedEvent,
    OpponentMoveEvent,
    Seat,
    ServerErrorEvent,
    ServerEvent,
    ServerFrame,
    StatusText,
    UnknownEvent,
)

logger = logging.getLogger(__name__)

SEAT_LABELS: dict[Seat, str] = {
    "PlayerWhite": "Player 1 (White)",
    "PlayerBlack": "Player 2 (Black)",
}

_SEAT_ALIASES: dict[str, Seat] = {
    "player 1 (white)": "PlayerWhite",
    "playerwhite": "PlayerWhite",
    "white": "PlayerWhite",
    "player 2 (black)": "PlayerBlack",
    "playerblack": "PlayerBlack",
    "black": "PlayerBlack",
}

_SPECIAL_MOVE_TAGS = {
    "castling_kingside": "O-O",
    "castling_queenside": "O-O-O",
    "en_passant": "e.p.",
}


class ProtocolError(Exception):
    """Raised when an inbound frame cannot be parsed at all."""

    def __init__(self, message: str, raw: str) -> None:
        self.raw = raw
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Frames                                                                       #
# --------------------------------------------------------------------------- #

def decode_frame(text: str) -> ServerFrame:
    """
    Decode one inbound frame.

    Raises:
        ProtocolError: the frame is not valid JSON or not a JSON object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"frame is not valid JSON: {exc.msg}", text) from exc
    except (ValueError, RecursionError) as exc:
        # Oversized integer literals and very deep nesting
        raise ProtocolError(f"frame could not be decoded: {exc}", text) from exc
    if not isinstance(data, dict):
        raise ProtocolError(
            f"frame must be a JSON object, got {type(data).__name__}", text
        )

    kind = _optional_str(data, "type")
    message = _optional_str(data, "message")

    status = StatusText(message, is_error=kind == "error") if message else None

    seat: Seat | None = None
    if data.get("role"):
        seat = decode_seat(data["role"])

    snapshot: BoardSnapshot | None = None
    if data.get("board") is not None:
        board, notes = decode_board(data["board"])
        for note in notes:
            logger.warning("Malformed board payload: %s", note)
        snapshot = BoardSnapshot(board=board, last_move=_last_move(data.get("move")))

    event = _decode_event(kind, data) if kind else None

    return ServerFrame(status=status, seat=seat, board=snapshot, event=event)


def decode_seat(raw: Any) -> Seat | None:
    if isinstance(raw, str):
        seat = _SEAT_ALIASES.get(raw.strip().lower())
        if seat is not None:
            return seat
    logger.warning("Ignoring unrecognised role %r", raw)
    return None


def decode_board(raw: Any) -> tuple[Board, list[str]]:
    """
    Sanitise a board payload into an 8x8 Board.

    Never raises. A payload with the wrong number of rows becomes an all-empty
    board; a row of the wrong length becomes an empty row; an unknown cell token
    becomes an empty cell. Each substitution is described in the returned notes.
    """
    if not isinstance(raw, list) or len(raw) != BOARD_SIZE:
        got = f"{len(raw)} rows" if isinstance(raw, list) else type(raw).__name__
        return empty_board(), [
            f"expected {BOARD_SIZE} rows, got {got}; showing an empty board"
        ]

    notes: list[str] = []
    rows: list[Row] = []
    for row_index, raw_row in enumerate(raw):
        if not isinstance(raw_row, list) or len(raw_row) != BOARD_SIZE:
            notes.append(f"row {row_index} is not {BOARD_SIZE} cells; drawing it empty")
            rows.append(empty_row())
            continue
        cells = []
        for col, token in enumerate(raw_row):
            if token is None:
                cells.append(None)
                continue
            try:
                if not isinstance(token, str):
                    raise ValueError(f"unrecognised piece token {token!r}")
                cells.append(parse_piece_token(token))
            except ValueError as exc:
                notes.append(f"row {row_index} col {col}: {exc}; drawing it empty")
                cells.append(None)
        rows.append(tuple(cells))
    return tuple(rows), notes


# --------------------------------------------------------------------------- #
# Move descriptions                                                            #
# --------------------------------------------------------------------------- #

def describe_move(details: MoveDetails) -> str | None:
    """
    Human-readable summary of a move frame, e.g. "E1G1 (O-O) +".

    Returns None when the frame carries no move code.
    """
    if not details.move:
        return None
    text = details.move.upper()
    if details.special_move:
        text += f" ({_SPECIAL_MOVE_TAGS[details.special_move]})"
    if details.captured:
        text += f" (Captured: {token_glyph(details.captured)})"
    if details.promoted:
        text += f" → {token_glyph(details.promoted)}"
    if details.is_check:
        text += " +"
    if details.is_checkmate:
        text += "#"
    return text


def game_over_message(event: GameOverEvent) -> str:
    if event.result == "checkmate":
        return f"Game over: {event.winner or 'Unknown player'} wins by checkmate"
    if event.result == "stalemate":
        return "Game over: draw by stalemate"
    return f"Game over: {event.message or 'The game has ended.'}"


# --------------------------------------------------------------------------- #
# Internal                                                                     #
# --------------------------------------------------------------------------- #

def _decode_event(kind: str, data: dict[str, Any]) -> ServerEvent:
    match kind:
        case "game_start":
            return GameStartEvent()
        case "opponent_move":
            return OpponentMoveEvent(_move_details(data))
        case "move_ack":
            return MoveAckEvent(_move_details(data))
        case "opponent_disconnected":
            return OpponentDisconnectedEvent()
        case "game_over":
            return GameOverEvent(
                result=_optional_str(data, "result"),
                winner=_optional_str(data, "winner"),
                message=_optional_str(data, "message"),
            )
        case "error":
            return ServerErrorEvent(message=_optional_str(data, "message") or "")
        case _:
            return UnknownEvent(kind=kind)


def _move_details(data: dict[str, Any]) -> MoveDetails:
    special = _optional_str(data, "specialMove")
    if special is not None and special not in _SPECIAL_MOVE_TAGS:
        logger.warning("Ignoring unknown specialMove %r", special)
        special = None
    return MoveDetails(
        move=_optional_str(data, "move"),
        special_move=special,  # type: ignore[arg-type]
        captured=_optional_str(data, "captured"),
        promoted=_optional_str(data, "promoted"),
        is_check=_optional_bool(data, "isCheck"),
        is_checkmate=_optional_bool(data, "isCheckmate"),
    )


def _last_move(raw: Any) -> tuple[str, str] | None:
    if not isinstance(raw, str) or len(raw) != 4:
        return None
    try:
        parse_square_label(raw[:2])
        parse_square_label(raw[2:])
    except ValueError:
        logger.warning("Ignoring malformed move code %r", raw)
        return None
    return raw[:2].lower(), raw[2:].lower()


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    logger.warning("Ignoring non-string %s field: %r", key, value)
    return None


def _optional_bool(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    logger.warning("Ignoring non-boolean %s field: %r", key, value)
    return False
