"""
Logical <-> display coordinate mapping.

White (or an unassigned seat) sees rank 8 on the top row and file 'a' on the
left. Black sees the board rotated: rank 1 on top and file 'h' on the left, so
each player's own back rank is at the bottom. Square shading is always taken
from logical coordinates so the checkerboard doesn't change with orientation.
"""

from __future__ import annotations

from typing import Iterator

import chess

from chessclient.board import BOARD_SIZE, Coord
from chessclient.events import Seat

_LAST = BOARD_SIZE - 1


def is_flipped(seat: Seat | None) -> bool:
    return seat == "PlayerBlack"


def to_display(logical: Coord, seat: Seat | None) -> Coord:
    row, col = logical
    if is_flipped(seat):
        return row, _LAST - col
    return _LAST - row, col


def to_logical(display: Coord, seat: Seat | None) -> Coord:
    display_row, display_col = display
    if is_flipped(seat):
        return display_row, _LAST - display_col
    return _LAST - display_row, display_col


def is_light(logical: Coord) -> bool:
    row, col = logical
    return (row + col) % 2 == 1


def display_order(seat: Seat | None) -> Iterator[tuple[Coord, Coord]]:
    """Yield (display, logical) pairs top-left to bottom-right, row by row."""
    for display_row in range(BOARD_SIZE):
        for display_col in range(BOARD_SIZE):
            display = (display_row, display_col)
            yield display, to_logical(display, seat)


def file_labels(seat: Seat | None) -> tuple[str, ...]:
    """File letters left to right."""
    return tuple(reversed(chess.FILE_NAMES)) if is_flipped(seat) else tuple(chess.FILE_NAMES)


def rank_labels(seat: Seat | None) -> tuple[str, ...]:
    """Rank digits top to bottom."""
    return tuple(chess.RANK_NAMES) if is_flipped(seat) else tuple(reversed(chess.RANK_NAMES))
