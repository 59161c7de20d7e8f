"""
Board projection: view model + selection -> BoardFrame.

render_frame() is pure. It rebuilds all 64 cells from scratch on every call
(no diffing against the previous frame) in display order for the client's
seat. Surfaces (the Rich CLI, tests) draw the frame; input handlers resolve a
display coordinate back to a logical square through BoardFrame.hit_test().
"""

from __future__ import annotations

from dataclasses import dataclass

import chess

from chessclient.board import (
    BOARD_SIZE,
    PROMOTION_KINDS,
    Coord,
    empty_board,
    glyph,
    on_board,
    square_label,
)
from chessclient.orientation import display_order, file_labels, is_flipped, is_light, rank_labels
from chessclient.selection import AwaitingPromotion, Selected, SelectionState
from chessclient.view_model import GameViewModel


@dataclass(frozen=True)
class CellView:
    display: Coord
    logical: Coord
    label: str
    light: bool
    piece: chess.Piece | None
    glyph: str
    last_move_from: bool = False
    last_move_to: bool = False
    selected: bool = False
    in_check: bool = False


@dataclass(frozen=True)
class BoardFrame:
    cells: tuple[CellView, ...]          # 64 cells, display row-major
    file_labels: tuple[str, ...]         # left to right
    rank_labels: tuple[str, ...]         # top to bottom
    flipped: bool
    promotion_choices: tuple[chess.Piece, ...] = ()   # non-empty while a promotion is pending
    game_over_text: str | None = None

    def cell_at(self, display: Coord) -> CellView:
        row, col = display
        return self.cells[row * BOARD_SIZE + col]

    def hit_test(self, display: Coord) -> Coord | None:
        """Logical square under a display coordinate, or None off the board."""
        if not on_board(display):
            return None
        return self.cell_at(display).logical

    def rows(self) -> list[tuple[CellView, ...]]:
        return [
            self.cells[i:i + BOARD_SIZE]
            for i in range(0, len(self.cells), BOARD_SIZE)
        ]


def render_frame(view: GameViewModel, selection: SelectionState) -> BoardFrame:
    board = view.board if view.board is not None else empty_board()
    last_from, last_to = view.last_move or (None, None)
    selected = selection.origin if isinstance(selection, Selected) else None

    cells: list[CellView] = []
    for display, logical in display_order(view.seat):
        row, col = logical
        piece = board[row][col]
        label = square_label(logical)
        cells.append(
            CellView(
                display=display,
                logical=logical,
                label=label,
                light=is_light(logical),
                piece=piece,
                glyph=glyph(piece),
                last_move_from=label == last_from,
                last_move_to=label == last_to,
                selected=logical == selected,
                in_check=logical == view.check_square,
            )
        )

    choices: tuple[chess.Piece, ...] = ()
    if isinstance(selection, AwaitingPromotion) and view.my_color is not None:
        choices = tuple(chess.Piece(kind, view.my_color) for kind in PROMOTION_KINDS)

    return BoardFrame(
        cells=tuple(cells),
        file_labels=file_labels(view.seat),
        rank_labels=rank_labels(view.seat),
        flipped=is_flipped(view.seat),
        promotion_choices=choices,
        game_over_text=view.game_over_text,
    )
