"""
Board primitives shared by the decoder, the renderer and the input state machine.

The server sends pieces as two-character tokens ("wP", "bK", "" for empty).
They are parsed into python-chess Piece objects so that glyphs, kind letters
and wire move strings come from python-chess instead of local lookup tables.

Squares are addressed by logical (row, col): row 0 is rank 1 and col 0 is
file 'a', which is python-chess's (rank_index, file_index) pairing.
"""

from __future__ import annotations

import chess

BOARD_SIZE = 8

Coord = tuple[int, int]
Row = tuple[chess.Piece | None, ...]
Board = tuple[Row, ...]

# Choices offered when a pawn reaches the far rank, in display order.
PROMOTION_KINDS: tuple[chess.PieceType, ...] = (
    chess.QUEEN,
    chess.ROOK,
    chess.BISHOP,
    chess.KNIGHT,
)
PROMOTION_LETTERS: frozenset[str] = frozenset(chess.piece_symbol(k) for k in PROMOTION_KINDS)

_TOKEN_COLORS = {"w": chess.WHITE, "b": chess.BLACK}
_TOKEN_KINDS = "PRNBQK"


# ------------------------------------------------------------------ #
# Boards                                                              #
# ------------------------------------------------------------------ #

def empty_row() -> Row:
    return (None,) * BOARD_SIZE


def empty_board() -> Board:
    return tuple(empty_row() for _ in range(BOARD_SIZE))


def on_board(coord: Coord) -> bool:
    row, col = coord
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def piece_at(board: Board, coord: Coord) -> chess.Piece | None:
    row, col = coord
    return board[row][col]


def find_king(board: Board, color: chess.Color) -> Coord | None:
    """Logical coordinates of the king of *color*, or None if it isn't on the board."""
    king = chess.Piece(chess.KING, color)
    for row, cells in enumerate(board):
        for col, piece in enumerate(cells):
            if piece == king:
                return row, col
    return None


# ------------------------------------------------------------------ #
# Piece tokens                                                        #
# ------------------------------------------------------------------ #

def parse_piece_token(token: str) -> chess.Piece | None:
    """
    Parse a wire token such as "wP" or "bK".

    Returns None for an empty cell ("").

    Raises:
        ValueError: the token is not a recognised piece.
    """
    if token == "":
        return None
    if len(token) != 2 or token[0] not in _TOKEN_COLORS or token[1] not in _TOKEN_KINDS:
        raise ValueError(f"unrecognised piece token {token!r}")
    color = _TOKEN_COLORS[token[0]]
    return chess.Piece.from_symbol(token[1] if color == chess.WHITE else token[1].lower())


def glyph(piece: chess.Piece | None) -> str:
    return piece.unicode_symbol() if piece is not None else ""


def token_glyph(token: str) -> str:
    """Glyph for a raw token; unknown tokens are shown as-is."""
    try:
        return glyph(parse_piece_token(token))
    except ValueError:
        return token


# ------------------------------------------------------------------ #
# Squares and move strings                                            #
# ------------------------------------------------------------------ #

def _square(coord: Coord) -> chess.Square:
    row, col = coord
    return chess.square(col, row)


def square_label(coord: Coord) -> str:
    """(1, 4) -> "e2"."""
    return chess.square_name(_square(coord))


def parse_square_label(label: str) -> Coord:
    """
    "e2" -> (1, 4).

    Raises:
        ValueError: *label* is not a square name.
    """
    square = chess.parse_square(label.strip().lower())
    return chess.square_rank(square), chess.square_file(square)


def encode_move(
    origin: Coord,
    destination: Coord,
    promotion: chess.PieceType | None = None,
) -> str:
    """Wire move string: "e2e4", or "e7e8q" when a promotion kind is given."""
    return chess.Move(_square(origin), _square(destination), promotion=promotion).uci()


def parse_promotion_kind(text: str) -> chess.PieceType | None:
    """Accept "q" / "queen" (any case) for the four promotion kinds."""
    name = text.strip().lower()
    for kind in PROMOTION_KINDS:
        if name in (chess.piece_symbol(kind), chess.piece_name(kind)):
            return kind
    return None
