import unittest

import chess

from chessclient.board import (
    empty_board,
    encode_move,
    find_king,
    glyph,
    parse_piece_token,
    parse_promotion_kind,
    parse_square_label,
    square_label,
    token_glyph,
)


class PieceTokenTests(unittest.TestCase):
    def test_tokens_parse_to_python_chess_pieces(self) -> None:
        self.assertEqual(parse_piece_token("wP"), chess.Piece(chess.PAWN, chess.WHITE))
        self.assertEqual(parse_piece_token("bK"), chess.Piece(chess.KING, chess.BLACK))
        self.assertIsNone(parse_piece_token(""))

    def test_unknown_tokens_raise(self) -> None:
        for token in ("xP", "wX", "w", "wPP", "WP"):
            with self.subTest(token=token):
                with self.assertRaises(ValueError):
                    parse_piece_token(token)

    def test_glyphs(self) -> None:
        self.assertEqual(glyph(parse_piece_token("wP")), "♙")
        self.assertEqual(glyph(parse_piece_token("bQ")), "♛")
        self.assertEqual(glyph(None), "")
        self.assertEqual(token_glyph("bN"), "♞")
        self.assertEqual(token_glyph("??"), "??")


class SquareTests(unittest.TestCase):
    def test_labels(self) -> None:
        self.assertEqual(square_label((0, 0)), "a1")
        self.assertEqual(square_label((1, 4)), "e2")
        self.assertEqual(square_label((7, 7)), "h8")
        self.assertEqual(parse_square_label("e2"), (1, 4))
        self.assertEqual(parse_square_label(" H8 "), (7, 7))

    def test_bad_label_raises(self) -> None:
        for label in ("i1", "a9", "e", "quit"):
            with self.subTest(label=label):
                with self.assertRaises(ValueError):
                    parse_square_label(label)

    def test_encode_move(self) -> None:
        self.assertEqual(encode_move((1, 4), (3, 4)), "e2e4")
        self.assertEqual(encode_move((6, 0), (7, 0), chess.ROOK), "a7a8r")
        self.assertEqual(encode_move((1, 3), (0, 3), chess.KNIGHT), "d2d1n")

    def test_parse_promotion_kind(self) -> None:
        self.assertEqual(parse_promotion_kind("q"), chess.QUEEN)
        self.assertEqual(parse_promotion_kind("Knight"), chess.KNIGHT)
        self.assertIsNone(parse_promotion_kind("k"))
        self.assertIsNone(parse_promotion_kind("pawn"))

    def test_find_king(self) -> None:
        board = [list(row) for row in empty_board()]
        board[0][4] = chess.Piece(chess.KING, chess.WHITE)
        board[7][3] = chess.Piece(chess.KING, chess.BLACK)
        frozen = tuple(tuple(row) for row in board)
        self.assertEqual(find_king(frozen, chess.WHITE), (0, 4))
        self.assertEqual(find_king(frozen, chess.BLACK), (7, 3))
        self.assertIsNone(find_king(empty_board(), chess.WHITE))
