import unittest

from chessclient.orientation import (
    display_order,
    file_labels,
    is_light,
    rank_labels,
    to_display,
    to_logical,
)

SEATS = ("PlayerWhite", "PlayerBlack", None)
ALL_SQUARES = [(r, c) for r in range(8) for c in range(8)]


class OrientationTests(unittest.TestCase):
    def test_mapping_is_a_bijection_for_every_seat(self) -> None:
        for seat in SEATS:
            with self.subTest(seat=seat):
                displayed = {to_display(sq, seat) for sq in ALL_SQUARES}
                self.assertEqual(len(displayed), 64)
                for sq in ALL_SQUARES:
                    self.assertEqual(to_logical(to_display(sq, seat), seat), sq)

    def test_white_sees_rank_eight_on_top_and_file_a_on_the_left(self) -> None:
        self.assertEqual(to_logical((0, 0), "PlayerWhite"), (7, 0))   # a8
        self.assertEqual(to_logical((7, 7), "PlayerWhite"), (0, 7))   # h1
        self.assertEqual(to_logical((0, 0), None), (7, 0))

    def test_black_sees_rank_one_on_top_and_file_h_on_the_left(self) -> None:
        self.assertEqual(to_logical((0, 0), "PlayerBlack"), (0, 7))   # h1
        self.assertEqual(to_logical((7, 7), "PlayerBlack"), (7, 0))   # a8
        # e7 for Black sits one row above the bottom, fourth column from the left
        self.assertEqual(to_display((6, 4), "PlayerBlack"), (6, 3))

    def test_shading_ignores_orientation(self) -> None:
        self.assertFalse(is_light((0, 0)))   # a1 is dark
        self.assertTrue(is_light((0, 7)))    # h1 is light
        for seat in SEATS:
            shades = {logical: is_light(logical) for _, logical in display_order(seat)}
            self.assertEqual(shades, {sq: is_light(sq) for sq in ALL_SQUARES})

    def test_display_order_is_row_major(self) -> None:
        order = list(display_order("PlayerBlack"))
        self.assertEqual(len(order), 64)
        self.assertEqual(order[0], ((0, 0), (0, 7)))
        self.assertEqual(order[9], ((1, 1), (1, 6)))

    def test_labels_follow_orientation(self) -> None:
        self.assertEqual("".join(file_labels("PlayerWhite")), "abcdefgh")
        self.assertEqual("".join(rank_labels("PlayerWhite")), "87654321")
        self.assertEqual("".join(file_labels("PlayerBlack")), "hgfedcba")
        self.assertEqual("".join(rank_labels("PlayerBlack")), "12345678")
