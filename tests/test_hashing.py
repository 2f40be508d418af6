import unittest

import numpy as np

from autosolver.board import as_board
from autosolver.hashing import CHANCE_LAYER, MAX_LAYER, ZobristHasher

BOARD = [
    [2, 4, 0, 0],
    [0, 8, 0, 0],
    [0, 0, 16, 0],
    [0, 0, 0, 2048],
]


class TestZobristHasher(unittest.TestCase):
    def setUp(self):
        self.hasher = ZobristHasher(np.random.default_rng(1234))

    def test_equal_boards_hash_equal(self):
        first = self.hasher.hash(as_board(BOARD), MAX_LAYER)
        second = self.hasher.hash(as_board([row[:] for row in BOARD]), MAX_LAYER)
        self.assertEqual(first, second)

    def test_layer_changes_hash(self):
        board = as_board(BOARD)
        self.assertNotEqual(self.hasher.hash(board, MAX_LAYER), self.hasher.hash(board, CHANCE_LAYER))

    def test_empty_board(self):
        empty = as_board([[0] * 4 for _ in range(4)])
        self.assertEqual(self.hasher.hash(empty, MAX_LAYER), 0)
        self.assertEqual(self.hasher.hash(empty, CHANCE_LAYER), int(self.hasher.layer_keys[CHANCE_LAYER]))

    def test_is_xor_of_cell_constants(self):
        board = as_board(BOARD)
        expected = 0
        for (r, c), rank in {(0, 0): 1, (0, 1): 2, (1, 1): 3, (2, 2): 4, (3, 3): 11}.items():
            expected ^= int(self.hasher.table[r, c, rank])
        self.assertEqual(self.hasher.hash(board, MAX_LAYER), expected)

    def test_position_and_value_matter(self):
        board = as_board(BOARD)
        moved = board.copy()
        moved[0, 0], moved[0, 2] = 0, 2
        doubled = board.copy()
        doubled[0, 0] = 4
        base = self.hasher.hash(board, MAX_LAYER)
        self.assertNotEqual(base, self.hasher.hash(moved, MAX_LAYER))
        self.assertNotEqual(base, self.hasher.hash(doubled, MAX_LAYER))

    def test_seeded_generators_reproduce(self):
        board = as_board(BOARD)
        again = ZobristHasher(np.random.default_rng(1234))
        other = ZobristHasher(np.random.default_rng(4321))
        self.assertEqual(self.hasher.hash(board, CHANCE_LAYER), again.hash(board, CHANCE_LAYER))
        self.assertNotEqual(self.hasher.hash(board, CHANCE_LAYER), other.hash(board, CHANCE_LAYER))

    def test_hash_fits_in_64_bits(self):
        value = self.hasher.hash(as_board(BOARD), CHANCE_LAYER)
        self.assertGreaterEqual(value, 0)
        self.assertLess(value, 1 << 64)


if __name__ == "__main__":
    unittest.main()
