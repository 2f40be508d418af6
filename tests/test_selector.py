import unittest
from unittest.mock import patch

import numpy as np

from autosolver.board import DOWN, LEFT, RIGHT, UP, apply_move, as_board, can_move, empty_cells, valid_moves
from autosolver.config import SolverConfig
from autosolver.search import SearchContext
from autosolver.selector import MoveSelector, next_move

DEAD_BOARD = [
    [2, 4, 2, 4],
    [4, 2, 4, 2],
    [2, 4, 2, 4],
    [4, 2, 4, 2],
]

PAIR_BOARD = [
    [2, 2, 0, 0],
    [0, 0, 0, 0],
    [0, 0, 0, 0],
    [0, 0, 0, 0],
]

MIDGAME_BOARD = [
    [256, 64, 16, 4],
    [128, 32, 8, 2],
    [4, 8, 2, 0],
    [2, 0, 0, 0],
]


class TickClock:
    """Advances by a fixed step on every read."""

    def __init__(self, step):
        self.step = step
        self.now = 0.0

    def __call__(self):
        now = self.now
        self.now += self.step
        return now


def fixed_depth_config(depth, seed=0):
    return SolverConfig(time_budget_ms=60_000, min_depth=2, max_depth=depth, seed=seed)


class TestMoveSelector(unittest.TestCase):
    def test_merges_lone_pair(self):
        selector = MoveSelector.from_config(fixed_depth_config(3))
        board = as_board(PAIR_BOARD)
        move = selector.next_move(board)
        self.assertIn(move, (LEFT, RIGHT))
        new_board, moved = apply_move(board, move)
        self.assertTrue(moved)
        self.assertEqual(len(empty_cells(new_board)), 15)
        self.assertEqual(int(new_board.max()), 4)

    def test_dead_board_returns_default(self):
        board = as_board(DEAD_BOARD)
        self.assertFalse(can_move(board))
        selector = MoveSelector.from_config(fixed_depth_config(3))
        result = selector.search(board)
        self.assertEqual(result.move, 0)
        self.assertFalse(result.has_legal_move)
        self.assertEqual(result.depth, 0)
        self.assertEqual(next_move(DEAD_BOARD), 0)

    def test_returns_legal_move(self):
        rng = np.random.default_rng(11)
        selector = MoveSelector(SolverConfig(time_budget_ms=5), np.random.default_rng(3))
        selector.warmup()
        checked = 0
        while checked < 10:
            values = rng.choice([0, 0, 2, 4, 8, 16, 32], size=(4, 4)).astype(np.int64)
            if not can_move(values):
                continue
            self.assertIn(selector.next_move(values), valid_moves(values))
            checked += 1

    def test_single_legal_move_is_chosen(self):
        grid = [row[:] for row in DEAD_BOARD]
        grid[0][3] = 0
        board = as_board(grid)
        legal = valid_moves(board)
        self.assertEqual(len(legal), 2)
        self.assertIn(MoveSelector.from_config(fixed_depth_config(2)).next_move(board), legal)

    def test_does_not_mutate_caller_board(self):
        board = as_board(MIDGAME_BOARD)
        before = board.copy()
        MoveSelector.from_config(fixed_depth_config(3)).next_move(board)
        np.testing.assert_array_equal(board, before)

    def test_accepts_nested_lists(self):
        move = MoveSelector.from_config(fixed_depth_config(2)).next_move(MIDGAME_BOARD)
        self.assertIn(move, valid_moves(as_board(MIDGAME_BOARD)))

    def test_seeded_selectors_agree(self):
        moves = {MoveSelector.from_config(fixed_depth_config(3, seed=9)).next_move(PAIR_BOARD) for _ in range(3)}
        self.assertEqual(len(moves), 1)

    def test_reports_every_completed_depth(self):
        seen = []
        selector = MoveSelector.from_config(fixed_depth_config(4))
        result = selector.search(MIDGAME_BOARD, progress_callback=seen.append)
        self.assertEqual([r.depth for r in seen], [2, 3, 4])
        self.assertEqual(result.depth, 4)
        self.assertFalse(result.interrupted)
        self.assertEqual(result.move, seen[-1].move)
        self.assertEqual(set(result.scores), set(valid_moves(as_board(MIDGAME_BOARD))))
        self.assertEqual(result.scores[result.move], max(result.scores.values()))


class TestDeadline(unittest.TestCase):
    def test_aborted_depth_keeps_previous_answer(self):
        seen = []
        selector = MoveSelector(
            SolverConfig(time_budget_ms=40),
            np.random.default_rng(5),
            clock=TickClock(step=1e-5),
        )
        result = selector.search(PAIR_BOARD, progress_callback=seen.append)
        self.assertTrue(result.interrupted)
        self.assertLess(result.depth, selector.config.max_depth)
        self.assertEqual(result.depth, seen[-1].depth)
        self.assertEqual(result.move, seen[-1].move)

    def test_zero_budget_still_answers_legally(self):
        selector = MoveSelector(SolverConfig(time_budget_ms=0), np.random.default_rng(5))
        result = selector.search(MIDGAME_BOARD)
        self.assertEqual(result.depth, 2)
        self.assertIn(result.move, valid_moves(as_board(MIDGAME_BOARD)))

    def test_returns_within_budget(self):
        budget_ms = 40
        with patch.object(MoveSelector, "_warmed", False):
            selector = MoveSelector(SolverConfig(time_budget_ms=budget_ms), np.random.default_rng(1))
            result = selector.search(MIDGAME_BOARD)
        # One recursion step of overrun, with slack for slow machines.
        self.assertLess(result.elapsed_ms, budget_ms + 250)

    def test_first_search_compiles_kernels_once(self):
        with patch.object(MoveSelector, "_warmed", False), \
                patch.object(MoveSelector, "warmup", autospec=True, side_effect=MoveSelector.warmup) as warmup:
            selector = MoveSelector(SolverConfig(time_budget_ms=5), np.random.default_rng(2))
            selector.search(MIDGAME_BOARD)
            next_move(PAIR_BOARD, SolverConfig(time_budget_ms=5))
        warmup.assert_called_once()


class TestRootTieBreak(unittest.TestCase):
    def search_depth(self, values, seed):
        """Run one root iteration where each child is worth ``values[direction]``."""
        selector = MoveSelector(SolverConfig(), np.random.default_rng(seed))
        children = [(direction, np.full((4, 4), direction, dtype=np.int64)) for direction in values]
        context = SearchContext(deadline=float("inf"), hasher=selector.hasher)
        with patch("autosolver.selector.expectimax", side_effect=lambda child, *_: values[int(child[0, 0])]):
            return selector._search_depth(children, 2, context)

    def test_exact_tie_is_a_coin_flip(self):
        moves = [self.search_depth({LEFT: 5.0, RIGHT: 5.0}, seed).move for seed in range(200)]
        self.assertEqual(set(moves), {LEFT, RIGHT})
        self.assertTrue(60 < moves.count(RIGHT) < 140)

    def test_lower_later_move_never_wins(self):
        values = {LEFT: 5.0, DOWN: 4.0, UP: 5.0 - 1e-12, RIGHT: 1.0}
        for seed in range(20):
            outcome = self.search_depth(values, seed)
            self.assertEqual(outcome.move, LEFT)
            self.assertEqual(outcome.best, 5.0)
            self.assertEqual(outcome.scores, values)

    def test_higher_later_move_always_wins(self):
        for seed in range(20):
            self.assertEqual(self.search_depth({LEFT: 1.0, DOWN: 2.0, UP: 2.0 - 1e-9}, seed).move, DOWN)


if __name__ == "__main__":
    unittest.main()
