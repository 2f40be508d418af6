"""Iterative-deepening move selection under a wall-clock budget."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

import numpy as np

from autosolver.board import DOWN, LEFT, RIGHT, UP, BoardType, as_board, direction_name, simulate_move
from autosolver.config import SolverConfig
from autosolver.hashing import CHANCE_LAYER, ZobristHasher
from autosolver.search import SearchContext, expectimax

logger = logging.getLogger(__name__)

DEFAULT_MOVE = LEFT
# Root move ordering; also decides which direction is seen first in a tie.
ROOT_ORDER = (LEFT, DOWN, UP, RIGHT)


@dataclass(frozen=True)
class SearchResult:
    move: int
    depth: int
    scores: Dict[int, float]
    interrupted: bool
    elapsed_ms: float
    nodes: int
    tt_hits: int
    tt_stores: int
    has_legal_move: bool = True

    @property
    def move_name(self) -> str:
        return direction_name(self.move)


@dataclass
class _DepthOutcome:
    move: Optional[int] = None
    best: float = float("-inf")
    scores: Dict[int, float] = field(default_factory=dict)


class MoveSelector:
    """
    Chooses a direction for a 2048 board within a fixed time budget.

    Depth limits grow from ``min_depth`` to ``max_depth``. Each depth runs
    with a fresh transposition table, and its answer replaces the previous
    one only if every legal root move was searched before the deadline.
    The shallowest depth always completes: once the deadline has passed the
    search below each root move collapses to a single evaluation.

    The generator seeds the position hasher and breaks root ties, so a
    seeded selector makes reproducible choices. A selector is not safe to
    share between threads.
    """

    # numba kernels are compiled once per process.
    _warmed = False

    def __init__(
        self,
        config: Optional[SolverConfig] = None,
        rng: Optional[np.random.Generator] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.config = config if config is not None else SolverConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.clock = clock
        self.hasher = ZobristHasher(self.rng)

    @classmethod
    def from_config(cls, config: SolverConfig) -> "MoveSelector":
        return cls(config, np.random.default_rng(config.seed))

    def warmup(self) -> None:
        """Compile the numba kernels so the first timed decision is not spent in the JIT."""
        board = as_board([[2, 2, 0, 0], [0, 4, 0, 0], [0, 0, 0, 0], [0, 0, 0, 8]])
        for direction in ROOT_ORDER:
            simulate_move(board, direction)
        context = SearchContext(deadline=float("inf"), hasher=self.hasher, weights=self.config.weights)
        expectimax(board, 2, CHANCE_LAYER, context)
        MoveSelector._warmed = True

    def next_move(self, board: Union[BoardType, List[List[int]]]) -> int:
        return self.search(board).move

    def search(
        self,
        board: Union[BoardType, List[List[int]]],
        progress_callback: Optional[Callable[[SearchResult], None]] = None,
    ) -> SearchResult:
        if not MoveSelector._warmed:
            self.warmup()
        start = self.clock()
        deadline = start + self.config.time_budget_ms / 1000.0
        root = as_board(board)

        children = []
        for direction in ROOT_ORDER:
            moved, _, child = simulate_move(root, direction)
            if moved:
                children.append((direction, child))

        context = SearchContext(
            deadline=deadline,
            hasher=self.hasher,
            weights=self.config.weights,
            clock=self.clock,
            cache_read_max_depth=self.config.cache_read_max_depth,
            cache_write_min_depth=self.config.cache_write_min_depth,
        )

        if not children:
            logger.debug("No legal move; returning the default direction")
            return self._result(DEFAULT_MOVE, 0, {}, False, start, context, has_legal_move=False)

        completed: Optional[SearchResult] = None
        interrupted = False
        for depth in range(self.config.min_depth, self.config.max_depth + 1):
            context.clear_table()
            outcome = self._search_depth(children, depth, context)
            if completed is not None and context.timed_out:
                interrupted = True
                logger.debug(f"Deadline hit during depth {depth}; keeping depth {completed.depth}")
                break

            completed = self._result(outcome.move, depth, outcome.scores, False, start, context)
            logger.debug(
                f"Depth {depth} done: {completed.move_name} "
                f"({outcome.best:.2f}) after {completed.elapsed_ms:.1f} ms, {context.nodes} nodes"
            )
            if progress_callback is not None:
                progress_callback(completed)
            if context.timed_out:
                break

        result = self._result(completed.move, completed.depth, completed.scores, interrupted, start, context)
        logger.debug(
            f"Chose {result.move_name} at depth {result.depth} in {result.elapsed_ms:.1f} ms "
            f"({result.nodes} nodes, {result.tt_hits} table hits)"
        )
        return result

    def _search_depth(self, children, depth: int, context: SearchContext) -> _DepthOutcome:
        outcome = _DepthOutcome()
        for direction, child in children:
            value = expectimax(child, depth - 1, CHANCE_LAYER, context)
            outcome.scores[direction] = value
            if outcome.move is None or value > outcome.best:
                outcome.move = direction
                outcome.best = value
            elif value == outcome.best and self.rng.random() < 0.5:
                outcome.move = direction
        return outcome

    def _result(
        self,
        move: int,
        depth: int,
        scores: Dict[int, float],
        interrupted: bool,
        start: float,
        context: SearchContext,
        has_legal_move: bool = True,
    ) -> SearchResult:
        return SearchResult(
            move=move,
            depth=depth,
            scores=dict(scores),
            interrupted=interrupted,
            elapsed_ms=(self.clock() - start) * 1000.0,
            nodes=context.nodes,
            tt_hits=context.tt_hits,
            tt_stores=context.tt_stores,
            has_legal_move=has_legal_move,
        )


def next_move(board: Union[BoardType, List[List[int]]], config: Optional[SolverConfig] = None) -> int:
    """One-shot convenience wrapper around ``MoveSelector.next_move``."""
    return MoveSelector(config).next_move(board)
