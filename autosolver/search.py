"""Expectimax over alternating Max (player) and Chance (tile spawn) layers."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict

from autosolver.board import DIRECTIONS, BoardType, can_move, empty_cells, simulate_move
from autosolver.evaluator import DEFAULT_WEIGHTS, EvalWeights, evaluate
from autosolver.hashing import CHANCE_LAYER, MAX_LAYER, ZobristHasher

__all__ = [
    "MAX_LAYER",
    "CHANCE_LAYER",
    "SPAWN_PROBABILITIES",
    "SearchContext",
    "expectimax",
]

# Value placed on the spawn cell and its probability.
SPAWN_PROBABILITIES = ((2, 0.9), (4, 0.1))

CACHE_READ_MAX_DEPTH = 6
CACHE_WRITE_MIN_DEPTH = 4


@dataclass
class SearchContext:
    deadline: float
    hasher: ZobristHasher
    weights: EvalWeights = DEFAULT_WEIGHTS
    clock: Callable[[], float] = time.perf_counter
    cache_read_max_depth: int = CACHE_READ_MAX_DEPTH
    cache_write_min_depth: int = CACHE_WRITE_MIN_DEPTH
    tt: Dict[int, float] = field(default_factory=dict)
    nodes: int = 0
    tt_hits: int = 0
    tt_stores: int = 0
    timed_out: bool = False

    def clear_table(self) -> None:
        self.tt = {}

    def deadline_passed(self) -> bool:
        if self.clock() >= self.deadline:
            self.timed_out = True
        return self.timed_out


def expectimax(board: BoardType, depth: int, layer: int, context: SearchContext) -> float:
    """
    Expected heuristic value of ``board`` searched ``depth`` layers deep.

    Depth exhaustion, a dead board and a passed deadline all end the
    recursion with the static evaluation. Max-layer values are read from the
    table at shallow depths and written to it at deep ones; a read may
    return a value computed at a different depth.
    """
    context.nodes += 1
    if depth == 0 or not can_move(board) or context.deadline_passed():
        return evaluate(board, context.weights)

    if layer == MAX_LAYER:
        key = context.hasher.hash(board, layer)
        if depth <= context.cache_read_max_depth:
            cached = context.tt.get(key)
            if cached is not None:
                context.tt_hits += 1
                return cached
        value = _max_value(board, depth, context)
        if depth >= context.cache_write_min_depth:
            context.tt[key] = value
            context.tt_stores += 1
        return value

    return _chance_value(board, depth, context)


def _max_value(board: BoardType, depth: int, context: SearchContext) -> float:
    best = None
    for direction in DIRECTIONS:
        moved, _, child = simulate_move(board, direction)
        if not moved:
            continue
        value = expectimax(child, depth - 1, CHANCE_LAYER, context)
        if best is None or value > best:
            best = value
    if best is None:
        return evaluate(board, context.weights)
    return best


def _chance_value(board: BoardType, depth: int, context: SearchContext) -> float:
    cells = empty_cells(board)
    if not cells:
        return evaluate(board, context.weights)

    total = 0.0
    for r, c in cells:
        cell_value = 0.0
        for tile, probability in SPAWN_PROBABILITIES:
            child = board.copy()
            child[r, c] = tile
            cell_value += probability * expectimax(child, depth - 1, MAX_LAYER, context)
        total += cell_value
    # Each empty cell is equally likely to receive the spawn.
    return total / len(cells)
