"""Heuristic evaluation of 2048 positions.

Every term works on tile ranks (log2 of the tile value, 0 for an empty
cell). The weighted sum rewards open boards, smooth and monotone rows and
columns, and the largest tile sitting in a corner.
"""

import numpy as np
import numba
from typing import NamedTuple, Tuple

from autosolver.board import BoardType, _rank_numba


class EvalWeights(NamedTuple):
    empty: float = 3.5
    smoothness: float = 1.5
    monotonicity: float = 1.0
    clustering: float = -0.2
    corner: float = 120.0


class EvalComponents(NamedTuple):
    empty_count: float
    smoothness: float
    monotonicity: float
    clustering: float
    corner_bonus: float


DEFAULT_WEIGHTS = EvalWeights()

# 8-neighbourhood offsets used by the clustering term.
_NEIGHBOURS = np.array(
    [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)],
    dtype=np.int64,
)


@numba.njit(cache=True)
def _ranks_numba(board: BoardType) -> np.ndarray:
    height, width = board.shape
    ranks = np.zeros((height, width), dtype=np.float64)
    for r in range(height):
        for c in range(width):
            if board[r, c] != 0:
                ranks[r, c] = _rank_numba(board[r, c])
    return ranks


@numba.njit(cache=True)
def _line_monotonicity_numba(line: np.ndarray) -> float:
    increasing = 0.0
    decreasing = 0.0
    for i in range(len(line) - 1):
        delta = line[i + 1] - line[i]
        if delta > 0:
            increasing += delta
        else:
            decreasing -= delta
    return min(increasing, decreasing)


@numba.njit(cache=True)
def _components_numba(board: BoardType, neighbours: np.ndarray) -> Tuple[float, float, float, float, float]:
    height, width = board.shape
    ranks = _ranks_numba(board)

    empty = 0.0
    smooth = 0.0
    cluster = 0.0
    for r in range(height):
        for c in range(width):
            if board[r, c] == 0:
                empty += 1.0
                continue
            if c + 1 < width and board[r, c + 1] != 0:
                smooth -= abs(ranks[r, c] - ranks[r, c + 1])
            if r + 1 < height and board[r + 1, c] != 0:
                smooth -= abs(ranks[r, c] - ranks[r + 1, c])
            for k in range(neighbours.shape[0]):
                nr = r + neighbours[k, 0]
                nc = c + neighbours[k, 1]
                if 0 <= nr < height and 0 <= nc < width and board[nr, nc] != 0:
                    cluster += abs(ranks[r, c] - ranks[nr, nc])

    mono = 0.0
    for r in range(height):
        mono += _line_monotonicity_numba(ranks[r, :])
    for c in range(width):
        mono += _line_monotonicity_numba(ranks[:, c])
    mono = -mono

    best = np.max(board)
    corner = 0.0
    if best > 0 and (
        board[0, 0] == best
        or board[0, width - 1] == best
        or board[height - 1, 0] == best
        or board[height - 1, width - 1] == best
    ):
        corner = 1.0

    return empty, smooth, mono, cluster, corner


def evaluate_components(board: BoardType) -> EvalComponents:
    return EvalComponents(*_components_numba(board, _NEIGHBOURS))


def evaluate(board: BoardType, weights: EvalWeights = DEFAULT_WEIGHTS) -> float:
    """Weighted heuristic score of ``board``; higher is better."""
    empty, smooth, mono, cluster, corner = _components_numba(board, _NEIGHBOURS)
    return (
        weights.empty * empty
        + weights.smoothness * smooth
        + weights.monotonicity * mono
        + weights.clustering * cluster
        + weights.corner * corner
    )
