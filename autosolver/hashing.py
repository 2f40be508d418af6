import numpy as np
import numba

from autosolver.board import MAX_RANK, SIZE, BoardType, _rank_numba

# Search layers. The values index ZobristHasher.layer_keys.
MAX_LAYER: int = 0
CHANCE_LAYER: int = 1


@numba.njit(cache=True)
def _zobrist_hash_numba(board: BoardType, table: np.ndarray, layer_keys: np.ndarray, layer: int) -> np.uint64:
    height, width = board.shape
    h = layer_keys[layer]
    for r in range(height):
        for c in range(width):
            if board[r, c] != 0:
                h ^= table[r, c, _rank_numba(board[r, c])]
    return h


class ZobristHasher:
    """
    Zobrist-style fingerprints for (board, layer) pairs.

    One random 64-bit constant per (row, column, tile rank) plus one for the
    Chance layer, all drawn once from the generator handed in. Collisions
    between distinct positions are possible and are not detected.
    """

    def __init__(self, rng: np.random.Generator):
        upper = np.iinfo(np.uint64).max
        self.table: np.ndarray = rng.integers(
            0, upper, size=(SIZE, SIZE, MAX_RANK + 1), dtype=np.uint64, endpoint=True
        )
        self.layer_keys: np.ndarray = np.zeros(2, dtype=np.uint64)
        self.layer_keys[CHANCE_LAYER] = rng.integers(0, upper, dtype=np.uint64, endpoint=True)

    def hash(self, board: BoardType, layer: int) -> int:
        return int(_zobrist_hash_numba(board, self.table, self.layer_keys, layer))
