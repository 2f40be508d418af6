import numpy as np
import numba
from typing import Any, List, Sequence, Tuple, Union

BoardType = np.ndarray[Any, np.dtype[np.int64]]

SIZE = 4
MAX_RANK = 15

# Direction codes shared with the surrounding application.
LEFT: int = 0
RIGHT: int = 1
UP: int = 2
DOWN: int = 3
DIRECTIONS: List[int] = [LEFT, RIGHT, UP, DOWN]
DIRECTION_NAMES: List[str] = ["Left", "Right", "Up", "Down"]

# Quarter turns (np.rot90, counter-clockwise) that bring each direction into
# the Left orientation.
_ROTATIONS = {LEFT: 0, RIGHT: 2, UP: 1, DOWN: -1}


@numba.njit(cache=True)
def _rank_numba(value: np.int64) -> int:
    rank = 0
    while value > 1 and rank < MAX_RANK:
        value >>= 1
        rank += 1
    return rank


@numba.njit(cache=True)
def _move_left_numba(board: BoardType) -> Tuple[BoardType, np.int64, bool]:
    height, width = board.shape
    new_board = np.zeros_like(board)
    gain: np.int64 = np.int64(0)
    moved: bool = False

    for r in range(height):
        target_idx = 0
        last_merged = False
        for read_idx in range(width):
            val = board[r, read_idx]
            if val == 0:
                continue

            if target_idx > 0 and new_board[r, target_idx - 1] == val and not last_merged:
                merged_val = val * 2
                new_board[r, target_idx - 1] = merged_val
                gain += merged_val
                last_merged = True
                moved = True
            else:
                new_board[r, target_idx] = val
                if read_idx != target_idx:
                    moved = True
                last_merged = False
                target_idx += 1

    return new_board, gain, moved


@numba.njit(cache=True)
def _check_if_any_moves_possible_numba(board: BoardType) -> bool:
    height, width = board.shape

    if np.any(board == 0):
        return True

    for r in range(height):
        for c in range(width - 1):
            if board[r, c] == board[r, c + 1]:
                return True
    for c in range(width):
        for r in range(height - 1):
            if board[r, c] == board[r + 1, c]:
                return True

    return False


def as_board(grid: Union[BoardType, Sequence[Sequence[int]]]) -> BoardType:
    """Return a private int64 copy of ``grid``.

    Callers guarantee every cell is 0 or a power of two; only the shape is
    checked.
    """
    board = np.array(grid, dtype=np.int64)
    assert board.shape == (SIZE, SIZE), f"Board must be {SIZE}x{SIZE}, got {board.shape}"
    return board


def rotate(board: BoardType, k: int = 1) -> BoardType:
    """Rotate ``k`` quarter turns counter-clockwise (negative ``k`` is clockwise)."""
    return np.ascontiguousarray(np.rot90(board, k))


def mirror(board: BoardType) -> BoardType:
    return np.ascontiguousarray(board[:, ::-1])


def simulate_move(board: BoardType, direction: int) -> Tuple[bool, np.int64, BoardType]:
    """
    Slide and merge tiles towards ``direction`` on a copy of ``board``.

    Every direction is rotated into the Left orientation, compacted there
    and rotated back, so merges behave the same way in all four directions.

    Returns:
        tuple: (moved, score_gain, new_board). When nothing moved, new_board
        is an unmodified copy of the input.
    """
    assert 0 <= direction <= 3, "Direction must be 0, 1, 2, or 3."
    if board.dtype != np.int64:
        board = board.astype(np.int64)

    k = _ROTATIONS[direction]
    if k == 0:
        new_board, gain, moved = _move_left_numba(board)
    else:
        new_board, gain, moved = _move_left_numba(rotate(board, k))
        new_board = rotate(new_board, -k)
    return moved, gain, new_board


def apply_move(board: BoardType, direction: int) -> Tuple[BoardType, bool]:
    moved, _, new_board = simulate_move(board, direction)
    return new_board, moved


def can_move(board: BoardType) -> bool:
    return bool(_check_if_any_moves_possible_numba(board))


def valid_moves(board: BoardType) -> List[int]:
    return [direction for direction in DIRECTIONS if simulate_move(board, direction)[0]]


def empty_cells(board: BoardType) -> List[Tuple[int, int]]:
    rows, cols = np.nonzero(board == 0)
    return [(int(r), int(c)) for r, c in zip(rows, cols)]


def tile_rank(value: int) -> int:
    """log2 of a tile value clamped to [0, 15]; empty cells have rank 0."""
    return _rank_numba(np.int64(value))


def max_tile(board: BoardType) -> int:
    return int(np.max(board))


def direction_name(direction: int) -> str:
    return DIRECTION_NAMES[direction]


def render_ascii(board: BoardType, cell_width: int = 6) -> str:
    height, width = board.shape
    separator: str = "+" + ("-" * cell_width + "+") * width
    output: List[str] = [separator]
    for r in range(height):
        row_str: List[str] = ["|"]
        for c in range(width):
            val = board[r, c]
            cell_str: str = str(val) if val != 0 else "."
            row_str.append(cell_str.center(cell_width))
            row_str.append("|")
        output.append("".join(row_str))
        output.append(separator)
    return "\n".join(output)
