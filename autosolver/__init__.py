# Expectimax move selection for 2048
from .board import (
    LEFT, RIGHT, UP, DOWN, DIRECTIONS,
    as_board, apply_move, simulate_move, can_move, empty_cells, valid_moves,
    rotate, mirror, tile_rank, max_tile, direction_name, render_ascii,
)
from .evaluator import EvalWeights, EvalComponents, DEFAULT_WEIGHTS, evaluate, evaluate_components
from .hashing import ZobristHasher, MAX_LAYER, CHANCE_LAYER
from .search import SearchContext, expectimax
from .config import SolverConfig, add_solver_args, config_from_args
from .selector import MoveSelector, SearchResult, next_move

__all__ = [
    "LEFT",
    "RIGHT",
    "UP",
    "DOWN",
    "DIRECTIONS",
    "as_board",
    "apply_move",
    "simulate_move",
    "can_move",
    "empty_cells",
    "valid_moves",
    "rotate",
    "mirror",
    "tile_rank",
    "max_tile",
    "direction_name",
    "render_ascii",

    "EvalWeights",
    "EvalComponents",
    "DEFAULT_WEIGHTS",
    "evaluate",
    "evaluate_components",

    "ZobristHasher",
    "MAX_LAYER",
    "CHANCE_LAYER",

    "SearchContext",
    "expectimax",

    "SolverConfig",
    "add_solver_args",
    "config_from_args",

    "MoveSelector",
    "SearchResult",
    "next_move",
]
