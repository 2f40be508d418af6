import argparse
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from autosolver.evaluator import DEFAULT_WEIGHTS, EvalWeights


@dataclass(frozen=True)
class SolverConfig:
    time_budget_ms: float = 40.0
    min_depth: int = 2
    max_depth: int = 12
    cache_read_max_depth: int = 6
    cache_write_min_depth: int = 4
    weights: EvalWeights = DEFAULT_WEIGHTS
    seed: Optional[int] = None

    def __post_init__(self):
        assert self.time_budget_ms >= 0, "time_budget_ms must be non-negative."
        assert self.min_depth >= 1, "min_depth must be at least 1."
        assert self.max_depth >= self.min_depth, "max_depth must not be below min_depth."

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["weights"] = self.weights._asdict()
        return data


def add_solver_args(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    group = parser.add_argument_group("solver")
    group.add_argument("--time-budget", type=float, default=40.0, help="Time budget per move in milliseconds")
    group.add_argument("--min-depth", type=int, default=2, help="First depth limit of iterative deepening")
    group.add_argument("--max-depth", type=int, default=12, help="Last depth limit of iterative deepening")
    group.add_argument("--cache-read-max-depth", type=int, default=6,
                       help="Deepest Max layer allowed to reuse a table entry")
    group.add_argument("--cache-write-min-depth", type=int, default=4,
                       help="Shallowest Max layer whose value is stored in the table")
    group.add_argument("--seed", type=int, default=None, help="Seed for hashing constants and tie-breaks")

    # Evaluator weights
    group.add_argument("--w-empty", type=float, default=DEFAULT_WEIGHTS.empty, help="Weight of the empty-cell count")
    group.add_argument("--w-smoothness", type=float, default=DEFAULT_WEIGHTS.smoothness, help="Weight of smoothness")
    group.add_argument("--w-monotonicity", type=float, default=DEFAULT_WEIGHTS.monotonicity,
                       help="Weight of monotonicity")
    group.add_argument("--w-clustering", type=float, default=DEFAULT_WEIGHTS.clustering, help="Weight of clustering")
    group.add_argument("--w-corner", type=float, default=DEFAULT_WEIGHTS.corner, help="Weight of the corner bonus")
    return parser


def config_from_args(args: argparse.Namespace) -> SolverConfig:
    return SolverConfig(
        time_budget_ms=args.time_budget,
        min_depth=args.min_depth,
        max_depth=args.max_depth,
        cache_read_max_depth=args.cache_read_max_depth,
        cache_write_min_depth=args.cache_write_min_depth,
        weights=EvalWeights(
            empty=args.w_empty,
            smoothness=args.w_smoothness,
            monotonicity=args.w_monotonicity,
            clustering=args.w_clustering,
            corner=args.w_corner,
        ),
        seed=args.seed,
    )
