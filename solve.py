#!/usr/bin/env python3
"""
Suggest the next 2048 move for a single board.

Example usage:
    python solve.py --board "2,2,0,0/0,4,0,0/0,0,0,0/0,0,0,2"
    echo "2 2 0 0 0 4 0 0 0 0 0 0 0 0 0 2" | python solve.py --board - --json
"""

import argparse
import json
import logging
import re
import sys
from typing import List

from tabulate import tabulate

from autosolver.board import DIRECTIONS, SIZE, as_board, direction_name, render_ascii
from autosolver.config import add_solver_args, config_from_args
from autosolver.evaluator import evaluate_components
from autosolver.selector import MoveSelector

logger = logging.getLogger(__name__)


def parse_board(text: str) -> List[List[int]]:
    """Parse 16 integers separated by commas, slashes or whitespace into rows."""
    tokens = [token for token in re.split(r"[,/\s]+", text.strip()) if token]
    if len(tokens) != SIZE * SIZE:
        raise ValueError(f"expected {SIZE * SIZE} cells, got {len(tokens)}")
    try:
        cells = [int(token) for token in tokens]
    except ValueError:
        raise ValueError(f"cells must be integers: {text!r}") from None
    if any(cell < 0 for cell in cells):
        raise ValueError("cells must be non-negative")
    return [cells[row * SIZE:(row + 1) * SIZE] for row in range(SIZE)]


def main(argv=None):
    parser = argparse.ArgumentParser(description="Suggest a 2048 move with the expectimax solver")
    parser.add_argument("--board", type=str, required=True,
                        help="Board as 'a,b,c,d/e,f,g,h/...' or '-' to read 16 integers from stdin")
    parser.add_argument("--json", action="store_true", help="Print a JSON object instead of tables")
    parser.add_argument("--verbose", action="store_true", help="Log every search depth")
    add_solver_args(parser)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    text = sys.stdin.read() if args.board == "-" else args.board
    try:
        board = as_board(parse_board(text))
    except ValueError as e:
        logger.error(f"Could not parse board: {e}")
        parser.error(str(e))

    selector = MoveSelector.from_config(config_from_args(args))
    result = selector.search(board)
    logger.debug(f"Chose {result.move_name} at depth {result.depth}, interrupted={result.interrupted}")

    if args.json:
        print(json.dumps({
            "move": result.move,
            "move_name": result.move_name,
            "game_over": not result.has_legal_move,
            "depth": result.depth,
            "interrupted": result.interrupted,
            "elapsed_ms": round(result.elapsed_ms, 3),
            "nodes": result.nodes,
            "scores": {direction_name(d): score for d, score in sorted(result.scores.items())},
        }))
        return 0

    print(render_ascii(board))
    if not result.has_legal_move:
        print("\nGame over: no legal move.")
    else:
        rows = [
            [direction_name(d), f"{result.scores[d]:.3f}" if d in result.scores else "illegal"]
            for d in DIRECTIONS
        ]
        print(tabulate(rows, headers=["Direction", "Expected score"], tablefmt="grid"))

    components = evaluate_components(board)
    print(tabulate(list(components._asdict().items()), headers=["Term", "Value"], tablefmt="grid"))
    print(f"\nMove: {result.move} ({result.move_name}), depth {result.depth}, "
          f"{result.nodes} nodes in {result.elapsed_ms:.1f} ms")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
