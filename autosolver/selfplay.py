"""
Self-play harness for measuring the solver.

Plays complete games with a MoveSelector, spawning tiles the way the game
does (one tile per successful move, 2 with probability 0.9 and 4 with 0.1,
uniformly among empty cells), and summarises scores, tiles reached and
decision latency.
"""

import json
import logging
import os
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np
from tabulate import tabulate
from tqdm import tqdm

from autosolver.board import BoardType, SIZE, can_move, direction_name, empty_cells, max_tile, render_ascii, simulate_move
from autosolver.config import SolverConfig
from autosolver.selector import MoveSelector

logger = logging.getLogger(__name__)

DEFAULT_SPAWN_RATES: Dict[int, float] = {2: 0.9, 4: 0.1}
NUM_INITIAL_TILES = 2


class NumpyJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        return super(NumpyJSONEncoder, self).default(obj)


def spawn_tile(board: BoardType, rng: np.random.Generator,
               spawn_rates: Dict[int, float] = DEFAULT_SPAWN_RATES) -> BoardType:
    """Return a copy of ``board`` with one random tile added (unchanged if full)."""
    assert np.isclose(sum(spawn_rates.values()), 1.0), "Spawn probabilities must sum to 1."
    new_board = board.copy()
    cells = empty_cells(new_board)
    if not cells:
        return new_board
    r, c = cells[rng.integers(len(cells))]
    values = list(spawn_rates.keys())
    new_board[r, c] = values[rng.choice(len(values), p=list(spawn_rates.values()))]
    return new_board


def initial_board(rng: np.random.Generator) -> BoardType:
    board = np.zeros((SIZE, SIZE), dtype=np.int64)
    for _ in range(NUM_INITIAL_TILES):
        board = spawn_tile(board, rng)
    return board


def play_game(selector: MoveSelector, rng: np.random.Generator,
              max_moves: Optional[int] = None, render: bool = False) -> Dict[str, Any]:
    """Play a single game and return statistics"""
    board = initial_board(rng)
    score = 0
    turns = 0
    think_times: List[float] = []

    while can_move(board) and (max_moves is None or turns < max_moves):
        if render:
            print(f"\nTurn {turns + 1}")
            print(render_ascii(board))

        start = time.perf_counter()
        direction = selector.next_move(board)
        think_times.append((time.perf_counter() - start) * 1000.0)

        moved, gain, board = simulate_move(board, direction)
        if not moved:
            # can_move held, so the selector always has a legal direction here
            logger.warning(f"Selector returned illegal move {direction_name(direction)} on turn {turns + 1}")
            break
        board = spawn_tile(board, rng)
        score += int(gain)
        turns += 1

        if render:
            print(f"Action: {direction_name(direction)} (+{gain}), Score: {score}")

    if render:
        print("\nGame over!")
        print(render_ascii(board))
        print(f"Final score: {score}")
        print(f"Max tile: {max_tile(board)}")
        print(f"Turns: {turns}")

    return {
        'max_tile': max_tile(board),
        'score': score,
        'turns': turns,
        'avg_think_ms': float(np.mean(think_times)) if think_times else 0.0,
        'max_think_ms': float(np.max(think_times)) if think_times else 0.0,
    }


def play_games(config: SolverConfig, num_games: int = 10, seed: Optional[int] = None,
               max_moves: Optional[int] = None) -> List[Dict[str, Any]]:
    """Play multiple games and collect statistics"""
    rng = np.random.default_rng(seed)
    selector = MoveSelector(config, rng)
    results = []

    logger.info(f"Playing {num_games} games with a {config.time_budget_ms:g} ms budget per move")
    for i in tqdm(range(num_games)):
        result = play_game(selector, rng, max_moves=max_moves)
        logger.debug(f"Game {i + 1} finished. Score: {result['score']}, Max Tile: {result['max_tile']}")
        results.append(result)

    return results


def analyze_results(results: List[Dict[str, Any]], win_threshold: int = 2048) -> Dict[str, Any]:
    """Analyze game results and create statistics"""
    assert results, "No games to analyze."
    max_tiles = [result['max_tile'] for result in results]

    # Rates for every power of two from 4 up to the win tile (or beyond)
    tile_stats = {}
    max_power = max(int(np.log2(win_threshold)), int(np.ceil(np.log2(max(max_tiles + [2])))))
    for power in range(2, max_power + 1):
        tile_value = 2 ** power
        count = sum(1 for tile in max_tiles if tile >= tile_value)
        tile_stats[tile_value] = (count, count / len(results) * 100)

    wins = sum(1 for tile in max_tiles if tile >= win_threshold)

    return {
        'tile_stats': tile_stats,
        'avg_score': sum(result['score'] for result in results) / len(results),
        'max_score': max(result['score'] for result in results),
        'avg_turns': sum(result['turns'] for result in results) / len(results),
        'avg_think_ms': sum(result['avg_think_ms'] for result in results) / len(results),
        'max_think_ms': max(result['max_think_ms'] for result in results),
        'num_games': len(results),
        'win_rate': wins / len(results) * 100,
        'win_threshold': win_threshold,
    }


def print_statistics(stats: Dict[str, Any]) -> None:
    """Print statistics in a nice format"""
    print(f"\nStatistics for {stats['num_games']} games:")
    print(f"Average score: {stats['avg_score']:.1f} (best {stats['max_score']})")
    print(f"Average turns: {stats['avg_turns']:.1f}")
    print(f"Decision time: {stats['avg_think_ms']:.1f} ms average, {stats['max_think_ms']:.1f} ms worst")

    table_data = []
    for tile_value, (count, percentage) in sorted(stats['tile_stats'].items()):
        table_data.append([
            f"{tile_value}",
            f"{count}/{stats['num_games']}",
            f"{percentage:.1f}%"
        ])

    print("\nMax Tile Achievement Rates:")
    print(tabulate(table_data, headers=["Tile", "Count", "Percentage"], tablefmt="grid"))
    print(f"\nWin Rate (>={stats['win_threshold']} tile): {stats['win_rate']:.1f}%")


def save_statistics(stats: Dict[str, Any], config: SolverConfig, output_dir: str = "stats") -> str:
    """Save statistics to a JSON file and return its path"""
    os.makedirs(output_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"stats_{stats['num_games']}games_{config.time_budget_ms:g}ms_{timestamp}.json"
    filepath = os.path.join(output_dir, filename)

    json_stats = {key: value for key, value in stats.items() if key != 'tile_stats'}
    json_stats['tile_stats'] = {
        str(tile_value): {'count': count, 'percentage': percentage}
        for tile_value, (count, percentage) in stats['tile_stats'].items()
    }
    json_stats['config'] = config.to_dict()
    json_stats['config']['date'] = timestamp

    with open(filepath, 'w') as f:
        json.dump(json_stats, f, indent=2, cls=NumpyJSONEncoder)

    logger.info(f"Statistics saved to {filepath}")
    return filepath
