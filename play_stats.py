#!/usr/bin/env python3
"""
Play multiple 2048 games with the expectimax solver and generate statistics.
This script plays a specified number of games and reports max tiles achieved,
win rates, average scores and how long each decision took.

Example usage:
    python play_stats.py --games 20 --time-budget 40 --seed 7 --save-stats
"""

import argparse
import logging

import numpy as np

from autosolver.config import add_solver_args, config_from_args
from autosolver.selector import MoveSelector
from autosolver.selfplay import analyze_results, play_game, play_games, print_statistics, save_statistics

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Play multiple 2048 games and analyze max tile statistics')
    parser.add_argument('--games', type=int, default=10, help='Number of games to play')
    parser.add_argument('--max-moves', type=int, default=None, help='Stop each game after this many moves')
    parser.add_argument('--win-threshold', type=int, default=2048, help='Tile value considered a win')
    parser.add_argument('--save-stats', action='store_true', help='Save statistics to a JSON file')
    parser.add_argument('--output-dir', type=str, default='stats', help='Directory to save statistics')
    parser.add_argument('--render', action='store_true', help='Render a sample game first')
    parser.add_argument('--verbose', action='store_true', help='Log every search depth')
    add_solver_args(parser)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    config = config_from_args(args)

    if args.render:
        print("Playing a sample game with rendering...")
        rng = np.random.default_rng(args.seed)
        selector = MoveSelector(config, rng)
        play_game(selector, rng, max_moves=args.max_moves, render=True)

    results = play_games(config, num_games=args.games, seed=args.seed, max_moves=args.max_moves)
    stats = analyze_results(results, win_threshold=args.win_threshold)
    print_statistics(stats)
    logger.info(f"Finished {stats['num_games']} games, win rate {stats['win_rate']:.1f}%")

    if args.save_stats:
        save_statistics(stats, config, output_dir=args.output_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
