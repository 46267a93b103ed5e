#!/usr/bin/env python3
"""
Self-play simulation for the Mahjong AI

Plays a number of all-AI games and prints how they ended.

Usage:
    python simulate.py --games 20 --profile balanced --seed 1
    python simulate.py --games 5 --opponents heuristic --verbose
"""

import argparse
import logging
import sys
import time
from collections import Counter
from pathlib import Path
from typing import Dict, Optional

sys.path.insert(0, str(Path(__file__).parent))

from mahjong_core.game import Game, WinType
from mahjong_core.rules import DEFAULT_RULES, SEVEN_PAIRS_RULES
from agents.heuristic_agent import HeuristicAgent
from agents.monte_carlo_agent import MonteCarloAgent
from agents.profiles import PROFILES, get_profile

logger = logging.getLogger(__name__)

RULES = {"default": DEFAULT_RULES, "seven-pairs": SEVEN_PAIRS_RULES}


def build_controllers(profile_name: str, opponents: str, seed: Optional[int], workers: Optional[int]) -> Dict[int, object]:
    """Seat 0 is the Monte-Carlo agent under test; the others follow --opponents"""
    profile = get_profile(profile_name)
    controllers = {0: MonteCarloAgent(profile, seed=seed, max_workers=workers)}
    for seat in range(1, Game.NUM_PLAYERS):
        if opponents == "heuristic":
            controllers[seat] = HeuristicAgent()
        else:
            agent_seed = None if seed is None else seed + seat
            controllers[seat] = MonteCarloAgent(profile, seed=agent_seed, max_workers=workers)
    return controllers


def run(games: int, profile: str, opponents: str, rules: str, seed: Optional[int], workers: Optional[int]) -> Counter:
    results = Counter()
    controllers = build_controllers(profile, opponents, seed, workers)

    for i in range(games):
        game_seed = None if seed is None else seed + i
        game = Game(seed=game_seed, rules=RULES[rules], controllers=controllers)

        start = time.time()
        game.start_game()
        elapsed = time.time() - start

        if game.winner is None:
            results["draw"] += 1
            outcome = "exhaustive draw"
        else:
            results[f"seat{game.winner}"] += 1
            how = "self-draw" if game.win_type == WinType.SELF_DRAW else "claim"
            results[how] += 1
            outcome = f"seat {game.winner} wins by {how}"

        logger.info(f"Game {i + 1}/{games}: {outcome} after {game.turn_count} draws ({elapsed:.1f}s)")

    return results


def main():
    parser = argparse.ArgumentParser(
        description="Simulate all-AI Mahjong games",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python simulate.py --games 10
  python simulate.py --games 50 --profile defensive --opponents heuristic --seed 7
        """
    )
    parser.add_argument("--games", type=int, default=10,
                        help="Number of games to play")
    parser.add_argument("--profile", type=str, default="aggressive",
                        choices=sorted(PROFILES),
                        help="Behaviour profile of the Monte-Carlo agents")
    parser.add_argument("--opponents", type=str, default="monte-carlo",
                        choices=["monte-carlo", "heuristic"],
                        help="Agents in seats 1-3")
    parser.add_argument("--rules", type=str, default="default",
                        choices=sorted(RULES))
    parser.add_argument("--seed", type=int, default=None,
                        help="Base seed for walls and agents")
    parser.add_argument("--workers", type=int, default=None,
                        help="Evaluate candidates on this many threads")
    parser.add_argument("--verbose", action="store_true",
                        help="Log every transition")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    results = run(args.games, args.profile, args.opponents, args.rules, args.seed, args.workers)

    print("\n" + "=" * 50)
    print(f"Games: {args.games}  Profile: {args.profile}  Opponents: {args.opponents}")
    print("=" * 50)
    for seat in range(Game.NUM_PLAYERS):
        wins = results[f"seat{seat}"]
        print(f"  Seat {seat}: {wins} wins ({wins / max(args.games, 1):.0%})")
    print(f"  Self-draw wins: {results['self-draw']}")
    print(f"  Claim wins:     {results['claim']}")
    print(f"  Draws:          {results['draw']}")


if __name__ == "__main__":
    main()
