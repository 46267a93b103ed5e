"""
Mahjong Agents (heuristic and Monte-Carlo)
"""

from .heuristic_agent import HeuristicAgent
from .monte_carlo_agent import MonteCarloAgent, RolloutStats
from .profiles import (
    BehaviorProfile,
    AGGRESSIVE,
    BALANCED,
    DEFENSIVE,
    DEFAULT_PROFILE,
    get_profile,
)

__all__ = [
    "HeuristicAgent",
    "MonteCarloAgent",
    "RolloutStats",
    "BehaviorProfile",
    "AGGRESSIVE",
    "BALANCED",
    "DEFENSIVE",
    "DEFAULT_PROFILE",
    "get_profile",
]
