"""
Mahjong Rules and Decision Core
Four-player game without flowers: hand analysis, call legality and the
turn/claim state machine.
"""

from .tiles import Tile, TileSuit, TileSet, parse_tiles
from .player import Player, Meld, MeldType
from .wall import Wall
from .rules import RuleSet, DEFAULT_RULES, SEVEN_PAIRS_RULES
from .errors import MahjongError, IllegalActionError, HandInvariantViolation, ControllerError
from .shanten import ShantenCalculator, calculate_shanten, is_winning_hand, is_seven_pairs
from .calls import (
    ClaimOrigin,
    QuadType,
    can_claim_triplet,
    can_claim_quad,
    can_claim_sequence,
    added_quad_options,
)
from .game import (
    Game,
    GamePhase,
    Action,
    ActionType,
    WinType,
    GameMessage,
    GameSnapshot,
    PlayerView,
    CommandResult,
)

__version__ = "0.1.0"
__all__ = [
    "Tile",
    "TileSuit",
    "TileSet",
    "parse_tiles",
    "Player",
    "Meld",
    "MeldType",
    "Wall",
    "RuleSet",
    "DEFAULT_RULES",
    "SEVEN_PAIRS_RULES",
    "MahjongError",
    "IllegalActionError",
    "HandInvariantViolation",
    "ControllerError",
    "ShantenCalculator",
    "calculate_shanten",
    "is_winning_hand",
    "is_seven_pairs",
    "ClaimOrigin",
    "QuadType",
    "can_claim_triplet",
    "can_claim_quad",
    "can_claim_sequence",
    "added_quad_options",
    "Game",
    "GamePhase",
    "Action",
    "ActionType",
    "WinType",
    "GameMessage",
    "GameSnapshot",
    "PlayerView",
    "CommandResult",
]
