"""
Mahjong Rule Sets

Rule switches for the variant the engine plays. Regional differences are
expressed as presets of the same RuleSet rather than separate code paths.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RuleSet:
    """
    Rule configuration for a game.

    The defaults are the variant the game is built around: standard
    4 melds + 1 pair wins only, sequences claimed from the previous seat.
    """

    name: str = "Default"

    # Dealing
    hand_size: int = 13
    dealer: int = 0

    # Seven distinct pairs counts as a complete hand
    allow_seven_pairs: bool = False

    # Upgrading an exposed triplet with the fourth tile from hand
    allow_added_quad: bool = True

    # Sequence claims only by the seat right after the discarder
    sequence_from_left_only: bool = True

    def __repr__(self) -> str:
        return f"RuleSet({self.name})"


DEFAULT_RULES = RuleSet(name="Default")

# Seven pairs accepted as a winning shape
SEVEN_PAIRS_RULES = RuleSet(
    name="SevenPairs",
    allow_seven_pairs=True,
)
