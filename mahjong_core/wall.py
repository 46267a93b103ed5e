"""
Tile wall for a single game.

The wall is a shuffled list of the 136 physical tiles. Every draw, both the
regular turn draw and the replacement after a quad, takes the last tile of
the list, so there is no separate dead wall.
"""

import random
from typing import List, Optional
from dataclasses import dataclass, field

from .tiles import Tile, TileSet

# Tiles handed to each seat per pass of the opening deal
DEAL_PACKET = 4


@dataclass
class Wall:
    """
    Attributes:
        tiles: Undrawn tiles; the tail of the list is the next draw
        seed: Shuffle seed, None for an unseeded shuffle
    """
    tiles: List[Tile] = field(default_factory=list)
    seed: Optional[int] = None

    def __post_init__(self):
        # An explicit tile list is used as-is, in order
        if not self.tiles:
            self.tiles = list(TileSet.create_full_set().tiles)
            random.Random(self.seed).shuffle(self.tiles)

    def draw(self) -> Optional[Tile]:
        """Take the tail tile, or None once the wall is exhausted"""
        return self.tiles.pop() if self.tiles else None

    def _take(self, count: int) -> List[Tile]:
        taken = self.tiles[-count:][::-1] if count else []
        del self.tiles[len(self.tiles) - len(taken):]
        return taken

    def deal_hands(self, num_players: int = 4, hand_size: int = 13) -> List[List[Tile]]:
        """
        Opening deal: packets of DEAL_PACKET tiles round the table while a
        full packet still fits, then single tiles up to hand_size.
        """
        hands: List[List[Tile]] = [[] for _ in range(num_players)]
        while len(hands[-1]) + DEAL_PACKET <= hand_size and self.tiles:
            for hand in hands:
                hand.extend(self._take(DEAL_PACKET))
        while len(hands[-1]) < hand_size and self.tiles:
            for hand in hands:
                hand.extend(self._take(1))
        return hands

    @property
    def remaining(self) -> int:
        return len(self.tiles)

    @property
    def is_empty(self) -> bool:
        return not self.tiles

    def __repr__(self) -> str:
        return f"Wall({self.remaining} tiles remaining)"
