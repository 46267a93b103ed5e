"""
Mahjong Player Module

Handles player state, hand management, and melds.
"""

from enum import IntEnum
from dataclasses import dataclass, field
from typing import List, Optional

from .tiles import Tile, TileSet


class MeldType(IntEnum):
    """Types of melds (combinations) a player can expose"""
    SEQUENCE = 0        # 3 consecutive tiles in same numbered suit
    TRIPLET = 1         # 3 identical tiles
    QUAD = 2            # 4 identical tiles (exposed)
    CONCEALED_QUAD = 3  # 4 identical tiles (declared from hand)


@dataclass
class Meld:
    """
    Represents a meld (combination) of tiles.

    Attributes:
        meld_type: Type of meld
        tiles: Tiles in the meld (sequences are stored ascending)
        is_concealed: Whether the meld is concealed
        source_seat: Seat the claimed tile came from (None for concealed quads)
        source_tile: The tile that was claimed to form this meld
    """
    meld_type: MeldType
    tiles: List[Tile]
    is_concealed: bool = False
    source_seat: Optional[int] = None
    source_tile: Optional[Tile] = None

    def __post_init__(self):
        """Validate meld"""
        if self.meld_type == MeldType.SEQUENCE:
            if len(self.tiles) != 3:
                raise ValueError("Sequence must have exactly 3 tiles")
            self.tiles = sorted(self.tiles)
            if not self._is_valid_sequence(self.tiles):
                raise ValueError(f"Invalid sequence: {self.tiles}")
        elif self.meld_type == MeldType.TRIPLET:
            if len(self.tiles) != 3:
                raise ValueError("Triplet must have exactly 3 tiles")
            if not all(t == self.tiles[0] for t in self.tiles):
                raise ValueError("Triplet tiles must be identical")
        elif self.meld_type in (MeldType.QUAD, MeldType.CONCEALED_QUAD):
            if len(self.tiles) != 4:
                raise ValueError("Quad must have exactly 4 tiles")
            if not all(t == self.tiles[0] for t in self.tiles):
                raise ValueError("Quad tiles must be identical")

    @staticmethod
    def _is_valid_sequence(tiles: List[Tile]) -> bool:
        """Check if sorted tiles form a valid sequence"""
        if not tiles[0].is_numeric:
            return False
        if not all(t.suit == tiles[0].suit for t in tiles):
            return False
        return tiles[1].value == tiles[0].value + 1 and tiles[2].value == tiles[1].value + 1

    @property
    def base_tile(self) -> Tile:
        """Lowest tile of a sequence, or the repeated tile"""
        return self.tiles[0]

    @property
    def is_quad(self) -> bool:
        return self.meld_type in (MeldType.QUAD, MeldType.CONCEALED_QUAD)

    def __repr__(self) -> str:
        return f"Meld({self.meld_type.name}, {self.tiles})"

    def __str__(self) -> str:
        tiles_str = " ".join(str(t) for t in self.tiles)
        return f"[{self.meld_type.name}: {tiles_str}]"


@dataclass
class Player:
    """
    Represents a Mahjong player.

    Attributes:
        seat: Seat index (0-3 in turn order)
        hand: Concealed tiles
        melds: Exposed melds, in declaration order
        discards: Discarded tiles still in the discard pile
        seat_wind: Seat wind value (1=East .. 4=North)
        is_ai: Whether the seat is driven by an AI controller
    """
    seat: int
    hand: TileSet = field(default_factory=TileSet)
    melds: List[Meld] = field(default_factory=list)
    discards: List[Tile] = field(default_factory=list)
    seat_wind: int = 1
    is_ai: bool = False

    def add_tile(self, tile: Tile) -> None:
        self.hand.add(tile)

    def discard_tile(self, tile_id: int) -> Optional[Tile]:
        """
        Move the tile with the given id from hand to the discard pile.
        Returns the tile, or None if it is not in hand.
        """
        tile = self.hand.remove_by_id(tile_id)
        if tile is not None:
            self.discards.append(tile)
        return tile

    def declare_meld(self, meld: Meld) -> None:
        self.melds.append(meld)

    def get_hand_tiles(self) -> List[Tile]:
        return list(self.hand.tiles)

    @property
    def effective_hand_size(self) -> int:
        """Hand size counting each meld as 3 tiles (quads are offset by the replacement draw)"""
        return len(self.hand) + 3 * len(self.melds)

    @property
    def is_concealed_hand(self) -> bool:
        """Check if hand has no exposed (claimed) melds"""
        return all(meld.is_concealed for meld in self.melds)

    def __repr__(self) -> str:
        return f"Player({self.seat}, hand={len(self.hand)}, melds={len(self.melds)})"
