"""
Mahjong Tiles System

Defines the 136 tiles of the game:
- 9 Characters x4 = 36
- 9 Bamboos x4 = 36
- 9 Dots x4 = 36
- 4 Winds (East, South, West, North) x4 = 16
- 3 Dragons (Red, Green, White) x4 = 12
Total: 136 tiles
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import List, Optional
import numpy as np


class TileSuit(IntEnum):
    """Tile suits, in hand sort order"""
    CHARACTERS = 0  # Numbers 1-9
    BAMBOOS = 1     # Numbers 1-9
    DOTS = 2        # Numbers 1-9
    WINDS = 3       # East, South, West, North
    DRAGONS = 4     # Red, Green, White


class WindType(IntEnum):
    """Wind tile values (ordinal direction)"""
    EAST = 1
    SOUTH = 2
    WEST = 3
    NORTH = 4


class DragonType(IntEnum):
    """Dragon tile values (ordinal color)"""
    RED = 1
    GREEN = 2
    WHITE = 3


NUMERIC_SUITS = (TileSuit.CHARACTERS, TileSuit.BAMBOOS, TileSuit.DOTS)

# Highest value per suit
SUIT_MAX_VALUE = {
    TileSuit.CHARACTERS: 9,
    TileSuit.BAMBOOS: 9,
    TileSuit.DOTS: 9,
    TileSuit.WINDS: 4,
    TileSuit.DRAGONS: 3,
}

# First tile_index of each suit
SUIT_OFFSET = {
    TileSuit.CHARACTERS: 0,
    TileSuit.BAMBOOS: 9,
    TileSuit.DOTS: 18,
    TileSuit.WINDS: 27,
    TileSuit.DRAGONS: 31,
}

WIND_NAMES = ["East", "South", "West", "North"]
DRAGON_NAMES = ["Red", "Green", "White"]


@dataclass(frozen=True)
class Tile:
    """
    Represents a single physical Mahjong tile.

    Attributes:
        suit: The suit of the tile (Characters, Bamboos, Dots, Winds, Dragons)
        value: The value within the suit (1-9 numbered, 1-4 winds, 1-3 dragons)
        id: Unique identifier of this physical tile (0-135 in a full set)
    """
    suit: TileSuit
    value: int
    id: int = 0

    def __post_init__(self):
        """Validate tile values"""
        max_value = SUIT_MAX_VALUE[TileSuit(self.suit)]
        if not 1 <= self.value <= max_value:
            raise ValueError(
                f"{TileSuit(self.suit).name} tiles must have value 1-{max_value}, got {self.value}"
            )

    @property
    def is_numeric(self) -> bool:
        """Check if tile belongs to a numbered suit"""
        return self.suit in NUMERIC_SUITS

    @property
    def is_honor(self) -> bool:
        """Check if tile is an honor tile (Wind or Dragon)"""
        return self.suit in (TileSuit.WINDS, TileSuit.DRAGONS)

    @property
    def is_terminal(self) -> bool:
        """Check if tile is a terminal (1 or 9 of numbered suits)"""
        return self.is_numeric and self.value in (1, 9)

    @property
    def is_terminal_or_honor(self) -> bool:
        return self.is_terminal or self.is_honor

    @property
    def is_simple(self) -> bool:
        """Check if tile is a simple (2-8 of numbered suits)"""
        return self.is_numeric and 2 <= self.value <= 8

    @property
    def tile_index(self) -> int:
        """
        Get unique index for this tile kind (0-33).
        Used for count arrays, which ignore the physical id.
        """
        return SUIT_OFFSET[TileSuit(self.suit)] + self.value - 1

    def same_tile(self, other: 'Tile') -> bool:
        """Check physical identity (same id), not just same kind"""
        return self == other and self.id == other.id

    def __eq__(self, other) -> bool:
        """Two tiles are equal if they have same suit and value (ignoring id)"""
        if not isinstance(other, Tile):
            return False
        return self.suit == other.suit and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.suit, self.value))

    def __lt__(self, other) -> bool:
        """Comparison for sorting: suit first, then value"""
        if not isinstance(other, Tile):
            return NotImplemented
        if self.suit != other.suit:
            return self.suit < other.suit
        return self.value < other.value

    def __repr__(self) -> str:
        return f"Tile({TileSuit(self.suit).name}, {self.value}, id={self.id})"

    def __str__(self) -> str:
        if self.suit == TileSuit.CHARACTERS:
            return f"{self.value}m"
        elif self.suit == TileSuit.BAMBOOS:
            return f"{self.value}s"
        elif self.suit == TileSuit.DOTS:
            return f"{self.value}p"
        elif self.suit == TileSuit.WINDS:
            return WIND_NAMES[self.value - 1]
        return DRAGON_NAMES[self.value - 1]

    @classmethod
    def from_index(cls, tile_index: int, instance_id: int = 0) -> 'Tile':
        """
        Create a tile from its kind index (0-33).

        Args:
            tile_index: Tile kind index (0-33)
            instance_id: Physical id to give the tile
        """
        if tile_index < 9:
            return cls(TileSuit.CHARACTERS, tile_index + 1, instance_id)
        elif tile_index < 18:
            return cls(TileSuit.BAMBOOS, tile_index - 9 + 1, instance_id)
        elif tile_index < 27:
            return cls(TileSuit.DOTS, tile_index - 18 + 1, instance_id)
        elif tile_index < 31:
            return cls(TileSuit.WINDS, tile_index - 27 + 1, instance_id)
        return cls(TileSuit.DRAGONS, tile_index - 31 + 1, instance_id)


# Suffix letters used by parse_tiles
_SUFFIX_SUITS = {
    "m": TileSuit.CHARACTERS,
    "s": TileSuit.BAMBOOS,
    "p": TileSuit.DOTS,
    "w": TileSuit.WINDS,
    "d": TileSuit.DRAGONS,
}


def parse_tiles(notation: str, start_id: int = 0) -> List[Tile]:
    """
    Build tiles from compact notation, e.g. "123m 456p 11w 3d".

    Digits are collected until a suit letter (m=characters, s=bamboos,
    p=dots, w=winds, d=dragons). Tiles get sequential ids from start_id so
    that every tile in the result is physically distinct.
    """
    tiles = []
    pending: List[int] = []
    next_id = start_id
    for ch in notation.replace(" ", ""):
        if ch.isdigit():
            pending.append(int(ch))
        elif ch in _SUFFIX_SUITS:
            if not pending:
                raise ValueError(f"Suit '{ch}' without values in {notation!r}")
            for value in pending:
                tiles.append(Tile(_SUFFIX_SUITS[ch], value, next_id))
                next_id += 1
            pending = []
        else:
            raise ValueError(f"Cannot parse tile notation: {notation!r}")
    if pending:
        raise ValueError(f"Trailing values without suit in {notation!r}")
    return tiles


class TileSet:
    """
    A collection of tiles with utility methods.
    Used to represent hands, melds, discards, etc.
    """

    # Total number of unique tile kinds
    NUM_TILE_TYPES = 34
    # Total tiles in a complete set
    NUM_TILES = 136
    # Copies of each tile kind
    COPIES_PER_TYPE = 4

    def __init__(self, tiles: Optional[List[Tile]] = None):
        self.tiles: List[Tile] = list(tiles) if tiles else []

    def add(self, tile: Tile) -> None:
        self.tiles.append(tile)

    def remove_by_id(self, tile_id: int) -> Optional[Tile]:
        """Remove the physical tile with the given id"""
        for i, t in enumerate(self.tiles):
            if t.id == tile_id:
                return self.tiles.pop(i)
        return None

    def count(self, tile: Tile) -> int:
        """Count occurrences of a tile kind"""
        return sum(1 for t in self.tiles if t == tile)

    def sort(self) -> None:
        """Sort tiles by suit and value"""
        self.tiles.sort()

    def sort_grouped(self) -> None:
        """
        Cosmetic sort: complete triplets first, then greedy sequences,
        then the remaining tiles in suit/value order.
        """
        remaining = sorted(self.tiles)
        formed: List[Tile] = []

        def take(tiles: List[Tile]) -> None:
            for t in tiles:
                # list.remove matches by kind; drop this exact object
                idx = next(i for i, r in enumerate(remaining) if r is t)
                formed.append(remaining.pop(idx))

        for tile in TileSet(remaining).get_unique_tiles():
            matches = [t for t in remaining if t == tile]
            if len(matches) >= 3:
                take(matches[:3])

        found = True
        while found and len(remaining) >= 3:
            found = False
            for first in remaining:
                if not first.is_numeric:
                    continue
                second = next((t for t in remaining if t.suit == first.suit and t.value == first.value + 1), None)
                third = next((t for t in remaining if t.suit == first.suit and t.value == first.value + 2), None)
                if second is not None and third is not None:
                    take([first, second, third])
                    found = True
                    break

        self.tiles = formed + remaining

    def to_count_array(self) -> np.ndarray:
        """
        Convert to a 34-element array counting each tile kind.
        Used by hand analysis and the AI rollouts.
        """
        counts = np.zeros(self.NUM_TILE_TYPES, dtype=np.int8)
        for tile in self.tiles:
            counts[tile.tile_index] += 1
        return counts

    @classmethod
    def create_full_set(cls) -> 'TileSet':
        """Create a complete set of 136 tiles with ids 0-135"""
        tiles = []
        instance_id = 0
        for suit in TileSuit:
            for value in range(1, SUIT_MAX_VALUE[suit] + 1):
                for _ in range(cls.COPIES_PER_TYPE):
                    tiles.append(Tile(suit, value, instance_id))
                    instance_id += 1
        return cls(tiles)

    def get_unique_tiles(self) -> List[Tile]:
        """Get list of unique tile kinds in the set (first physical tile of each)"""
        seen = set()
        unique = []
        for tile in self.tiles:
            if tile not in seen:
                seen.add(tile)
                unique.append(tile)
        return unique

    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self):
        return iter(self.tiles)

    def __getitem__(self, index):
        return self.tiles[index]

    def __repr__(self) -> str:
        return f"TileSet({len(self.tiles)} tiles)"

    def __str__(self) -> str:
        return " ".join(str(t) for t in sorted(self.tiles))


# Convenience functions for creating specific tiles
def char(value: int, instance_id: int = 0) -> Tile:
    """Create a Characters tile (1-9m)"""
    return Tile(TileSuit.CHARACTERS, value, instance_id)

def bam(value: int, instance_id: int = 0) -> Tile:
    """Create a Bamboos tile (1-9s)"""
    return Tile(TileSuit.BAMBOOS, value, instance_id)

def dot(value: int, instance_id: int = 0) -> Tile:
    """Create a Dots tile (1-9p)"""
    return Tile(TileSuit.DOTS, value, instance_id)

def wind(wind_type: WindType, instance_id: int = 0) -> Tile:
    return Tile(TileSuit.WINDS, int(wind_type), instance_id)

def dragon(dragon_type: DragonType, instance_id: int = 0) -> Tile:
    return Tile(TileSuit.DRAGONS, int(dragon_type), instance_id)


# Named wind tiles
EAST = Tile(TileSuit.WINDS, WindType.EAST)
SOUTH = Tile(TileSuit.WINDS, WindType.SOUTH)
WEST = Tile(TileSuit.WINDS, WindType.WEST)
NORTH = Tile(TileSuit.WINDS, WindType.NORTH)

# Named dragon tiles
RED_DRAGON = Tile(TileSuit.DRAGONS, DragonType.RED)
GREEN_DRAGON = Tile(TileSuit.DRAGONS, DragonType.GREEN)
WHITE_DRAGON = Tile(TileSuit.DRAGONS, DragonType.WHITE)
