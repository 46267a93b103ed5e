"""
Call Legality

Pure functions listing the claims a hand can make on a tile. They return
option sets rather than a single answer because several realizations can
be legal at once (e.g. a 5 claimed as 345 or 567), and the acting party
chooses between them. Nothing here mutates its inputs.
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .tiles import Tile, TileSet
from .player import Meld, MeldType


class ClaimOrigin(IntEnum):
    """Where the tile under consideration comes from"""
    OWN_DRAW = 0
    DISCARD = 1


class QuadType(IntEnum):
    """How a quad is formed"""
    CONCEALED = 0  # All four tiles already in hand
    CLAIMED = 1    # Three in hand plus another seat's discard
    ADDED = 2      # Fourth tile added to an exposed triplet


@dataclass(frozen=True)
class QuadOption:
    """A legal quad: its four tiles, how it is formed, and the tiles taken from hand"""
    quad_type: QuadType
    tiles: tuple
    from_hand: tuple


@dataclass(frozen=True)
class SequenceOption:
    """A legal sequence claim: all three tiles ascending, plus the two taken from hand"""
    tiles: tuple
    from_hand: tuple


def _hand_tiles(hand) -> List[Tile]:
    if isinstance(hand, TileSet):
        return hand.tiles
    return list(hand)


def can_claim_triplet(hand: Sequence[Tile], tile: Tile) -> bool:
    """Check if the hand holds at least two tiles of the claimed tile's kind"""
    return sum(1 for t in _hand_tiles(hand) if t == tile) >= 2


def triplet_option(hand: Sequence[Tile], tile: Tile) -> Optional[tuple]:
    """The three tiles of a triplet claim (two from hand, then the claimed tile)"""
    matches = [t for t in _hand_tiles(hand) if t == tile]
    if len(matches) < 2:
        return None
    return (matches[0], matches[1], tile)


def can_claim_quad(
    hand: Sequence[Tile],
    tile: Optional[Tile],
    origin: ClaimOrigin,
) -> List[QuadOption]:
    """
    List the quads available to a hand.

    On the seat's own draw every kind held four times is a concealed quad
    (tile may be None). On another seat's discard, exactly three matching
    tiles in hand plus the discard make a claimed quad.
    """
    tiles = _hand_tiles(hand)
    options: List[QuadOption] = []

    if origin == ClaimOrigin.DISCARD:
        if tile is None:
            return options
        matches = [t for t in tiles if t == tile]
        if len(matches) == 3:
            options.append(QuadOption(
                quad_type=QuadType.CLAIMED,
                tiles=tuple(matches) + (tile,),
                from_hand=tuple(matches),
            ))
        return options

    for kind in TileSet(tiles).get_unique_tiles():
        matches = [t for t in tiles if t == kind]
        if len(matches) == 4:
            options.append(QuadOption(
                quad_type=QuadType.CONCEALED,
                tiles=tuple(matches),
                from_hand=tuple(matches),
            ))
    return options


def added_quad_options(hand: Sequence[Tile], melds: Sequence[Meld]) -> List[QuadOption]:
    """List exposed triplets whose fourth tile is in hand"""
    tiles = _hand_tiles(hand)
    options: List[QuadOption] = []
    for meld in melds:
        if meld.meld_type != MeldType.TRIPLET:
            continue
        fourth = next((t for t in tiles if t == meld.base_tile), None)
        if fourth is not None:
            options.append(QuadOption(
                quad_type=QuadType.ADDED,
                tiles=tuple(meld.tiles) + (fourth,),
                from_hand=(fourth,),
            ))
    return options


def can_claim_sequence(hand: Sequence[Tile], tile: Tile) -> List[SequenceOption]:
    """
    List the sequences the claimed tile can complete.

    Only numbered suits form sequences. The claimed tile may be the low,
    middle or high member; each placement is valid when the other two values
    are in hand. Options come low placement first, tiles sorted ascending.
    """
    if not tile.is_numeric:
        return []

    tiles = _hand_tiles(hand)

    def find(value: int) -> Optional[Tile]:
        return next((t for t in tiles if t.suit == tile.suit and t.value == value), None)

    options: List[SequenceOption] = []
    v = tile.value
    for low in (v - 2, v - 1, v):
        if low < 1 or low + 2 > 9:
            continue
        needed = [value for value in (low, low + 1, low + 2) if value != v]
        supporting = [find(value) for value in needed]
        if any(t is None for t in supporting):
            continue
        run = sorted(supporting + [tile], key=lambda t: t.value)
        options.append(SequenceOption(tiles=tuple(run), from_hand=tuple(supporting)))
    return options
