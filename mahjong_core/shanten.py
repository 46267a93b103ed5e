"""
Hand Analysis for Mahjong

Checks complete hands and calculates the shanten number (distance to a
complete hand).

Shanten values:
- -1: Complete hand (already won)
-  0: Tenpai (one tile away from winning)
-  1: One away from tenpai
-  2+: Further from tenpai
"""

import functools
from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union
import numpy as np

from .tiles import Tile, TileSet

HandLike = Union[np.ndarray, TileSet, Iterable[Tile]]

# (start, stop, allows sequences) for each suit in the 34-element count array
SUIT_SLICES = (
    (0, 9, True),     # Characters
    (9, 18, True),    # Bamboos
    (18, 27, True),   # Dots
    (27, 31, False),  # Winds
    (31, 34, False),  # Dragons
)

MAX_SHANTEN = 8


def to_count_array(hand: HandLike) -> np.ndarray:
    """Convert tiles (or an existing count array) to a fresh 34-element int8 array"""
    if isinstance(hand, np.ndarray):
        return hand.astype(np.int8, copy=True)
    if isinstance(hand, TileSet):
        return hand.to_count_array()
    counts = np.zeros(TileSet.NUM_TILE_TYPES, dtype=np.int8)
    for tile in hand:
        counts[tile.tile_index] += 1
    return counts


@functools.lru_cache(maxsize=65536)
def _can_form_sets(counts: bytes, numeric: bool) -> bool:
    """
    Check whether one suit's counts fully decompose into triplets and sequences.
    The lowest remaining tile is tried as a triplet, then as a sequence start.
    """
    c = list(counts)
    first = next((i for i, n in enumerate(c) if n > 0), -1)
    if first == -1:
        return True

    if c[first] >= 3:
        c[first] -= 3
        if _can_form_sets(bytes(c), numeric):
            return True
        c[first] += 3

    if numeric and first + 2 < len(c) and c[first + 1] > 0 and c[first + 2] > 0:
        c[first] -= 1
        c[first + 1] -= 1
        c[first + 2] -= 1
        if _can_form_sets(bytes(c), numeric):
            return True

    return False


def _all_suits_form_sets(counts: np.ndarray) -> bool:
    for start, stop, numeric in SUIT_SLICES:
        if not _can_form_sets(counts[start:stop].tobytes(), numeric):
            return False
    return True


def is_winning_hand(hand: HandLike) -> bool:
    """
    Check if the tiles form exactly one pair plus complete melds.

    Exposed melds are not part of the input, so a 14-tile concealed hand needs
    four melds and a hand with one exposed meld needs three. An empty input is
    complete (all melds exposed) and a 2-tile input is complete iff it is a pair.
    """
    counts = to_count_array(hand)
    total = int(counts.sum())
    if total == 0:
        return True
    if total % 3 != 2:
        return False

    for idx in np.nonzero(counts >= 2)[0]:
        counts[idx] -= 2
        complete = _all_suits_form_sets(counts)
        counts[idx] += 2
        if complete:
            return True
    return False


def is_seven_pairs(hand: HandLike) -> bool:
    """Check if the tiles are seven distinct pairs"""
    counts = to_count_array(hand)
    return int(counts.sum()) == 14 and int(np.count_nonzero(counts == 2)) == 7


@functools.lru_cache(maxsize=65536)
def _best_suit_blocks(counts: bytes, numeric: bool) -> Tuple[int, int]:
    """
    Best (melds, partials) decomposition of one suit.

    The lowest tile is consumed as a triplet, a sequence start, a pair, a
    proto-sequence (gap of 1 or 2) or skipped. Results compare melds first,
    then partials.
    """
    c = list(counts)
    size = len(c)
    idx = next((i for i, n in enumerate(c) if n > 0), -1)
    if idx == -1:
        return (0, 0)

    options = []

    def consume(offsets: Tuple[int, ...], melds: int, partials: int) -> None:
        for offset in offsets:
            c[idx + offset] -= 1
        rest_melds, rest_partials = _best_suit_blocks(bytes(c), numeric)
        for offset in offsets:
            c[idx + offset] += 1
        options.append((rest_melds + melds, rest_partials + partials))

    # Triplet
    if c[idx] >= 3:
        consume((0, 0, 0), 1, 0)

    # Sequence
    if numeric and idx + 2 < size and c[idx + 1] > 0 and c[idx + 2] > 0:
        consume((0, 1, 2), 1, 0)

    # Pair
    if c[idx] >= 2:
        consume((0, 0), 0, 1)

    # Proto-sequences (adjacent, then one gap)
    if numeric:
        for gap in (1, 2):
            if idx + gap < size and c[idx + gap] > 0:
                consume((0, gap), 0, 1)

    # Isolated tile
    consume((0,), 0, 0)

    return max(options)


def _blocks_shanten(counts: np.ndarray, existing_melds: int, pair: int) -> int:
    melds = existing_melds
    partials = 0
    for start, stop, numeric in SUIT_SLICES:
        m, t = _best_suit_blocks(counts[start:stop].tobytes(), numeric)
        melds += m
        partials += t
    # Only four meld slots exist; extra partials have nowhere to go
    partials = min(partials, max(0, 4 - melds))
    return MAX_SHANTEN - 2 * melds - partials - pair


def standard_shanten(counts: np.ndarray, existing_melds: int = 0) -> int:
    """
    Shanten of the 4 melds + 1 pair form: 8 - 2M - T - P.

    Tries every kind held twice as the reserved pair, and no reserved pair.
    """
    counts = to_count_array(counts)
    best = _blocks_shanten(counts, existing_melds, 0)
    for idx in np.nonzero(counts >= 2)[0]:
        counts[idx] -= 2
        best = min(best, _blocks_shanten(counts, existing_melds, 1))
        counts[idx] += 2
    return best


def seven_pairs_shanten(counts: np.ndarray) -> int:
    """Shanten for seven distinct pairs: 6 - kinds held at least twice"""
    return 6 - int(np.count_nonzero(np.asarray(counts) >= 2))


@dataclass
class ShantenResult:
    """Result of shanten calculation."""
    shanten: int  # -1 = complete, 0 = tenpai, 1+ = tiles away
    standard: int
    seven_pairs: int  # MAX_SHANTEN when the form does not apply


class ShantenCalculator:
    """
    Shanten calculator for the standard form and seven pairs.

    Seven pairs is only considered for concealed hands (no existing melds)
    of at least 13 tiles.
    """

    def calculate(self, hand: HandLike, num_melds: int = 0) -> ShantenResult:
        """
        Calculate shanten for a hand.

        Args:
            hand: Concealed tiles or a 34-element count array
            num_melds: Number of melds already exposed

        Returns:
            ShantenResult with the overall and per-form shanten
        """
        counts = to_count_array(hand)
        standard = standard_shanten(counts, num_melds)

        seven_pairs = MAX_SHANTEN
        if num_melds == 0 and int(counts.sum()) >= 13:
            seven_pairs = seven_pairs_shanten(counts)

        return ShantenResult(
            shanten=min(standard, seven_pairs),
            standard=standard,
            seven_pairs=seven_pairs,
        )

    def best_discards(self, hand: HandLike, num_melds: int = 0) -> Tuple[List[int], int]:
        """
        Find the discards that leave the lowest shanten.

        Returns: (tile indices in ascending order, resulting shanten)
        """
        counts = to_count_array(hand)
        best_tiles: List[int] = []
        best_shanten = MAX_SHANTEN + 1

        for tile_idx in np.nonzero(counts)[0]:
            counts[tile_idx] -= 1
            shanten = self.calculate(counts, num_melds).shanten
            counts[tile_idx] += 1

            if shanten < best_shanten:
                best_shanten = shanten
                best_tiles = [int(tile_idx)]
            elif shanten == best_shanten:
                best_tiles.append(int(tile_idx))

        return best_tiles, best_shanten


def calculate_shanten(hand: HandLike, num_melds: int = 0) -> int:
    """
    Convenience function to calculate shanten.

    Args:
        hand: Concealed tiles or a 34-element count array
        num_melds: Number of melds already exposed

    Returns:
        Shanten value (-1 to 8)
    """
    return ShantenCalculator().calculate(hand, num_melds).shanten
