"""
Tests for hand analysis (complete hands and shanten)
"""

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mahjong_core.tiles import TileSet, parse_tiles
from mahjong_core.shanten import (
    ShantenCalculator,
    calculate_shanten,
    is_winning_hand,
    is_seven_pairs,
    standard_shanten,
    to_count_array,
)


class TestWinningHand:
    """Test complete-hand detection"""

    @pytest.mark.parametrize("notation", [
        "123m 456m 789m 123p 55s",
        "111m 222m 333m 444m 55m",
        "123m 123m 123m 99s 111w",
        "111w 222w 333d 123p 99p",
        "11223344556677m",
    ])
    def test_complete_hands(self, notation):
        assert is_winning_hand(parse_tiles(notation))

    @pytest.mark.parametrize("notation", [
        "123m 456m 789m 123p 5s 6s",
        "123w 456m 789m 123p 55s",
        "11m 44m 77s 22p 55p 11w 22w",
        "123m 456m 789m 123p 5s",
    ])
    def test_incomplete_hands(self, notation):
        assert not is_winning_hand(parse_tiles(notation))

    def test_small_inputs(self):
        """Hands shrunk by exposed melds"""
        assert is_winning_hand([])
        assert is_winning_hand(parse_tiles("55p"))
        assert not is_winning_hand(parse_tiles("56p"))
        assert is_winning_hand(parse_tiles("345s 99m"))

    def test_accepts_count_array_and_tileset(self):
        tiles = parse_tiles("123m 456m 789m 123p 55s")
        assert is_winning_hand(TileSet(tiles))
        counts = to_count_array(tiles)
        assert is_winning_hand(counts)
        # Input array is left untouched
        assert int(counts.sum()) == 14

    def test_seven_pairs(self):
        assert is_seven_pairs(parse_tiles("11m 44m 77s 22p 55p 11w 22w"))
        assert not is_seven_pairs(parse_tiles("1111m 77s 22p 55p 11w 22w"))
        assert not is_seven_pairs(parse_tiles("11m 44m 77s 22p 55p 11w"))


class TestShanten:
    """Test shanten calculation"""

    def test_complete_is_minus_one(self):
        assert calculate_shanten(parse_tiles("123m 456m 789m 123p 55s")) == -1

    def test_tenpai_is_zero(self):
        assert calculate_shanten(parse_tiles("123m 456m 789m 123p 5s")) == 0
        assert calculate_shanten(parse_tiles("123m 456m 789m 12p 55s")) == 0

    def test_far_hand(self):
        hand = parse_tiles("147m 258s 369p 1234w 1d")
        assert calculate_shanten(hand) >= 5

    def test_monotonic_towards_completion(self):
        """Swapping isolated honours for the missing tiles never raises shanten"""
        target = parse_tiles("123456789m 123p 55p")
        junk = parse_tiles("1w 2w 3w 4w 1d", start_id=100)

        values = []
        for k in range(5, -1, -1):
            hand = target[:14 - k] + junk[:k]
            values.append(calculate_shanten(hand))

        assert values == sorted(values, reverse=True)
        assert values[-2] == 0
        assert values[-1] == -1

    def test_existing_melds(self):
        """A hand with one exposed meld needs three melds and a pair"""
        assert calculate_shanten(parse_tiles("123m 456m 789m 55s"), 1) == -1
        assert calculate_shanten(parse_tiles("123m 456m 789m 5s"), 1) == 0

    def test_seven_pairs_tenpai(self):
        result = ShantenCalculator().calculate(parse_tiles("11m 44m 77m 22p 55p 88p 1w"))
        assert result.shanten == 0
        assert result.seven_pairs == 0
        assert result.standard == 3

    def test_seven_pairs_needs_concealed_hand(self):
        result = ShantenCalculator().calculate(parse_tiles("11m 44m 77m 22p 55p"), 1)
        assert result.seven_pairs == 8
        assert result.shanten == result.standard

    def test_honors_form_no_sequences(self):
        counts = to_count_array(parse_tiles("123w 123d 123m 456m 55s"))
        # Only the two character sequences and the pair count
        assert standard_shanten(counts) == 8 - 4 - 1

    def test_best_discards(self):
        hand = parse_tiles("123m 456m 789m 123p 5s 9s")
        tiles, shanten = ShantenCalculator().best_discards(hand)
        assert shanten == 0
        assert tiles == [13, 17]

    def test_input_not_modified(self):
        counts = to_count_array(parse_tiles("123m 456m 789m 123p 5s 9s"))
        before = counts.copy()
        ShantenCalculator().best_discards(counts)
        calculate_shanten(counts)
        assert np.array_equal(counts, before)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
