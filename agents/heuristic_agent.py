"""
Heuristic Agent for Mahjong

A rule-based agent with no lookahead. Serves as the Monte-Carlo agent's
fallback and as a cheap baseline opponent.

Features:
- Always takes a win
- Discards isolated honours, then isolated numbered tiles
- Claims only when shanten improves
- Danger ratings for discards
"""

from typing import List, Optional, Sequence

from mahjong_core.tiles import Tile
from mahjong_core.game import Action, ActionType, GamePhase, GameSnapshot
from mahjong_core.shanten import ShantenCalculator, to_count_array


class HeuristicAgent:
    """
    Heuristic Mahjong agent.

    Discards the least connected tile and claims melds that bring the hand
    closer to completion.
    """

    # Danger ratings for discards (lower = safer)
    HONOR_DANGER = 0.2       # Wind/Dragon tiles
    TERMINAL_DANGER = 0.3    # 1, 9 tiles
    SIMPLE_2_8_DANGER = 0.5
    SIMPLE_3_7_DANGER = 0.6
    MIDDLE_DANGER = 0.8      # 4, 5, 6 (most dangerous)

    def __init__(self):
        self.shanten_calc = ShantenCalculator()

    @classmethod
    def tile_danger(cls, tile: Tile) -> float:
        """Static danger of discarding a tile kind"""
        if tile.is_honor:
            return cls.HONOR_DANGER
        if tile.value in (1, 9):
            return cls.TERMINAL_DANGER
        if tile.value in (2, 8):
            return cls.SIMPLE_2_8_DANGER
        if tile.value in (3, 7):
            return cls.SIMPLE_3_7_DANGER
        return cls.MIDDLE_DANGER

    @staticmethod
    def select_discard(hand: Sequence[Tile]) -> Optional[Tile]:
        """
        Pick a discard without lookahead.

        Prefers a single honour tile, then a numbered tile with no same-suit
        tile within two values of it, then the first tile in hand.
        """
        hand = list(hand)
        if not hand:
            return None

        for tile in hand:
            if tile.is_honor and sum(1 for t in hand if t == tile) == 1:
                return tile

        for tile in hand:
            if not tile.is_numeric:
                continue
            isolated = not any(
                t.suit == tile.suit and t is not tile and abs(t.value - tile.value) <= 2
                for t in hand
            )
            if isolated:
                return tile

        return hand[0]

    def get_action(
        self,
        snapshot: GameSnapshot,
        seat: int,
        legal_actions: List[Action]
    ) -> Action:
        """
        Select an action based on heuristics.

        Args:
            snapshot: Game state as seen from this seat
            seat: This agent's seat
            legal_actions: Legal actions for this seat

        Returns:
            Selected action
        """
        if not legal_actions:
            return Action(ActionType.PASS, seat)

        for action in legal_actions:
            if action.action_type == ActionType.WIN:
                return action

        view = snapshot.players[seat]

        if snapshot.phase == GamePhase.CLAIM_WINDOW:
            return self._evaluate_claims(view.hand, len(view.melds), legal_actions)

        discards = [a for a in legal_actions if a.action_type == ActionType.DISCARD]
        if not discards:
            return legal_actions[0]

        tile = self.select_discard(view.hand)
        for action in discards:
            if action.tile.same_tile(tile):
                return action
        return discards[0]

    def _evaluate_claims(
        self,
        hand: List[Tile],
        num_melds: int,
        legal_actions: List[Action]
    ) -> Action:
        """Take the claim that improves shanten the most, else pass."""
        counts = to_count_array(hand)
        current_shanten = self.shanten_calc.calculate(counts, num_melds).shanten

        best_claim = None
        best_improvement = 0

        for action in legal_actions:
            if action.action_type not in (ActionType.TRIPLET, ActionType.SEQUENCE, ActionType.QUAD):
                continue

            new_counts = counts.copy()
            for tile in action.meld_tiles:
                if tile.id != action.tile.id:
                    new_counts[tile.tile_index] -= 1

            if action.action_type == ActionType.QUAD:
                new_shanten = self.shanten_calc.calculate(new_counts, num_melds + 1).shanten
            else:
                # A claim is followed by a discard
                _, new_shanten = self.shanten_calc.best_discards(new_counts, num_melds + 1)

            improvement = current_shanten - new_shanten
            if improvement > best_improvement:
                best_improvement = improvement
                best_claim = action

        if best_claim is not None:
            return best_claim

        for action in legal_actions:
            if action.action_type == ActionType.PASS:
                return action
        return legal_actions[-1]
