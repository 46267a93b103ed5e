"""
Monte-Carlo Agent for Mahjong

Scores every candidate action with short random rollouts of the agent's own
hand and picks the best one.

Each rollout works on a private 34-count copy of the hand. Draws are uniform
over suit then value; the wall and opponents' hands are not modelled beyond
a coarse draw budget of ceil(wall_remaining / 4). After every draw the tile
that minimises shanten is discarded and its danger rating accumulated.

Scoring per candidate:
    progress = exp(-1.0 * avg_shanten)
    safety   = exp(-0.1 * avg_danger)
    offense  = 0.5 * win_rate + 0.5 * progress
    score    = attack_bias * offense + defense_bias * safety
Claims add call_aggressiveness * improvement * 0.2 when they improve
shanten, and lose 0.05 otherwise.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from mahjong_core.tiles import TileSuit, SUIT_MAX_VALUE, SUIT_OFFSET
from mahjong_core.game import Action, ActionType, GamePhase, GameSnapshot
from mahjong_core.calls import QuadType
from mahjong_core.shanten import ShantenCalculator, is_winning_hand, to_count_array

from .heuristic_agent import HeuristicAgent
from .profiles import BehaviorProfile, DEFAULT_PROFILE

logger = logging.getLogger(__name__)

PROGRESS_K = 1.0
SAFETY_C = 0.1
CALL_BONUS_SCALE = 0.2
CALL_PENALTY = 0.05

CLAIM_TYPES = (ActionType.TRIPLET, ActionType.SEQUENCE, ActionType.QUAD)

SUITS = tuple(TileSuit)

# Danger by tile_index, lower = safer
DANGER_BY_INDEX = np.array(
    [
        HeuristicAgent.TERMINAL_DANGER if v in (0, 8)
        else HeuristicAgent.SIMPLE_2_8_DANGER if v in (1, 7)
        else HeuristicAgent.SIMPLE_3_7_DANGER if v in (2, 6)
        else HeuristicAgent.MIDDLE_DANGER
        for _ in range(3) for v in range(9)
    ] + [HeuristicAgent.HONOR_DANGER] * 7
)


@dataclass
class RolloutStats:
    """Aggregated results of the rollouts for one candidate"""
    rollouts: int
    wins: int
    avg_shanten: float
    avg_danger: float

    @property
    def win_rate(self) -> float:
        return self.wins / self.rollouts if self.rollouts else 0.0


class MonteCarloAgent:
    """
    Rollout-based Mahjong agent driven by a behaviour profile.

    Args:
        profile: Behaviour profile (rollout count/depth and biases)
        seed: Seed for the agent's random generator
        max_workers: Evaluate candidates on a thread pool of this size
    """

    def __init__(
        self,
        profile: BehaviorProfile = DEFAULT_PROFILE,
        seed: Optional[int] = None,
        max_workers: Optional[int] = None,
    ):
        self.profile = profile
        self.rng = np.random.default_rng(seed)
        self.max_workers = max_workers
        self.shanten_calc = ShantenCalculator()
        self.heuristic = HeuristicAgent()

    def get_action(
        self,
        snapshot: GameSnapshot,
        seat: int,
        legal_actions: List[Action]
    ) -> Action:
        """Controller entry point: dispatch on the game phase"""
        if not legal_actions:
            return Action(ActionType.PASS, seat)
        if snapshot.phase == GamePhase.CLAIM_WINDOW:
            return self.decide_claim_action(snapshot, seat, legal_actions)
        return self.decide_turn_action(snapshot, seat, legal_actions)

    def decide_turn_action(
        self,
        snapshot: GameSnapshot,
        seat: int,
        legal_actions: List[Action]
    ) -> Action:
        """Choose a discard, quad or self-draw win on the agent's own turn"""
        for action in legal_actions:
            if action.action_type == ActionType.WIN:
                return action

        # One candidate per discard kind, plus every quad option
        candidates: List[Action] = []
        seen = set()
        for action in legal_actions:
            if action.action_type == ActionType.DISCARD:
                if action.tile.tile_index in seen:
                    continue
                seen.add(action.tile.tile_index)
            candidates.append(action)

        if len(candidates) == 1 or self.profile.rollout_count == 0:
            return self.heuristic.get_action(snapshot, seat, legal_actions)

        return self._choose(snapshot, seat, candidates)

    def decide_claim_action(
        self,
        snapshot: GameSnapshot,
        seat: int,
        legal_actions: List[Action]
    ) -> Action:
        """Choose between the claims on a discard and passing"""
        for action in legal_actions:
            if action.action_type == ActionType.WIN:
                return action

        if len(legal_actions) == 1 or self.profile.rollout_count == 0:
            return self.heuristic.get_action(snapshot, seat, legal_actions)

        return self._choose(snapshot, seat, legal_actions)

    def _choose(self, snapshot: GameSnapshot, seat: int, candidates: List[Action]) -> Action:
        """Score every candidate and return the best; ties keep the first"""
        view = snapshot.players[seat]
        counts = to_count_array(view.hand)
        num_melds = len(view.melds)
        budget = min(self.profile.rollout_depth, math.ceil(snapshot.wall_remaining / 4))
        decision_seed = int(self.rng.integers(2 ** 32))

        def evaluate(index: int) -> float:
            rng = np.random.default_rng([decision_seed, index])
            return self.score_action(counts, num_melds, candidates[index], budget, rng)

        indices = range(len(candidates))
        if self.max_workers and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                scores = list(executor.map(evaluate, indices))
        else:
            scores = [evaluate(i) for i in indices]

        best = int(np.argmax(scores))
        logger.debug(
            f"Seat {seat} ({self.profile.name}) picks {candidates[best]!r} "
            f"score={scores[best]:.3f} of {len(candidates)} candidates"
        )
        return candidates[best]

    def score_action(
        self,
        counts: np.ndarray,
        num_melds: int,
        action: Action,
        budget: int,
        rng: np.random.Generator,
    ) -> float:
        """
        Score one candidate action.

        Args:
            counts: Concealed hand before the action (not modified)
            num_melds: Exposed melds before the action
            action: Candidate action
            budget: Maximum draws per rollout
            rng: Generator private to this candidate

        Returns:
            Candidate score, higher is better
        """
        hand, melds, danger = self.apply_action(counts, num_melds, action)
        stats = self.run_rollouts(hand, melds, danger, budget, rng)

        progress = math.exp(-PROGRESS_K * stats.avg_shanten)
        safety = math.exp(-SAFETY_C * stats.avg_danger)
        offense = 0.5 * stats.win_rate + 0.5 * progress
        score = self.profile.attack_bias * offense + self.profile.defense_bias * safety

        if action.action_type in CLAIM_TYPES:
            current = self.shanten_calc.calculate(counts, num_melds).shanten
            after = self.shanten_calc.calculate(hand, melds).shanten
            improvement = current - after
            if improvement > 0:
                score += self.profile.call_aggressiveness * improvement * CALL_BONUS_SCALE
            else:
                score -= CALL_PENALTY

        return score

    def apply_action(
        self,
        counts: np.ndarray,
        num_melds: int,
        action: Action,
    ) -> Tuple[np.ndarray, int, float]:
        """
        Apply a candidate to a private copy of the hand.

        Returns the settled hand (13 effective tiles), the meld count and the
        danger of any discard made along the way.
        """
        hand = counts.copy()
        danger = 0.0

        if action.action_type == ActionType.DISCARD:
            hand[action.tile.tile_index] -= 1
            danger = DANGER_BY_INDEX[action.tile.tile_index]

        elif action.action_type == ActionType.QUAD:
            if action.quad_type == QuadType.ADDED:
                hand[action.tile.tile_index] -= 1
            else:
                for tile in action.meld_tiles:
                    if action.quad_type == QuadType.CONCEALED or tile.id != action.tile.id:
                        hand[tile.tile_index] -= 1
                num_melds += 1

        elif action.action_type in (ActionType.TRIPLET, ActionType.SEQUENCE):
            for tile in action.meld_tiles:
                if tile.id != action.tile.id:
                    hand[tile.tile_index] -= 1
            num_melds += 1
            discards, _ = self.shanten_calc.best_discards(hand, num_melds)
            hand[discards[0]] -= 1
            danger = DANGER_BY_INDEX[discards[0]]

        return hand, num_melds, float(danger)

    def run_rollouts(
        self,
        hand: np.ndarray,
        num_melds: int,
        initial_danger: float,
        budget: int,
        rng: np.random.Generator,
    ) -> RolloutStats:
        """Run rollout_count rollouts from a settled hand"""
        n = self.profile.rollout_count
        wins = 0
        shanten_total = 0
        danger_total = 0.0

        for _ in range(n):
            won, min_shanten, danger = self._rollout(hand, num_melds, budget, rng)
            wins += won
            shanten_total += min_shanten
            danger_total += initial_danger + danger

        if n == 0:
            shanten = self.shanten_calc.calculate(hand, num_melds).shanten
            return RolloutStats(0, 0, float(max(shanten, 0)), initial_danger)

        return RolloutStats(n, wins, shanten_total / n, danger_total / n)

    def _rollout(
        self,
        start: np.ndarray,
        num_melds: int,
        budget: int,
        rng: np.random.Generator,
    ) -> Tuple[bool, int, float]:
        """One rollout: (won, minimum shanten seen, accumulated danger)"""
        hand = start.copy()
        min_shanten = self.shanten_calc.calculate(hand, num_melds).shanten
        danger = 0.0

        for _ in range(budget):
            suit = SUITS[int(rng.integers(len(SUITS)))]
            idx = SUIT_OFFSET[suit] + int(rng.integers(SUIT_MAX_VALUE[suit]))
            if hand[idx] >= 4:
                continue
            hand[idx] += 1

            if is_winning_hand(hand):
                return True, 0, danger

            discards, shanten = self.shanten_calc.best_discards(hand, num_melds)
            hand[discards[0]] -= 1
            danger += DANGER_BY_INDEX[discards[0]]
            min_shanten = min(min_shanten, shanten)

        return False, max(min_shanten, 0), float(danger)
