"""
Tests for the heuristic and Monte-Carlo agents
"""

import math

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mahjong_core.tiles import Tile, TileSet, parse_tiles, char, dot, bam, EAST, RED_DRAGON
from mahjong_core.shanten import to_count_array
from mahjong_core.game import Game, GamePhase, Action, ActionType
from agents.heuristic_agent import HeuristicAgent
from agents.monte_carlo_agent import (
    MonteCarloAgent, DANGER_BY_INDEX, CALL_BONUS_SCALE, CALL_PENALTY
)
from agents.profiles import (
    BehaviorProfile, AGGRESSIVE, BALANCED, DEFENSIVE, DEFAULT_PROFILE, get_profile
)

# Small profile so full games stay fast
TINY = BehaviorProfile(
    name="tiny",
    rollout_depth=3,
    rollout_count=3,
    attack_bias=0.5,
    defense_bias=0.5,
    call_aggressiveness=0.5,
)

CLAIM_HANDS = {
    0: "147m 147s 1457p 1234w",
    1: "258m 258s 55p 33w 123d",
    2: "123456789m 111s 5p",
    3: "369m 369s 369p 1122d",
}


def make_game(hands, **kwargs):
    game = Game(seed=7, **kwargs)
    game.deal()
    for seat, notation in hands.items():
        game.players[seat].hand = TileSet(parse_tiles(notation, start_id=1000 + 100 * seat))
    game.phase = GamePhase.DISCARDING
    return game


class TestProfiles:
    """Test behaviour profile presets"""

    def test_presets(self):
        assert (AGGRESSIVE.rollout_depth, AGGRESSIVE.rollout_count) == (10, 20)
        assert (BALANCED.rollout_depth, BALANCED.rollout_count) == (30, 200)
        assert (DEFENSIVE.rollout_depth, DEFENSIVE.rollout_count) == (40, 150)
        assert AGGRESSIVE.attack_bias > AGGRESSIVE.defense_bias
        assert DEFENSIVE.defense_bias > DEFENSIVE.attack_bias
        assert DEFAULT_PROFILE is AGGRESSIVE

    def test_get_profile(self):
        assert get_profile("Balanced") is BALANCED
        with pytest.raises(ValueError):
            get_profile("reckless")

    def test_negative_rollouts_rejected(self):
        with pytest.raises(ValueError):
            BehaviorProfile("bad", -1, 10, 0.5, 0.5, 0.5)


class TestHeuristicAgent:
    """Test the rule-based fallback"""

    def test_single_honor_first(self):
        hand = parse_tiles("123m 55p 9s 1w")
        assert HeuristicAgent.select_discard(hand) == EAST

    def test_isolated_numeric(self):
        hand = parse_tiles("123m 55p 9s 11w")
        assert HeuristicAgent.select_discard(hand) == bam(9)

    def test_neighbour_within_two(self):
        """7s next to 9s is not isolated, so the first tile is used"""
        hand = parse_tiles("123m 55p 79s")
        assert HeuristicAgent.select_discard(hand) == char(1)

    def test_empty_hand(self):
        assert HeuristicAgent.select_discard([]) is None

    def test_danger_ratings(self):
        assert HeuristicAgent.tile_danger(RED_DRAGON) == pytest.approx(0.2)
        assert HeuristicAgent.tile_danger(char(9)) == pytest.approx(0.3)
        assert HeuristicAgent.tile_danger(dot(2)) == pytest.approx(0.5)
        assert HeuristicAgent.tile_danger(bam(7)) == pytest.approx(0.6)
        assert HeuristicAgent.tile_danger(char(5)) == pytest.approx(0.8)

    def test_danger_table_matches(self):
        for idx in (0, 4, 8, 10, 24, 27, 33):
            assert DANGER_BY_INDEX[idx] == pytest.approx(HeuristicAgent.tile_danger(Tile.from_index(idx)))

    def test_takes_win(self):
        game = make_game(CLAIM_HANDS)
        game.request_discard(0, next(t for t in game.players[0].hand if t == dot(5)).id)

        agent = HeuristicAgent()
        action = agent.get_action(game.get_snapshot(2), 2, game.get_legal_actions(2))
        assert action.action_type == ActionType.WIN


class TestMonteCarloAgent:
    """Test rollout scoring and decisions"""

    def test_always_takes_win(self):
        hands = dict(CLAIM_HANDS)
        hands[0] = "123456789m 111s 55p"
        game = make_game(hands)
        game.last_draw = game.players[0].hand.tiles[-1]

        agent = MonteCarloAgent(BALANCED, seed=1)
        action = agent.get_action(game.get_snapshot(0), 0, game.get_legal_actions(0))
        assert action.action_type == ActionType.WIN

    def test_claim_win_taken(self):
        game = make_game(CLAIM_HANDS)
        game.request_discard(0, next(t for t in game.players[0].hand if t == dot(5)).id)

        agent = MonteCarloAgent(TINY, seed=1)
        action = agent.decide_claim_action(game.get_snapshot(2), 2, game.get_legal_actions(2))
        assert action.action_type == ActionType.WIN

    def test_deterministic_under_seed(self):
        game = Game(seed=5)
        game.start_game()
        snapshot = game.get_snapshot(0)
        legal = game.get_legal_actions(0)

        first = MonteCarloAgent(AGGRESSIVE, seed=123).get_action(snapshot, 0, legal)
        second = MonteCarloAgent(AGGRESSIVE, seed=123).get_action(snapshot, 0, legal)
        assert first.key() == second.key()

    def test_thread_pool_matches_sequential(self):
        game = Game(seed=6)
        game.start_game()
        snapshot = game.get_snapshot(0)
        legal = game.get_legal_actions(0)

        sequential = MonteCarloAgent(TINY, seed=9).get_action(snapshot, 0, legal)
        threaded = MonteCarloAgent(TINY, seed=9, max_workers=4).get_action(snapshot, 0, legal)
        assert sequential.key() == threaded.key()

    def test_chooses_a_legal_discard(self):
        game = Game(seed=8)
        game.start_game()
        legal = game.get_legal_actions(0)

        action = MonteCarloAgent(TINY, seed=2).get_action(game.get_snapshot(0), 0, legal)
        assert action.key() in {a.key() for a in legal}

    def test_zero_rollouts_uses_heuristic(self):
        profile = BehaviorProfile("heuristic", 10, 0, 0.5, 0.5, 0.5)
        game = Game(seed=8)
        game.start_game()
        snapshot = game.get_snapshot(0)
        legal = game.get_legal_actions(0)

        action = MonteCarloAgent(profile, seed=2).get_action(snapshot, 0, legal)
        expected = HeuristicAgent().get_action(snapshot, 0, legal)
        assert action.key() == expected.key()

    def test_apply_discard(self):
        game = Game(seed=8)
        game.start_game()
        discard = next(a for a in game.get_legal_actions(0) if a.action_type == ActionType.DISCARD)
        counts = to_count_array(game.players[0].hand)

        hand, melds, danger = MonteCarloAgent(TINY).apply_action(counts, 0, discard)

        assert int(hand.sum()) == 13
        assert int(counts.sum()) == 14
        assert melds == 0
        assert danger == pytest.approx(HeuristicAgent.tile_danger(discard.tile))

    def test_apply_triplet_claim(self):
        """Claiming leaves a settled hand: two tiles used, one discarded"""
        game = make_game(CLAIM_HANDS)
        game.request_discard(0, next(t for t in game.players[0].hand if t == dot(5)).id)
        triplet = next(a for a in game.get_legal_actions(1) if a.action_type == ActionType.TRIPLET)
        counts = to_count_array(game.players[1].hand)

        hand, melds, _ = MonteCarloAgent(TINY).apply_action(counts, 0, triplet)

        assert melds == 1
        assert int(hand.sum()) == 13 - 2 - 1
        assert hand[dot(5).tile_index] == 0

    def test_rollout_stats(self):
        agent = MonteCarloAgent(TINY)
        hand = to_count_array(parse_tiles("123m 456m 789m 123p 5s"))
        stats = agent.run_rollouts(hand, 0, 0.0, 3, np.random.default_rng(0))

        assert stats.rollouts == TINY.rollout_count
        assert 0 <= stats.wins <= stats.rollouts
        assert stats.avg_shanten == 0
        assert stats.avg_danger >= 0

    def test_no_draw_budget(self):
        """With an empty wall the rollouts only measure the current hand"""
        agent = MonteCarloAgent(TINY)
        hand = to_count_array(parse_tiles("147m 258s 369p 1234w"))
        stats = agent.run_rollouts(hand, 0, 0.5, 0, np.random.default_rng(0))

        assert stats.wins == 0
        assert stats.avg_danger == pytest.approx(0.5)
        assert stats.avg_shanten == agent.shanten_calc.calculate(hand).shanten


class TestScoring:
    """Test the score formula with no draws, so every term is exact"""

    TENPAI = "123m 456m 789m 123p 5s"
    ONE_AWAY = "55p 123m 456m 789m 1s 9s"

    def score(self, agent, hand, action, num_melds=0):
        counts = to_count_array(hand)
        return agent.score_action(counts, num_melds, action, 0, np.random.default_rng(0))

    def test_pass_on_ready_hand(self):
        """Shanten 0, no danger: offense 0.5 and safety 1"""
        agent = MonteCarloAgent(TINY)
        score = self.score(agent, parse_tiles(self.TENPAI), Action(ActionType.PASS, 0))
        assert score == pytest.approx(0.5 * 0.5 + 0.5 * 1.0)

    def test_bias_weighting(self):
        profile = BehaviorProfile("weighted", 0, 3, 0.8, 0.2, 0.5)
        agent = MonteCarloAgent(profile)
        score = self.score(agent, parse_tiles(self.ONE_AWAY), Action(ActionType.PASS, 0))
        assert score == pytest.approx(0.8 * 0.5 * math.exp(-1.0) + 0.2)

    def test_discard_adds_danger(self):
        agent = MonteCarloAgent(TINY)
        hand = parse_tiles(self.TENPAI + " 9s")
        discard = Action(ActionType.DISCARD, 0, hand[-1])

        score = self.score(agent, hand, discard)

        assert hand[-1] == bam(9)
        assert score == pytest.approx(0.5 * 0.5 + 0.5 * math.exp(-0.1 * 0.3))

    def test_improving_claim_bonus(self):
        """Pon on 5p: shanten 1 -> 0 after the follow-up discard"""
        agent = MonteCarloAgent(TINY)
        hand = parse_tiles(self.ONE_AWAY)
        claimed = dot(5, 50)
        pair = [t for t in hand if t == claimed]
        action = Action(ActionType.TRIPLET, 0, claimed, tuple(pair + [claimed]))

        settled, melds, danger = agent.apply_action(to_count_array(hand), 0, action)
        assert agent.shanten_calc.calculate(to_count_array(hand)).shanten == 1
        assert agent.shanten_calc.calculate(settled, melds).shanten == 0
        assert danger == pytest.approx(0.3)

        base = 0.5 * 0.5 + 0.5 * math.exp(-0.1 * danger)
        bonus = TINY.call_aggressiveness * 1 * CALL_BONUS_SCALE
        assert self.score(agent, hand, action) == pytest.approx(base + bonus)

    def test_non_improving_claim_penalty(self):
        """Chii on 5p keeps a ready hand ready, so it costs the flat penalty"""
        agent = MonteCarloAgent(TINY)
        hand = parse_tiles("123m 456m 789m 46p 55s")
        claimed = dot(5, 50)
        sides = [t for t in hand if t == dot(4) or t == dot(6)]
        action = Action(ActionType.SEQUENCE, 0, claimed, (sides[0], claimed, sides[1]))

        settled, melds, danger = agent.apply_action(to_count_array(hand), 0, action)
        assert agent.shanten_calc.calculate(to_count_array(hand)).shanten == 0
        assert agent.shanten_calc.calculate(settled, melds).shanten == 0

        base = 0.5 * 0.5 + 0.5 * math.exp(-0.1 * danger)
        assert self.score(agent, hand, action) == pytest.approx(base - CALL_PENALTY)


class TestSelfPlay:
    """Test full games between AI seats"""

    def test_monte_carlo_game_finishes(self):
        controllers = {seat: MonteCarloAgent(TINY, seed=seat) for seat in range(4)}
        game = Game(seed=21, controllers=controllers)
        game.start_game()

        assert game.phase == GamePhase.FINISHED

    def test_self_play_is_reproducible(self):
        def play():
            controllers = {seat: MonteCarloAgent(TINY, seed=seat) for seat in range(4)}
            game = Game(seed=33, controllers=controllers)
            game.start_game()
            return game.winner, game.turn_count, [m.kind for m in game.messages]

        assert play() == play()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
