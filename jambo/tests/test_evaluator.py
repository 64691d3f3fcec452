"""
Tests for the board evaluator and the shared heuristics.

Tests:
- Gold, proximity and urgency terms
- Terminal scoring
- Auction ceilings
- Discard and ware-type preferences
"""

import pytest

from ..bots.evaluator import DEFAULT_EVALUATOR, BoardEvaluator, EvaluationWeights, evaluate_board
from ..bots.heuristics import (
    auction_max_bid,
    card_economy_value,
    hand_risk_penalty,
    pick_best_ware_type,
    pick_discard_card,
    rank_discards,
    sell_ready_count,
)
from ..engine_core.cards import WARE_TYPES, WareType
from ..engine_core.state import Phase
from .builders import play_state, with_market


class TestEvaluatorTerms:
    """Tests for the individual evaluator terms."""

    def test_more_gold_is_better(self):
        poor = play_state(gold=(20, 20))
        rich = play_state(gold=(25, 20))
        assert evaluate_board(rich, 0) > evaluate_board(poor, 0)
        assert evaluate_board(rich, 1) < evaluate_board(poor, 1)

    def test_custom_gold_weight(self):
        evaluator = BoardEvaluator(EvaluationWeights(own_gold=10.0))
        low = play_state(gold=(20, 20))
        high = play_state(gold=(21, 20))
        assert evaluator.evaluate(high, 0) - evaluator.evaluate(low, 0) == pytest.approx(10.0)

    def test_proximity_zero_when_far(self):
        assert DEFAULT_EVALUATOR.endgame_proximity(20) == 0.0
        assert DEFAULT_EVALUATOR.endgame_proximity(40) == 0.0

    def test_proximity_monotone(self):
        values = [DEFAULT_EVALUATOR.endgame_proximity(g) for g in range(0, 70)]
        assert all(b >= a for a, b in zip(values, values[1:]))
        assert DEFAULT_EVALUATOR.endgame_proximity(60) == pytest.approx(65.0)

    def test_proximity_bursts_near_target(self):
        """Crossing into the last 8 gold jumps more than any step before it."""
        p = DEFAULT_EVALUATOR.endgame_proximity
        assert p(53) - p(52) > p(52) - p(51)
        assert p(52) == pytest.approx(18.0)
        assert p(53) >= 25.0

    def test_opponent_urgency(self):
        assert DEFAULT_EVALUATOR.opponent_urgency(40) == 0.0
        assert DEFAULT_EVALUATOR.opponent_urgency(55) > 0.0
        assert DEFAULT_EVALUATOR.opponent_urgency(60) == pytest.approx(30.0)

    def test_terminal_bonus(self):
        state = play_state(gold=(62, 50))
        over = state._copy_with(phase=Phase.GAME_OVER)
        assert evaluate_board(over, 0) - evaluate_board(state, 0) == pytest.approx(800.0)
        assert evaluate_board(over, 1) - evaluate_board(state, 1) == pytest.approx(-800.0)

    def test_sell_ready_cards_add_value(self, trinket_state):
        bare = trinket_state.update_player(0, hand=())
        assert sell_ready_count(trinket_state.players[0]) == 2
        assert evaluate_board(trinket_state, 0) > evaluate_board(bare, 0)

    def test_delta(self):
        before = play_state(gold=(20, 20))
        after = play_state(gold=(30, 20))
        expected = evaluate_board(after, 0) - evaluate_board(before, 0)
        assert DEFAULT_EVALUATOR.delta(before, after, 0) == pytest.approx(expected)


class TestHandHeuristics:
    """Tests for hand-size valuation."""

    def test_card_economy_value(self):
        assert card_economy_value(0) == 0
        assert card_economy_value(3) == 6
        assert card_economy_value(5) == 8

    def test_hand_risk_grows(self):
        penalties = [hand_risk_penalty(n) for n in range(0, 10)]
        assert penalties[:5] == [0.0] * 5
        assert all(b >= a for a, b in zip(penalties, penalties[1:]))


class TestAuctionCeiling:
    """Tests for auction_max_bid."""

    def test_no_free_slots(self):
        state = with_market(play_state(gold=(50, 20)), 0, [WareType.SALT] * 6)
        assert auction_max_bid(state, 0, (WareType.TEA, WareType.TEA)) == 0

    def test_no_gold(self):
        assert auction_max_bid(play_state(gold=(0, 20)), 0, (WareType.TEA,)) == 0

    @pytest.mark.parametrize("gold", [1, 3, 5, 10, 20, 60])
    def test_never_above_forty_percent(self, gold):
        state = play_state(hand0=("ware_3k_1",), gold=(gold, 20))
        state = with_market(state, 0, [WareType.TRINKETS])
        bid = auction_max_bid(state, 0, (WareType.TRINKETS, WareType.TRINKETS))
        assert 0 <= bid <= -(-2 * gold // 5)

    def test_completing_a_sale_is_worth_more(self):
        plain = play_state(gold=(100, 20))
        plain = with_market(plain, 0, [WareType.TRINKETS])
        synergy = plain.update_player(0, hand=("ware_3k_1",))
        wares = (WareType.TRINKETS, WareType.TRINKETS)
        assert auction_max_bid(synergy, 0, wares) == 7
        assert auction_max_bid(synergy, 0, wares) > auction_max_bid(plain, 0, wares)


class TestPreferenceHeuristics:
    """Tests for discard ranking and ware-type demand."""

    def test_keeps_guard_over_plain_card(self):
        state = play_state(hand0=("guard_1", "parrot_1"))
        assert pick_discard_card(state, 0, ["guard_1", "parrot_1"]) == "parrot_1"
        assert rank_discards(state, 0, ["guard_1", "parrot_1"]) == ["parrot_1", "guard_1"]

    def test_prefers_ware_the_hand_needs(self):
        state = play_state(hand0=("ware_3t_1",))
        state = with_market(state, 0, [WareType.TEA, WareType.TEA])
        assert pick_best_ware_type(state, 0, list(WARE_TYPES)) == WareType.TEA
