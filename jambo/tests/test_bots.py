"""
Tests for bot action selection.

Tests:
- Difficulty parsing
- Determinism and purity of choose_action
- Every returned action is accepted by the engine
- Reaction rates, auctions and the trinket sell scenario
- Hard's scoring terms and the ware window
- Expert on reduced budgets
- Decision features
"""

import copy
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar

import pytest

from ..bots import (
    Difficulty,
    EasyPolicy,
    ExpertPolicy,
    HardPolicy,
    JamboBot,
    MediumPolicy,
    RandomPolicy,
    choose_action,
    evaluate_board,
    extract_features,
    fallback_responses,
    get_policy,
    get_tier,
    sample_response,
)
from ..bots.difficulty import EXPERT, HARD, MEDIUM
from ..bots.hard import opponent_reply_penalty, tactical_bonus
from ..bots.jambo_bot import decide
from ..bots.medium import choose_scored
from ..bots.rollout import rollout_action, rollout_value, simulate, threshold_sell
from ..engine_core.action import Action, ActionType, Response, ResponseType, WareMode
from ..engine_core.cards import WareType, design_of, get_card
from ..engine_core.market import effective_sell_price
from ..engine_core.pending import Auction
from ..engine_core.reducer import apply_action
from ..engine_core.state import Phase
from .builders import (
    CARD_OPENERS,
    UTILITY_OPENERS,
    interaction_table,
    opened,
    play_state,
    walk,
    with_market,
    with_utilities,
)

FAST_TIERS = [Difficulty.RANDOM, Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]
TRIALS = 200


class FixedRandom(random.Random):
    """A stream that always draws the same value."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def _accepted(state, action) -> bool:
    return action is not None and apply_action(state, action).success


def _lion_attack():
    """Player 0 plays a Lion at a player holding a Guard and two utilities."""
    state = play_state(hand0=("lion_1",), hand1=("guard_1", "ware_3h_1"))
    state = with_utilities(state, 1, ["well_1", "weapons_1"])
    return apply_action(state, Action.play_card("lion_1")).new_state


def _helpful_rain_maker():
    """Player 0 buys a Trinket Stall that player 1 could sell at once."""
    state = play_state(hand0=("ware_3k_1",), hand1=("rain_maker_1",))
    state = with_market(state, 1, [WareType.TRINKETS] * 3)
    return apply_action(state, Action.play_card("ware_3k_1", WareMode.BUY)).new_state


class TestDifficulty:
    """Tests for difficulty names and tiers."""

    def test_parse(self):
        assert Difficulty.parse("hard") is Difficulty.HARD
        assert Difficulty.parse("EXPERT") is Difficulty.EXPERT
        assert Difficulty.parse(Difficulty.EASY) is Difficulty.EASY

    def test_unknown_difficulty(self):
        with pytest.raises(ValueError):
            Difficulty.parse("impossible")
        with pytest.raises(ValueError):
            choose_action(play_state(), "impossible")

    def test_tiers_are_distinct(self):
        salts = {get_tier(d).salt for d in Difficulty}
        assert len(salts) == len(Difficulty)
        assert get_tier("expert").rollout_count == 30
        assert get_tier("expert").rollout_depth == 16
        assert get_tier("hard").reply_branching == 20

    def test_policy_names(self):
        assert get_policy("medium").get_name() == "Medium"
        assert JamboBot(player=1, difficulty=Difficulty.HARD).get_name() == "Hard (P1)"


class TestDeterminism:
    """The same state always yields the same action."""

    @pytest.mark.parametrize(
        "difficulty",
        FAST_TIERS + [pytest.param(Difficulty.EXPERT, marks=pytest.mark.slow)],
    )
    def test_repeatable(self, difficulty, trinket_state):
        first = choose_action(trinket_state, difficulty)
        second = choose_action(trinket_state, difficulty)
        assert first == second
        assert _accepted(trinket_state, first)

    @pytest.mark.parametrize("difficulty", FAST_TIERS)
    def test_repeatable_with_explicit_stream(self, difficulty, initial_state):
        first = choose_action(initial_state, difficulty, random.Random(5))
        second = choose_action(initial_state, difficulty, random.Random(5))
        assert first == second

    @pytest.mark.parametrize("difficulty", FAST_TIERS)
    def test_state_not_mutated(self, difficulty):
        state = opened("tribal_elder_1")
        before = copy.deepcopy(state)
        choose_action(state, difficulty)
        assert state == before

    def test_game_over_yields_none(self):
        state = play_state()._copy_with(phase=Phase.GAME_OVER)
        for difficulty in Difficulty:
            assert choose_action(state, difficulty) is None


class TestLegality:
    """Every non-null action is accepted by the engine."""

    @pytest.mark.parametrize("difficulty", FAST_TIERS)
    @pytest.mark.parametrize("seed", [3, 17])
    def test_along_a_game(self, difficulty, seed):
        for state in walk(seed, 80, Difficulty.MEDIUM):
            action = choose_action(state, difficulty)
            if state.phase == Phase.GAME_OVER:
                assert action is None
                continue
            assert _accepted(state, action), f"{difficulty.value} chose {action} on turn {state.turn}"

    @pytest.mark.parametrize("difficulty", FAST_TIERS)
    @pytest.mark.parametrize("opener", CARD_OPENERS + UTILITY_OPENERS)
    def test_every_interaction_completes(self, difficulty, opener):
        state = opened(opener)
        for _ in range(30):
            if state.pending_resolution is None:
                break
            action = choose_action(state, difficulty)
            assert action is not None
            assert action.action_type == ActionType.RESOLVE_INTERACTION
            result = apply_action(state, action)
            assert result.success, result.error
            state = result.new_state
        assert state.pending_resolution is None

    @pytest.mark.slow
    @pytest.mark.parametrize("opener", ["cheetah_1", "tribal_elder_1", "throne_1", "kettle_1"])
    def test_expert_interactions(self, opener):
        state = opened(opener)
        action = choose_action(state, Difficulty.EXPERT)
        assert _accepted(state, action)

    @pytest.mark.slow
    def test_expert_along_a_game(self):
        for state in walk(5, 25, Difficulty.MEDIUM):
            action = choose_action(state, Difficulty.EXPERT)
            if state.phase != Phase.GAME_OVER:
                assert _accepted(state, action)


class TestReactions:
    """Guard and rain maker reactions."""

    def _play_rate(self, policy, state, make) -> int:
        plays = 0
        for trial in range(TRIALS):
            action = policy.choose(state, random.Random(trial))
            assert action in (make(True), make(False))
            plays += action == make(True)
        return plays

    def test_guard_rate_ordering(self):
        state = _lion_attack()
        assert state.pending_guard_reaction is not None
        counts = [
            self._play_rate(policy, state, Action.guard_reaction)
            for policy in (RandomPolicy(), EasyPolicy(), MediumPolicy(), HardPolicy())
        ]
        assert counts == sorted(counts)
        assert 0.25 * TRIALS <= counts[1] <= 0.55 * TRIALS
        assert 0.45 * TRIALS <= counts[2] <= 0.75 * TRIALS
        assert counts[3] == TRIALS

    def test_rain_maker_rate_ordering(self):
        state = _helpful_rain_maker()
        assert state.pending_ware_card_reaction is not None
        counts = [
            self._play_rate(policy, state, Action.ware_card_reaction)
            for policy in (EasyPolicy(), MediumPolicy(), HardPolicy())
        ]
        assert counts == sorted(counts)
        assert counts[2] == TRIALS

    def test_fixed_stream_decides_coin_flips(self):
        state = _lion_attack()
        assert RandomPolicy().choose(state, FixedRandom(0.1)) == Action.guard_reaction(True)
        assert RandomPolicy().choose(state, FixedRandom(0.9)) == Action.guard_reaction(False)
        assert MediumPolicy().choose(state, FixedRandom(0.5)) == Action.guard_reaction(True)
        assert EasyPolicy().choose(state, FixedRandom(0.5)) == Action.guard_reaction(False)


class TestAuctions:
    """Auction bidding: coin flips for Random and Easy, a valuation ceiling above them."""

    @staticmethod
    def _auction(current_bid: int = 1):
        state = opened("traveling_merchant_1")
        for _ in range(2):
            state = apply_action(state, Action.resolve(Response.ware_type_pick(WareType.TRINKETS))).new_state
        pending = state.pending_resolution
        assert isinstance(pending, Auction) and pending.is_bidding
        return state._copy_with(pending_resolution=replace(pending, current_bid=current_bid))

    def test_ware_picks_before_bidding(self):
        """With fewer than two wares chosen, only ware-type picks are offered."""
        state = opened("traveling_merchant_1")
        for difficulty in FAST_TIERS:
            action = choose_action(state, difficulty)
            assert action.response.response_type == ResponseType.SELECT_WARE_TYPE

    @pytest.mark.parametrize("policy", [MediumPolicy(), HardPolicy()])
    def test_bids_within_ceiling(self, policy):
        state = self._auction(current_bid=1)
        action = policy.choose(state, random.Random(0))
        assert action.response.response_type == ResponseType.AUCTION_BID
        assert action.response.amount == 2
        assert _accepted(state, action)

    @pytest.mark.parametrize("policy", [MediumPolicy(), HardPolicy()])
    def test_passes_above_ceiling(self, policy):
        state = self._auction(current_bid=2)
        action = policy.choose(state, random.Random(0))
        assert action.response.response_type == ResponseType.AUCTION_PASS

    @pytest.mark.parametrize("policy", [MediumPolicy(), HardPolicy()])
    def test_passes_without_gold(self, policy):
        state = self._auction(current_bid=1).update_player(1, gold=1)
        action = policy.choose(state, random.Random(0))
        assert action.response.response_type == ResponseType.AUCTION_PASS

    @pytest.mark.parametrize("policy", [RandomPolicy(), EasyPolicy()])
    def test_coin_flip_ignores_ceiling(self, policy):
        """Random and Easy bid on a low draw even where the ceiling says pass."""
        state = self._auction(current_bid=2)
        bid = policy.choose(state, FixedRandom(0.1))
        assert bid == Action.resolve(Response.auction_bid(3))
        assert _accepted(state, bid)
        assert policy.choose(state, FixedRandom(0.9)) == Action.resolve(Response.auction_pass())

    @pytest.mark.parametrize("policy", [RandomPolicy(), EasyPolicy()])
    def test_coin_flip_follows_sampled_response(self, policy):
        state = self._auction(current_bid=2)
        bids = 0
        for trial in range(50):
            action = policy.choose(state, random.Random(trial))
            assert action == Action.resolve(sample_response(state, random.Random(trial)))
            bids += action.response.response_type == ResponseType.AUCTION_BID
        assert 0 < bids < 50


class TestFreePlay:
    """Draw and play decisions."""

    @pytest.mark.parametrize("difficulty", [Difficulty.MEDIUM, Difficulty.HARD])
    def test_sells_ready_trinkets(self, difficulty, trinket_state):
        action = choose_action(trinket_state, difficulty)
        assert action.action_type == ActionType.PLAY_CARD
        assert action.ware_mode == WareMode.SELL
        assert design_of(action.card_id) == "ware_3k"

    @pytest.mark.slow
    def test_expert_sells_ready_trinkets(self, trinket_state):
        action = choose_action(trinket_state, Difficulty.EXPERT)
        assert action.ware_mode == WareMode.SELL

    def test_medium_keeps_wise_man(self):
        state = play_state()
        state = state._copy_with(
            phase=Phase.DRAW,
            actions_left=4,
            drawn_card="wise_man_1",
            deck=tuple(c for c in state.deck if c != "wise_man_1"),
        )
        assert choose_action(state, Difficulty.MEDIUM) == Action.keep_card()

    def test_easy_prefers_selling(self, trinket_state):
        action = EasyPolicy().choose(trinket_state, FixedRandom(0.1))
        assert action.ware_mode == WareMode.SELL

    def test_random_skips_unplaceable_utility(self):
        """With a full utility area a Random draw falls through to activating one."""
        state = play_state(hand0=("kettle_1",))
        state = with_utilities(state, 0, ["well_1", "drums_1", "boat_1"])
        action = RandomPolicy().choose(state, FixedRandom(0.1))
        assert action.action_type in (ActionType.ACTIVATE_UTILITY, ActionType.END_TURN)
        assert _accepted(state, action)

    def test_rejected_card_play_reuses_the_roll(self):
        """A low roll whose card play is rejected lands in the activation branch."""
        state = with_utilities(play_state(hand0=("guard_1",)), 0, ["well_1"])
        low = RandomPolicy().choose(state, FixedRandom(0.1))
        assert low == RandomPolicy().choose(state, FixedRandom(0.5))
        assert low in (Action.activate_utility(0), Action.end_turn())
        assert RandomPolicy().choose(state, FixedRandom(0.7)) == Action.end_turn()

    def test_random_ends_turn_on_high_roll(self, trinket_state):
        assert RandomPolicy().choose(trinket_state, FixedRandom(0.9)) == Action.end_turn()

    def test_decision_details(self, trinket_state):
        decision = decide(trinket_state, Difficulty.HARD)
        assert decision.evaluated_actions > 1
        assert decision.explanation

    def test_bot_counts_decisions(self, trinket_state):
        bot = JamboBot(player=0, difficulty=Difficulty.MEDIUM)
        first = bot.choose(trinket_state)
        second = bot.choose(trinket_state)
        assert first.action == second.action
        assert bot.decisions == 2


class TestRollouts:
    """Bounded playouts used by the Expert tier."""

    def test_threshold_sell(self):
        state = play_state(hand0=("ware_3k_1",), gold=(55, 20))
        state = with_market(state, 0, [WareType.TRINKETS] * 3)
        assert threshold_sell(state) == Action.play_card("ware_3k_1", WareMode.SELL)
        assert threshold_sell(state.update_player(0, gold=30)) is None

    def test_simulate_is_bounded_and_pure(self, initial_state):
        before = copy.deepcopy(initial_state)
        first = simulate(initial_state, 10, random.Random(2))
        second = simulate(initial_state, 10, random.Random(2))
        assert initial_state == before
        assert first == second
        assert simulate(initial_state, 0, random.Random(2)) == initial_state

    def test_rollout_value_is_reproducible(self, trinket_state):
        first = rollout_value(trinket_state, 0, 3, 6, random.Random(9))
        second = rollout_value(trinket_state, 0, 3, 6, random.Random(9))
        assert first == second

    def test_zero_rollouts_reads_the_state(self, trinket_state):
        assert rollout_value(trinket_state, 0, 0, 6, random.Random(9)) == evaluate_board(trinket_state, 0)

    def test_threshold_sell_skips_non_wares_and_repeats(self):
        state = play_state(hand0=("lion_1", "ware_3k_1", "ware_3k_2"), gold=(55, 20))
        state = with_market(state, 0, [WareType.TRINKETS] * 3)
        assert threshold_sell(state) == Action.play_card("ware_3k_1", WareMode.SELL)
        assert threshold_sell(state.update_player(0, gold=60)) is None
        assert threshold_sell(state._copy_with(actions_left=0)) is None

    def test_threshold_sell_waits_for_pending(self):
        assert threshold_sell(opened("cheetah_1")) is None

    def test_rollout_action_takes_the_crossing_sell(self):
        state = play_state(hand0=("ware_3k_1",), gold=(55, 20))
        state = with_market(state, 0, [WareType.TRINKETS] * 3)
        assert rollout_action(state, random.Random(0)) == Action.play_card("ware_3k_1", WareMode.SELL)

    def test_rollout_action_answers_pending(self):
        state = opened("cheetah_1")
        action = rollout_action(state, random.Random(0))
        assert action.action_type == ActionType.RESOLVE_INTERACTION
        assert _accepted(state, action)


def _opponent_can_sell():
    """Player 1 to act, holding a Trinket Stall with three trinkets on display."""
    state = play_state(hand1=("ware_3k_1",))
    state = with_market(state, 1, [WareType.TRINKETS] * 3)
    return state._copy_with(current_player=1)


def _crossing_sell(gold: int):
    state = play_state(hand0=("ware_3k_1",), gold=(gold, 20))
    state = with_market(state, 0, [WareType.TRINKETS] * 3)
    return state, Action.play_card("ware_3k_1", WareMode.SELL)


class TestHardScoring:
    """Tactical bonus and the opponent-reply penalty."""

    def test_reply_penalty_counts_opponent_sell(self):
        assert opponent_reply_penalty(_opponent_can_sell(), 0) > 0

    def test_reply_penalty_scales_with_factor(self):
        state = _opponent_can_sell()
        base = opponent_reply_penalty(state, 0, HARD)
        doubled = opponent_reply_penalty(state, 0, replace(HARD, reply_penalty=2 * HARD.reply_penalty))
        assert doubled == pytest.approx(2 * base)

    def test_reply_penalty_respects_branching(self):
        state = _opponent_can_sell()
        full = opponent_reply_penalty(state, 0, HARD)
        assert opponent_reply_penalty(state, 0, replace(HARD, reply_branching=0)) == 0
        assert 0 <= opponent_reply_penalty(state, 0, replace(HARD, reply_branching=1)) <= full

    def test_no_reply_penalty_when_mover_acts_next(self):
        assert opponent_reply_penalty(_opponent_can_sell(), 1) == 0

    def test_no_reply_penalty_at_game_over(self):
        state = _opponent_can_sell()._copy_with(phase=Phase.GAME_OVER)
        assert opponent_reply_penalty(state, 0) == 0

    def test_sell_crossing_threshold(self):
        state, sell = _crossing_sell(55)
        price = effective_sell_price(state, get_card("ware_3k_1").wares)
        assert tactical_bonus(state, sell) == pytest.approx(12 + price * 0.6 + 35)

    def test_sell_near_threshold(self):
        state, sell = _crossing_sell(45)
        price = effective_sell_price(state, get_card("ware_3k_1").wares)
        assert 52 <= 45 + price < 60
        assert tactical_bonus(state, sell) == pytest.approx(12 + price * 0.6 + 12)

    def test_sell_far_from_threshold(self):
        state, sell = _crossing_sell(20)
        price = effective_sell_price(state, get_card("ware_3k_1").wares)
        assert tactical_bonus(state, sell) == pytest.approx(12 + price * 0.6)


class TestWareWindow:
    """A ware play close enough to the top score wins."""

    SELL = Action.play_card("ware_3k_1", WareMode.SELL)

    @pytest.mark.parametrize("tier,gap,expected", [
        (MEDIUM, 8, SELL),
        (MEDIUM, 10, Action.end_turn()),
        (HARD, 10, SELL),
        (HARD, 13, Action.end_turn()),
    ])
    def test_window(self, tier, gap, expected):
        scored = [(Action.end_turn(), 100.0), (self.SELL, 100.0 - gap)]
        action, _ = choose_scored(scored, tier.ware_window, random.Random(0))
        assert action == expected

    def test_no_window_takes_the_top(self):
        scored = [(Action.end_turn(), 100.0), (self.SELL, 99.0)]
        assert choose_scored(scored, 0, random.Random(0)) == (Action.end_turn(), 100.0)


class UnchartedKind(str, Enum):
    MYSTERY = "MYSTERY"


@dataclass(frozen=True)
class MysteryPending:
    """A pending resolution no bot knows how to answer."""
    kind: ClassVar[UnchartedKind] = UnchartedKind.MYSTERY


FAST_EXPERT = replace(EXPERT, rollout_count=2, rollout_depth=4, top_k=3, interaction_rollouts=2)


class TestUnknownPending:
    """Unrecognized pending kinds yield no action instead of raising."""

    @pytest.fixture
    def mystery_state(self):
        return play_state()._copy_with(pending_resolution=MysteryPending())

    def test_candidates(self, mystery_state):
        assert sample_response(mystery_state, random.Random(0)) is None
        assert fallback_responses(mystery_state) == []

    @pytest.mark.parametrize("policy", [
        RandomPolicy(),
        EasyPolicy(),
        MediumPolicy(),
        HardPolicy(),
        ExpertPolicy(tier=FAST_EXPERT),
    ])
    def test_policies_return_none(self, policy, mystery_state):
        assert policy.choose(mystery_state, random.Random(0)) is None

    def test_features_name_the_kind(self, mystery_state):
        assert extract_features(mystery_state, 0).pending_type == "MYSTERY"


class TestExpertReduced:
    """Expert with small budgets, fast enough for every run."""

    @pytest.fixture
    def expert(self):
        return ExpertPolicy(tier=FAST_EXPERT)

    def test_repeatable(self, expert, trinket_state):
        assert expert.choose(trinket_state) == expert.choose(trinket_state)
        assert expert.choose(trinket_state, random.Random(3)) == expert.choose(trinket_state, random.Random(3))

    def test_sells_ready_trinkets(self, expert, trinket_state):
        action = expert.choose(trinket_state)
        assert action.action_type == ActionType.PLAY_CARD
        assert action.ware_mode == WareMode.SELL

    def test_along_a_game(self, expert):
        for state in walk(5, 25, Difficulty.MEDIUM):
            action = expert.choose(state)
            if state.phase == Phase.GAME_OVER:
                assert action is None
            else:
                assert _accepted(state, action)

    @pytest.mark.parametrize("opener", ["cheetah_1", "tribal_elder_1", "throne_1", "kettle_1"])
    def test_interactions(self, expert, opener):
        state = opened(opener)
        assert _accepted(state, expert.choose(state))

    def test_survivors_respect_top_k(self, expert):
        decision = expert.decide(interaction_table(), random.Random(1))
        assert decision.evaluated_actions > FAST_EXPERT.top_k
        assert decision.evaluation_details["survivors"] == FAST_EXPERT.top_k

    def test_narrow_search(self, trinket_state):
        expert = ExpertPolicy(tier=replace(FAST_EXPERT, top_k=1))
        decision = expert.decide(trinket_state, random.Random(1))
        assert decision.evaluation_details["survivors"] == 1
        assert _accepted(trinket_state, decision.action)


class TestFeatures:
    """Per-decision feature vectors."""

    def test_trinket_table(self, trinket_state):
        features = extract_features(trinket_state, 0)
        assert features.turn == trinket_state.turn
        assert features.phase == Phase.PLAY.value
        assert features.actions_left == trinket_state.actions_left
        assert features.pending_type is None
        assert not features.has_guard_window and not features.has_rain_maker_window
        assert (features.my_gold, features.opp_gold, features.gold_diff) == (20, 20, 0)
        assert (features.my_hand_count, features.opp_hand_count, features.hand_diff) == (2, 1, 1)
        assert (features.my_market_filled, features.opp_market_filled, features.market_diff) == (3, 0, 3)
        assert features.utility_diff == 0

    def test_opponent_view_is_mirrored(self, trinket_state):
        features = extract_features(trinket_state, 1)
        assert features.responder == 1
        assert features.hand_diff == -1
        assert features.market_diff == -3

    def test_reaction_windows(self):
        guard = extract_features(_lion_attack(), 1)
        assert guard.has_guard_window
        assert guard.my_utility_count == 2
        assert extract_features(_helpful_rain_maker(), 1).has_rain_maker_window

    def test_pending_kind(self):
        assert extract_features(opened("traveling_merchant_1"), 0).pending_type == "AUCTION"

    @pytest.mark.parametrize("difficulty", FAST_TIERS)
    def test_attached_to_decisions(self, difficulty, trinket_state):
        decision = decide(trinket_state, difficulty)
        features = decision.evaluation_details["features"]
        assert features == extract_features(trinket_state, 0).as_dict()
        assert features["my_market_filled"] == 3
