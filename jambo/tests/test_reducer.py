"""
Tests for the reducer (state transitions).

Tests:
- Draw phase
- Ware trades, stands, utilities and people
- Reactions
- Endgame
- Validation and error handling
"""

import copy

import pytest

from ..engine_core.action import Action, Response, WareMode
from ..engine_core.action_generator import legal_actions
from ..engine_core.cards import ALL_CARD_IDS, WareType
from ..engine_core.endgame import winner
from ..engine_core.pending import UtilityReplace
from ..engine_core.reducer import apply_action
from ..engine_core.setup import create_initial_state
from ..engine_core.state import CONSTANTS, TOTAL_WARES, Phase, total_wares
from .builders import card_count, play_state, with_discard, with_market, with_utilities


def _apply(state, action):
    result = apply_action(state, action)
    assert result.success, result.error
    return result.new_state


class TestSetup:
    """Tests for the initial deal."""

    def test_deal(self, initial_state):
        """Both players get 5 cards and 20 gold; player 0 starts drawing."""
        state = initial_state
        assert len(ALL_CARD_IDS) == CONSTANTS.total_cards
        assert [len(p.hand) for p in state.players] == [5, 5]
        assert [p.gold for p in state.players] == [20, 20]
        assert len(state.deck) == CONSTANTS.total_cards - 10
        assert state.phase == Phase.DRAW
        assert state.current_player == 0
        assert state.actions_left == 5
        assert all(p.market == (None,) * 6 for p in state.players)
        assert total_wares(state) == TOTAL_WARES

    def test_same_seed_same_deal(self):
        """Setup is deterministic."""
        assert create_initial_state(9) == create_initial_state(9)
        assert create_initial_state(9).deck != create_initial_state(10).deck


class TestDrawPhase:
    """Tests for the draw phase."""

    def test_draw_costs_an_action(self, initial_state):
        state = _apply(initial_state, Action.draw_card())
        assert state.drawn_card == initial_state.deck[0]
        assert state.actions_left == 4
        assert state.phase == Phase.DRAW

    def test_keep_enters_play(self, initial_state):
        """Keeping the drawn card ends the draw phase."""
        drawn = _apply(initial_state, Action.draw_card())
        state = _apply(drawn, Action.keep_card())
        assert state.phase == Phase.PLAY
        assert drawn.drawn_card in state.players[0].hand
        assert state.drawn_card is None

    def test_discard_allows_another_draw(self, initial_state):
        drawn = _apply(initial_state, Action.draw_card())
        state = _apply(drawn, Action.discard_drawn())
        assert state.phase == Phase.DRAW
        assert state.discard_pile[0] == drawn.drawn_card
        assert Action.draw_card() in legal_actions(state)

    def test_skip_draw(self, initial_state):
        state = _apply(initial_state, Action.skip_draw())
        assert state.phase == Phase.PLAY
        assert state.actions_left == 5

    def test_cannot_draw_twice_without_deciding(self, initial_state):
        drawn = _apply(initial_state, Action.draw_card())
        result = apply_action(drawn, Action.draw_card())
        assert not result.success
        assert result.error_code == "INVALID_ACTION"

    def test_draw_phase_legal_actions(self, initial_state):
        legal = legal_actions(initial_state)
        assert Action.draw_card() in legal
        assert Action.skip_draw() in legal
        assert Action.end_turn() not in legal


class TestWareTrades:
    """Tests for buying and selling wares."""

    def test_sell(self, trinket_state):
        """Selling clears the wares, pays the sell price and refills the supply."""
        state = _apply(trinket_state, Action.play_card("ware_3k_1", WareMode.SELL))
        player = state.players[0]
        assert player.gold == 30
        assert player.filled_slots == 0
        assert state.ware_supply[WareType.TRINKETS] == 6
        assert state.discard_pile[0] == "ware_3k_1"
        assert state.actions_left == 4
        assert total_wares(state) == TOTAL_WARES

    def test_buy(self):
        state = play_state(hand0=("ware_3t_1",))
        state = _apply(state, Action.play_card("ware_3t_1", WareMode.BUY))
        player = state.players[0]
        assert player.gold == 17
        assert player.market_counts()[WareType.TEA] == 3
        assert state.ware_supply[WareType.TEA] == 3
        assert total_wares(state) == TOTAL_WARES

    def test_cannot_sell_missing_wares(self):
        state = play_state(hand0=("ware_3t_1",))
        result = apply_action(state, Action.play_card("ware_3t_1", WareMode.SELL))
        assert not result.success
        assert result.error_code == "INVALID_ACTION"

    def test_cannot_buy_without_slots(self):
        state = with_market(play_state(hand0=("ware_3t_1",)), 0, [WareType.SALT] * 4)
        assert not apply_action(state, Action.play_card("ware_3t_1", WareMode.BUY)).success

    def test_ware_card_needs_mode(self):
        state = play_state(hand0=("ware_3t_1",))
        assert not apply_action(state, Action.play_card("ware_3t_1")).success

    def test_wise_man_modifies_prices(self, trinket_state):
        """Wise Man gives -2 on buys and +2 on sells this turn."""
        state = trinket_state.update_player(0, hand=trinket_state.players[0].hand + ("wise_man_1",))
        state = state._copy_with(deck=tuple(c for c in state.deck if c != "wise_man_1"))
        state = _apply(state, Action.play_card("wise_man_1"))
        assert state.turn_modifiers.buy_discount == 2
        state = _apply(state, Action.play_card("ware_3k_1", WareMode.SELL))
        assert state.players[0].gold == 32

    def test_rain_maker_reaction_pending(self, trinket_state):
        """A ware play opens a reaction when the opponent holds a Rain Maker."""
        state = trinket_state.update_player(1, hand=("rain_maker_1",))
        state = _apply(state, Action.play_card("ware_3k_1", WareMode.SELL))
        assert state.pending_ware_card_reaction is not None
        assert legal_actions(state) == [Action.ware_card_reaction(True), Action.ware_card_reaction(False)]

        taken = _apply(state, Action.ware_card_reaction(True))
        assert "ware_3k_1" in taken.players[1].hand
        assert "rain_maker_1" not in taken.players[1].hand
        assert taken.discard_pile[0] == "rain_maker_1"
        assert not taken.has_pending

        declined = _apply(state, Action.ware_card_reaction(False))
        assert declined.players[1].hand == ("rain_maker_1",)
        assert declined.discard_pile[0] == "ware_3k_1"


class TestStandsAndUtilities:
    """Tests for stands and utilities."""

    def test_stand_costs(self):
        state = play_state(hand0=("small_market_stand_1", "small_market_stand_2"))
        state = _apply(state, Action.play_card("small_market_stand_1"))
        assert state.players[0].gold == 14
        assert len(state.players[0].market) == 9
        state = _apply(state, Action.play_card("small_market_stand_2"))
        assert state.players[0].gold == 11
        assert len(state.players[0].market) == 12

    def test_stand_unaffordable(self):
        state = play_state(hand0=("small_market_stand_1",), gold=(5, 20))
        assert Action.play_card("small_market_stand_1") not in legal_actions(state)

    def test_place_utility(self):
        state = _apply(play_state(hand0=("well_1",)), Action.play_card("well_1"))
        assert [u.design_id for u in state.players[0].utilities] == ["well"]

    def test_fourth_utility_replaces(self):
        """With three utilities placed, a fourth asks which to replace."""
        state = play_state(hand0=("kettle_1",))
        state = with_utilities(state, 0, ["well_1", "drums_1", "boat_1"])
        state = _apply(state, Action.play_card("kettle_1"))
        assert isinstance(state.pending_resolution, UtilityReplace)
        assert legal_actions(state) == []

        state = _apply(state, Action.resolve(Response.utility_pick(1)))
        assert [u.design_id for u in state.players[0].utilities] == ["well", "kettle", "boat"]
        assert state.discard_pile[0] == "drums_1"
        assert not state.has_pending

    def test_activate_well(self):
        state = with_utilities(play_state(), 0, ["well_1"])
        top = state.deck[0]
        state = _apply(state, Action.activate_utility(0))
        assert state.players[0].gold == 19
        assert state.players[0].hand == (top,)
        assert state.players[0].utilities[0].used_this_turn
        assert state.actions_left == 4
        assert Action.activate_utility(0) not in legal_actions(state)

    def test_utilities_reset_at_end_of_turn(self):
        state = with_utilities(play_state(), 0, ["well_1"])
        state = _apply(state, Action.activate_utility(0))
        state = _apply(state, Action.end_turn())
        assert not state.players[0].utilities[0].used_this_turn


class TestInteractions:
    """Tests for people and animal interactions."""

    def test_guard_blocks_animal(self):
        state = play_state(hand0=("cheetah_1",), hand1=("guard_1",))
        state = _apply(state, Action.play_card("cheetah_1"))
        assert state.pending_guard_reaction is not None
        assert state.pending_guard_reaction.target_player == 1

        blocked = _apply(state, Action.guard_reaction(True))
        assert not blocked.has_pending
        assert blocked.players[1].hand == ()
        assert set(blocked.discard_pile[:2]) == {"cheetah_1", "guard_1"}

    def test_declined_guard_starts_the_attack(self):
        state = play_state(hand0=("cheetah_1",), hand1=("guard_1",))
        state = _apply(state, Action.play_card("cheetah_1"))
        state = _apply(state, Action.guard_reaction(False))
        assert state.pending_resolution is not None

        state = _apply(state, Action.resolve(Response.opponent_choice(0)))
        assert [p.gold for p in state.players] == [22, 18]
        assert state.discard_pile[0] == "cheetah_1"

    def test_guard_cannot_be_played_proactively(self):
        state = play_state(hand0=("guard_1",))
        assert not apply_action(state, Action.play_card("guard_1")).success

    def test_drummer_takes_utility_from_discard(self):
        state = with_discard(play_state(hand0=("drummer_1",)), ["boat_1"])
        state = _apply(state, Action.play_card("drummer_1"))
        state = _apply(state, Action.resolve(Response.discard_pick("boat_1")))
        assert "boat_1" in state.players[0].hand
        assert state.discard_pile[0] == "drummer_1"

    def test_auction_full_cycle(self):
        """Two wares are picked, the opponent bids, the auctioneer passes."""
        state = _apply(play_state(hand0=("traveling_merchant_1",)), Action.play_card("traveling_merchant_1"))
        state = _apply(state, Action.resolve(Response.ware_type_pick(WareType.SILK)))
        state = _apply(state, Action.resolve(Response.ware_type_pick(WareType.SILK)))
        auction = state.pending_resolution
        assert auction.is_bidding
        assert auction.current_bid == 1
        assert auction.next_bidder == 1

        state = _apply(state, Action.resolve(Response.auction_bid(2)))
        state = _apply(state, Action.resolve(Response.auction_pass()))
        assert not state.has_pending
        assert state.players[1].gold == 18
        assert state.players[1].market_counts()[WareType.SILK] == 2
        assert total_wares(state) == TOTAL_WARES

    def test_wrong_response_is_rejected(self):
        state = _apply(play_state(hand0=("cheetah_1",)), Action.play_card("cheetah_1"))
        result = apply_action(state, Action.end_turn())
        assert not result.success
        assert result.error_code == "INVALID_ACTION"
        assert not apply_action(state, Action.resolve(Response.opponent_choice(5))).success


class TestEndTurnAndEndgame:
    """Tests for turn passing and the race to 60."""

    def test_end_turn_bonus(self):
        """Ending with 2+ actions left pays 1 gold."""
        state = _apply(play_state(), Action.end_turn())
        assert state.players[0].gold == 21
        assert state.current_player == 1
        assert state.phase == Phase.DRAW
        assert state.actions_left == 5
        assert state.turn == 2

    def test_no_bonus_with_one_action(self):
        state = _apply(play_state(actions_left=1), Action.end_turn())
        assert state.players[0].gold == 20

    def test_final_turn_then_game_over(self):
        state = play_state(gold=(60, 30))
        state = _apply(state, Action.end_turn())
        assert state.endgame is not None
        assert state.endgame.trigger_player == 0
        assert state.current_player == 1

        state = _apply(state, Action.skip_draw())
        state = _apply(state, Action.end_turn())
        assert state.phase == Phase.GAME_OVER
        assert winner(state) == 0
        assert legal_actions(state) == []

    def test_final_turn_player_wins_ties(self):
        state = play_state(gold=(59, 59))
        state = _apply(state, Action.end_turn())
        state = _apply(state, Action.skip_draw())
        state = _apply(state, Action.end_turn())
        assert state.players[1].gold == 60
        assert winner(state) == 1

    def test_nothing_after_game_over(self):
        state = play_state(gold=(60, 30))
        state = _apply(state, Action.end_turn())
        state = _apply(state, Action.skip_draw())
        state = _apply(state, Action.end_turn())
        result = apply_action(state, Action.end_turn())
        assert not result.success


class TestPurityAndConservation:
    """The reducer never mutates its input and never loses wares or cards."""

    def test_input_state_unchanged(self, trinket_state):
        before = copy.deepcopy(trinket_state)
        apply_action(trinket_state, Action.play_card("ware_3k_1", WareMode.SELL))
        assert trinket_state == before

    def test_failed_action_has_no_state(self):
        result = apply_action(play_state(), Action.keep_card())
        assert not result.success
        assert result.new_state is None
        assert result.error

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_legal_actions_always_apply(self, seed):
        """Every generated action is accepted and conserves wares and cards."""
        state = create_initial_state(seed)
        for _ in range(40):
            legal = legal_actions(state)
            if not legal:
                break
            for action in legal:
                result = apply_action(state, action)
                assert result.success, f"{action.describe()}: {result.error}"
                assert total_wares(result.new_state) == TOTAL_WARES
            if not state.has_pending:
                stands = sum(p.small_market_stands for p in state.players)
                assert card_count(state) + stands == CONSTANTS.total_cards
            state = apply_action(state, legal[0]).new_state
