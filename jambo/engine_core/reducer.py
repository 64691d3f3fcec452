"""
Reducer - Applies actions to game state.

The reducer is the single point of state transition.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying
- Returns ActionResult with success/failure
- Delegates interaction effects to the effect resolver
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable

from .action import Action, ActionResult, ActionType, RuleViolation, WareMode
from .action_generator import stand_cost, validate_action
from .cards import AnimalDesign, CardType, PeopleDesign, UtilityDesign, design_of, get_card
from .deck import discard, draw_card, draw_to_hand, remove_from_hand
from .effect_resolver import initialize_resolution, resolve_interaction
from .endgame import check_endgame
from .market import (
    add_wares,
    effective_buy_price,
    effective_sell_price,
    remove_wares,
    return_to_supply,
    take_from_supply,
    ware_counts,
)
from .pending import UtilityReplace
from .state import (
    CONSTANTS,
    GameState,
    GuardReaction,
    Phase,
    TurnModifiers,
    UtilitySlot,
    WareCardReaction,
    opponent_of,
)

logger = logging.getLogger(__name__)

WISE_MAN_DISCOUNT = 2
WISE_MAN_BONUS = 2
WELL_COST = 1

Handler = Callable[[GameState, Action], GameState]


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error.
        """
        validation = validate_action(state, action)
        if not validation.valid:
            logger.debug("Rejected %s: %s", action.describe(), validation.reason)
            return ActionResult.failure(validation.reason or "Invalid action", error_code="INVALID_ACTION")

        handler = self._get_handler(action.action_type)
        if handler is None:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )

        actor = state.current_player
        try:
            new_state = handler(state, action)
        except RuleViolation as e:
            logger.debug("Rule violation on %s: %s", action.describe(), e)
            return ActionResult.failure(str(e), error_code=e.error_code)

        return ActionResult.success_with_state(new_state.with_log(action.action_type.value,
                                                                   action.describe(), player=actor))

    def _get_handler(self, action_type: ActionType) -> Handler | None:
        """Get the handler function for an action type."""
        handlers: dict[ActionType, Handler] = {
            ActionType.DRAW_CARD: self._handle_draw_card,
            ActionType.KEEP_CARD: self._handle_keep_card,
            ActionType.DISCARD_DRAWN: self._handle_discard_drawn,
            ActionType.SKIP_DRAW: self._handle_skip_draw,
            ActionType.PLAY_CARD: self._handle_play_card,
            ActionType.ACTIVATE_UTILITY: self._handle_activate_utility,
            ActionType.DRAW_ACTION: self._handle_draw_action,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.RESOLVE_INTERACTION: self._handle_resolve,
            ActionType.GUARD_REACTION: self._handle_guard_reaction,
            ActionType.WARE_CARD_REACTION: self._handle_ware_card_reaction,
        }
        return handlers.get(action_type)

    # ------------------------------------------------------------------
    # Draw phase
    # ------------------------------------------------------------------

    def _handle_draw_card(self, state: GameState, action: Action) -> GameState:
        state, card = draw_card(state)
        if card is None:
            raise RuleViolation("No cards left to draw")
        return state._copy_with(
            drawn_card=card,
            draws_this_phase=state.draws_this_phase + 1,
            actions_left=state.actions_left - 1,
        )

    def _handle_keep_card(self, state: GameState, action: Action) -> GameState:
        cp = state.current_player
        state = state.update_player(cp, hand=state.players[cp].hand + (state.drawn_card,))
        return self._enter_play(state._copy_with(drawn_card=None, kept_card_this_draw_phase=True))

    def _handle_discard_drawn(self, state: GameState, action: Action) -> GameState:
        state = discard(state, state.drawn_card)._copy_with(drawn_card=None)
        if state.actions_left <= 0:
            return self._enter_play(state)
        return state

    def _handle_skip_draw(self, state: GameState, action: Action) -> GameState:
        return self._enter_play(state)

    def _enter_play(self, state: GameState) -> GameState:
        return state._copy_with(phase=Phase.PLAY, draws_this_phase=0, kept_card_this_draw_phase=False)

    # ------------------------------------------------------------------
    # Play phase
    # ------------------------------------------------------------------

    def _handle_play_card(self, state: GameState, action: Action) -> GameState:
        cp = state.current_player
        card_id = action.card_id
        card = get_card(card_id)
        state = state.update_player(cp, hand=remove_from_hand(state.players[cp].hand, card_id))
        state = state._copy_with(actions_left=state.actions_left - 1)

        if card.card_type == CardType.WARE:
            return self._play_ware(state, card_id, action.ware_mode)
        if card.card_type == CardType.UTILITY:
            return self._play_utility(state, card_id)
        if card.card_type == CardType.STAND:
            return self._play_stand(state, card_id)
        if card.card_type == CardType.ANIMAL:
            return self._play_animal(state, card_id)
        return self._play_people(state, card_id)

    def _play_ware(self, state: GameState, card_id: str, mode: WareMode) -> GameState:
        cp = state.current_player
        spec = get_card(card_id).wares
        player = state.players[cp]

        if mode == WareMode.SELL:
            market = remove_wares(player.market, spec.types)
            earned = effective_sell_price(state, spec)
            state = state.update_player(cp, market=market, gold=player.gold + earned)
            state = return_to_supply(state, spec.types)
        else:
            price = effective_buy_price(state, spec)
            if player.gold < price:
                raise RuleViolation("Not enough gold")
            for ware, count in ware_counts(spec.types).items():
                if count:
                    state = take_from_supply(state, ware, count)
            market = add_wares(state.players[cp].market, spec.types)
            state = state.update_player(cp, market=market, gold=player.gold - price)

        state = discard(state, card_id)
        opp = opponent_of(cp)
        if any(design_of(c) == PeopleDesign.RAIN_MAKER for c in state.players[opp].hand):
            state = state._copy_with(pending_ware_card_reaction=WareCardReaction(card_id, opp))
        return state

    def _play_utility(self, state: GameState, card_id: str) -> GameState:
        cp = state.current_player
        utilities = state.players[cp].utilities
        design = design_of(card_id)
        if len(utilities) >= CONSTANTS.max_utilities:
            return state._copy_with(pending_resolution=UtilityReplace(card_id, new_utility_design=design))
        slot = UtilitySlot(card_id=card_id, design_id=design)
        return state.update_player(cp, utilities=utilities + (slot,))

    def _play_stand(self, state: GameState, card_id: str) -> GameState:
        cp = state.current_player
        player = state.players[cp]
        cost = stand_cost(player.small_market_stands)
        if player.gold < cost:
            raise RuleViolation("Not enough gold for a stand")
        return state.update_player(
            cp,
            gold=player.gold - cost,
            small_market_stands=player.small_market_stands + 1,
            market=player.market + (None,) * CONSTANTS.stand_expansion_slots,
        )

    def _play_people(self, state: GameState, card_id: str) -> GameState:
        if design_of(card_id) == PeopleDesign.WISE_MAN:
            mods = state.turn_modifiers
            state = state._copy_with(turn_modifiers=TurnModifiers(
                buy_discount=mods.buy_discount + WISE_MAN_DISCOUNT,
                sell_bonus=mods.sell_bonus + WISE_MAN_BONUS,
            ))
            return discard(state, card_id)
        return initialize_resolution(state, card_id)

    def _play_animal(self, state: GameState, card_id: str) -> GameState:
        opp = opponent_of(state.current_player)
        if any(design_of(c) == PeopleDesign.GUARD for c in state.players[opp].hand):
            return state._copy_with(pending_guard_reaction=GuardReaction(card_id, opp))
        return initialize_resolution(state, card_id)

    def _handle_activate_utility(self, state: GameState, action: Action) -> GameState:
        cp = state.current_player
        player = state.players[cp]
        index = action.utility_index
        slot = player.utilities[index]
        utilities = player.utilities[:index] + (UtilitySlot(slot.card_id, slot.design_id, True),) \
            + player.utilities[index + 1:]
        state = state.update_player(cp, utilities=utilities)
        state = state._copy_with(actions_left=state.actions_left - 1)

        if slot.design_id == UtilityDesign.WELL:
            state = state.update_player(cp, gold=state.players[cp].gold - WELL_COST)
            state, drawn = draw_to_hand(state, cp, 1)
            if not drawn:
                raise RuleViolation("No cards left to draw")
            return state
        return initialize_resolution(state, slot.card_id)

    def _handle_draw_action(self, state: GameState, action: Action) -> GameState:
        state, drawn = draw_to_hand(state, state.current_player, 1)
        if not drawn:
            raise RuleViolation("No cards left to draw")
        return state._copy_with(actions_left=state.actions_left - 1)

    def _handle_end_turn(self, state: GameState, action: Action) -> GameState:
        cp = state.current_player
        player = state.players[cp]
        if state.actions_left >= CONSTANTS.action_bonus_threshold:
            state = state.update_player(cp, gold=player.gold + CONSTANTS.action_bonus_gold)

        utilities = tuple(UtilitySlot(u.card_id, u.design_id) for u in state.players[cp].utilities)
        state = state.update_player(cp, utilities=utilities)
        state = state._copy_with(turn_modifiers=TurnModifiers(), drawn_card=None)

        state = check_endgame(state)
        if state.phase == Phase.GAME_OVER:
            return state

        return state._copy_with(
            current_player=opponent_of(cp),
            turn=state.turn + 1,
            phase=Phase.DRAW,
            actions_left=CONSTANTS.max_actions,
            draws_this_phase=0,
            kept_card_this_draw_phase=False,
        )

    # ------------------------------------------------------------------
    # Interactions
    # ------------------------------------------------------------------

    def _handle_resolve(self, state: GameState, action: Action) -> GameState:
        return resolve_interaction(state, action.response)

    def _handle_guard_reaction(self, state: GameState, action: Action) -> GameState:
        reaction = state.pending_guard_reaction
        state = state._copy_with(pending_guard_reaction=None)
        if not action.play:
            return initialize_resolution(state, reaction.animal_card)

        target = reaction.target_player
        hand = state.players[target].hand
        guard = next((c for c in hand if design_of(c) == PeopleDesign.GUARD), None)
        if guard is None:
            raise RuleViolation("No guard in hand")
        state = state.update_player(target, hand=remove_from_hand(hand, guard))
        return discard(state, reaction.animal_card, guard).with_log(
            "GUARD", f"blocked {AnimalDesign(design_of(reaction.animal_card)).value}", player=target,
        )

    def _handle_ware_card_reaction(self, state: GameState, action: Action) -> GameState:
        reaction = state.pending_ware_card_reaction
        state = state._copy_with(pending_ware_card_reaction=None)
        if not action.play:
            return state

        target = reaction.target_player
        hand = state.players[target].hand
        rain_maker = next((c for c in hand if design_of(c) == PeopleDesign.RAIN_MAKER), None)
        if rain_maker is None:
            raise RuleViolation("No rain maker in hand")
        if reaction.ware_card_id not in state.discard_pile:
            raise RuleViolation("The ware card is no longer in the discard pile")
        hand = remove_from_hand(hand, rain_maker) + (reaction.ware_card_id,)
        state = state._copy_with(discard_pile=remove_from_hand(state.discard_pile, reaction.ware_card_id))
        state = state.update_player(target, hand=hand)
        return discard(state, rain_maker)


_REDUCER = Reducer()


def apply_action(state: GameState, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Never mutates `state`.
    """
    return _REDUCER.apply(state, action)
