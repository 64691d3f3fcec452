"""
Action Generator - Validates actions and enumerates legal moves.

The action generator is used by:
1. The reducer, to reject illegal actions before applying them
2. Bots, to enumerate possible moves (legal_actions)
3. Bots, as a cheap legality pre-check (validate_action)

Design: Generates Action objects, not just action types.
Interaction responses are not enumerated here; while a resolution is
pending, legal_actions() returns an empty list and callers build
responses themselves.
"""

from __future__ import annotations

from .action import Action, ActionType, ValidationResult, WareMode
from .cards import CardType, InteractionType, UtilityDesign, get_card
from .deck import is_deadlocked
from .market import can_buy, can_sell
from .state import CONSTANTS, GameState, Phase


def stand_cost(stands_owned: int) -> int:
    return CONSTANTS.first_stand_cost if stands_owned == 0 else CONSTANTS.additional_stand_cost


def validate_action(state: GameState, action: Action) -> ValidationResult:
    """
    Check whether an action is legal in the current state.

    This is a cheap pre-check; some rule violations are only detected
    while applying the action.
    """
    if state.phase == Phase.GAME_OVER:
        return ValidationResult.fail("Game is over")

    at = action.action_type

    if state.pending_guard_reaction is not None:
        if at != ActionType.GUARD_REACTION or action.play is None:
            return ValidationResult.fail("A guard reaction is pending")
        return ValidationResult.ok()

    if state.pending_ware_card_reaction is not None:
        if at != ActionType.WARE_CARD_REACTION or action.play is None:
            return ValidationResult.fail("A ware card reaction is pending")
        return ValidationResult.ok()

    if state.pending_resolution is not None:
        if at != ActionType.RESOLVE_INTERACTION or action.response is None:
            return ValidationResult.fail("An interaction is pending")
        return ValidationResult.ok()

    if at in (ActionType.GUARD_REACTION, ActionType.WARE_CARD_REACTION, ActionType.RESOLVE_INTERACTION):
        return ValidationResult.fail("Nothing to respond to")

    if at in (ActionType.DRAW_CARD, ActionType.KEEP_CARD, ActionType.DISCARD_DRAWN, ActionType.SKIP_DRAW):
        return _validate_draw_phase(state, action)

    if state.phase != Phase.PLAY:
        return ValidationResult.fail("Not in play phase")

    if at == ActionType.END_TURN:
        return ValidationResult.ok()

    if state.actions_left <= 0:
        return ValidationResult.fail("No actions remaining this turn")

    if at == ActionType.PLAY_CARD:
        return _validate_play_card(state, action)

    if at == ActionType.ACTIVATE_UTILITY:
        return _validate_activate(state, action)

    if at == ActionType.DRAW_ACTION:
        if is_deadlocked(state):
            return ValidationResult.fail("No cards left to draw")
        return ValidationResult.ok()

    return ValidationResult.fail(f"Unknown action type: {at}")


def _validate_draw_phase(state: GameState, action: Action) -> ValidationResult:
    if state.phase != Phase.DRAW:
        return ValidationResult.fail("Not in draw phase")

    at = action.action_type
    if at == ActionType.DRAW_CARD:
        if state.kept_card_this_draw_phase:
            return ValidationResult.fail("Already kept a card this draw phase")
        if state.drawn_card is not None:
            return ValidationResult.fail("Must keep or discard the drawn card first")
        if state.actions_left <= 0:
            return ValidationResult.fail("No actions remaining this turn")
        if is_deadlocked(state):
            return ValidationResult.fail("No cards left to draw")
        return ValidationResult.ok()

    if at in (ActionType.KEEP_CARD, ActionType.DISCARD_DRAWN):
        if state.drawn_card is None:
            return ValidationResult.fail("No drawn card")
        return ValidationResult.ok()

    # SKIP_DRAW
    if state.drawn_card is not None:
        return ValidationResult.fail("Must keep or discard the drawn card first")
    return ValidationResult.ok()


def _validate_play_card(state: GameState, action: Action) -> ValidationResult:
    player = state.active_player
    if action.card_id is None or action.card_id not in player.hand:
        return ValidationResult.fail(f"Card {action.card_id} not in hand")

    card = get_card(action.card_id)
    if card.card_type == CardType.WARE:
        if action.ware_mode is None:
            return ValidationResult.fail("Ware cards need a buy or sell mode")
        if action.ware_mode == WareMode.BUY and not can_buy(state, state.current_player, card.wares):
            return ValidationResult.fail("Cannot afford or store these wares")
        if action.ware_mode == WareMode.SELL and not can_sell(player, card.wares):
            return ValidationResult.fail("Market lacks the wares to sell")
        return ValidationResult.ok()

    if action.ware_mode is not None:
        return ValidationResult.fail("Only ware cards take a ware mode")

    if card.card_type == CardType.STAND:
        if player.gold < stand_cost(player.small_market_stands):
            return ValidationResult.fail("Not enough gold for a stand")

    if card.interaction == InteractionType.REACTION:
        return ValidationResult.fail(f"{card.name} can only be played as a reaction")

    return ValidationResult.ok()


def _validate_activate(state: GameState, action: Action) -> ValidationResult:
    player = state.active_player
    index = action.utility_index
    if index is None or index < 0 or index >= len(player.utilities):
        return ValidationResult.fail(f"Invalid utility index {index}")
    utility = player.utilities[index]
    if utility.used_this_turn:
        return ValidationResult.fail("Utility already used this turn")
    if utility.design_id == UtilityDesign.WELL:
        if player.gold < 1:
            return ValidationResult.fail("Well costs 1 gold")
        if is_deadlocked(state):
            return ValidationResult.fail("No cards left to draw")
    if utility.design_id == UtilityDesign.THRONE:
        if state.players[state.opponent].filled_slots == 0:
            return ValidationResult.fail("Opponent has no wares to take")
    return ValidationResult.ok()


def legal_actions(state: GameState) -> list[Action]:
    """
    Generate the legal moves for whoever must act.

    Returns an empty list at GAME_OVER and while a resolution is
    pending. Cards are deduplicated by design: two copies of the same
    design yield one action.
    """
    if state.phase == Phase.GAME_OVER:
        return []
    if state.pending_guard_reaction is not None:
        return [Action.guard_reaction(True), Action.guard_reaction(False)]
    if state.pending_ware_card_reaction is not None:
        return [Action.ware_card_reaction(True), Action.ware_card_reaction(False)]
    if state.pending_resolution is not None:
        return []

    if state.phase == Phase.DRAW:
        candidates = [Action.draw_card(), Action.keep_card(), Action.discard_drawn(), Action.skip_draw()]
        return [a for a in candidates if validate_action(state, a).valid]

    actions: list[Action] = []
    if state.actions_left > 0:
        seen_designs: set[str] = set()
        for card_id in state.active_player.hand:
            design = card_id.rsplit("_", 1)[0]
            if design in seen_designs:
                continue
            seen_designs.add(design)
            card = get_card(card_id)
            if card.card_type == CardType.WARE:
                candidates = [Action.play_card(card_id, WareMode.BUY), Action.play_card(card_id, WareMode.SELL)]
            else:
                candidates = [Action.play_card(card_id)]
            actions.extend(a for a in candidates if validate_action(state, a).valid)

        for index, utility in enumerate(state.active_player.utilities):
            action = Action.activate_utility(index)
            if validate_action(state, action).valid:
                actions.append(action)

        if validate_action(state, Action.draw_action()).valid:
            actions.append(Action.draw_action())

    actions.append(Action.end_turn())
    return actions

