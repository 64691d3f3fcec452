"""
Rollout Simulator - Bounded playouts for Monte Carlo scoring.

A rollout plays both seats with Medium, except that a player below the
gold threshold always takes the best sell that reaches it. Playouts
stop at game over, at the depth limit, or when no accepted action
exists, and are read with the board evaluator.

Playouts are the hot loop of the Expert tier:
- Legal actions are generated once per step and shared
- The forced-sell check reads the hand directly
- The action log is dropped at the start of a playout (nothing
  downstream of a rollout reads it)
"""

from __future__ import annotations
import random

from ..engine_core.action import Action, WareMode
from ..engine_core.action_generator import legal_actions
from ..engine_core.cards import CardType, design_of, get_card
from ..engine_core.market import can_sell, effective_sell_price
from ..engine_core.reducer import apply_action
from ..engine_core.state import CONSTANTS, GameState, Phase
from .evaluator import DEFAULT_EVALUATOR, BoardEvaluator
from .medium import MediumPolicy
from .seeding import sub_rng

ROLLOUT_POLICY = MediumPolicy()


def threshold_sell(state: GameState) -> Action | None:
    """Best sell that lifts the active player from below the gold threshold to it."""
    if state.has_pending or state.phase != Phase.PLAY or state.actions_left <= 0:
        return None
    player = state.active_player
    target = CONSTANTS.endgame_gold_threshold
    if player.gold >= target:
        return None

    best: Action | None = None
    best_price = -1
    seen: set[str] = set()
    for card_id in player.hand:
        design = design_of(card_id)
        if design in seen:
            continue
        seen.add(design)
        card = get_card(card_id)
        if card.card_type != CardType.WARE:
            continue
        price = effective_sell_price(state, card.wares)
        if player.gold + price < target or price <= best_price:
            continue
        if can_sell(player, card.wares):
            best_price = price
            best = Action.play_card(card_id, WareMode.SELL)
    return best


def rollout_action(state: GameState, rng: random.Random) -> Action | None:
    forced = threshold_sell(state)
    if forced is not None:
        return forced
    if state.has_pending:
        return ROLLOUT_POLICY.choose(state, rng)
    legal = legal_actions(state)
    if len(legal) <= 1:
        return legal[0] if legal else None
    decision = ROLLOUT_POLICY.decide_free(state, rng, legal)
    return decision.action if decision is not None else None


def simulate(state: GameState, depth: int, rng: random.Random) -> GameState:
    """Play up to `depth` actions from `state`."""
    if depth > 0 and state.log:
        state = state._copy_with(log=())
    for step in range(depth):
        if state.phase == Phase.GAME_OVER:
            break
        action = rollout_action(state, sub_rng(rng, step))
        if action is None:
            break
        result = apply_action(state, action)
        if not result.success:
            break
        state = result.new_state
    return state


def rollout_value(
    state: GameState,
    perspective: int,
    count: int,
    depth: int,
    rng: random.Random,
    evaluator: BoardEvaluator = DEFAULT_EVALUATOR,
) -> float:
    """Mean evaluation for `perspective` over `count` independent playouts."""
    if count <= 0:
        return evaluator.evaluate(state, perspective)
    total = 0.0
    for i in range(count):
        final = simulate(state, depth, sub_rng(rng, i))
        total += evaluator.evaluate(final, perspective)
    return total / count
