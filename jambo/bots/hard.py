"""
Hard Policy - One-ply search over the board evaluator.

Each legal action is applied speculatively and scored as:

    evaluator delta + tactical bonus - opponent best-reply penalty

Reactions are decided by simulating both branches to quiescence,
auctions by comparing the pass branch against the current position,
and interactions by the evaluator from the responder's view.
"""

from __future__ import annotations
import logging
import random
from typing import Sequence

from ..engine_core.action import Action, ActionType, Response, WareMode
from ..engine_core.action_generator import legal_actions
from ..engine_core.cards import AnimalDesign, CardType, PeopleDesign, design_of, get_card
from ..engine_core.market import effective_sell_price
from ..engine_core.pending import Auction
from ..engine_core.state import CONSTANTS, GameState, Phase
from .candidates import fallback_responses, interaction_candidates, pending_responder, responder
from .difficulty import HARD, TierSettings
from .evaluator import DEFAULT_EVALUATOR, BoardEvaluator
from .heuristics import (
    auction_max_bid,
    card_economy_value,
    card_pressure_bonus,
    defensive_animal_priority,
    hand_risk_penalty,
    people_combo_priority,
    utility_activation_priority,
    utility_play_priority,
    ware_acquisition_priority,
)
from .medium import choose_scored
from .policy import BotDecision, RandomPolicy, auction_bidding, try_apply

logger = logging.getLogger(__name__)

SETTLE_STEPS = 8
NEAR_THRESHOLD = 8

GUARD_BIAS: dict[AnimalDesign, float] = {
    AnimalDesign.LION: 6.0,
    AnimalDesign.ELEPHANT: 5.0,
    AnimalDesign.APE: 5.0,
    AnimalDesign.CHEETAH: 4.0,
    AnimalDesign.CROCODILE: 3.0,
}


# ============================================================================
# Scoring
# ============================================================================

def tactical_bonus(state: GameState, action: Action) -> float:
    """Hand-tuned nudges on top of the evaluator delta."""
    me = state.current_player
    player = state.active_player
    op = state.players[state.opponent]

    if action.action_type == ActionType.END_TURN:
        if state.actions_left <= 1:
            return 0.0
        return -4 - min(5.0, card_economy_value(len(player.hand)) * 0.4) + hand_risk_penalty(len(player.hand)) * 0.4

    if action.action_type == ActionType.ACTIVATE_UTILITY:
        design = player.utilities[action.utility_index].design_id
        return (utility_activation_priority(state, me, design) - 55) * 0.45

    if action.action_type != ActionType.PLAY_CARD:
        return 0.0

    card = get_card(action.card_id)
    design = design_of(action.card_id)

    if card.card_type == CardType.WARE:
        if action.ware_mode == WareMode.SELL:
            price = effective_sell_price(state, card.wares)
            bonus = 12 + price * 0.6
            after = player.gold + price
            target = CONSTANTS.endgame_gold_threshold
            if player.gold < target <= after:
                bonus += 35
            elif target - NEAR_THRESHOLD <= after < target:
                bonus += 12
            return bonus
        return (ware_acquisition_priority(state, me, card.wares) - 44) * 0.5

    if card.card_type == CardType.ANIMAL:
        pressure = card_pressure_bonus(state, me, action.card_id)
        defense = defensive_animal_priority(state, me, design)
        if design == AnimalDesign.CROCODILE:
            return len(op.utilities) * 2.6 + pressure + defense
        if design == AnimalDesign.PARROT:
            return 8 + pressure + defense
        return 2 + pressure + defense

    if card.card_type == CardType.PEOPLE:
        combo = people_combo_priority(state, me, design)
        if design == PeopleDesign.PORTUGUESE:
            return player.filled_slots * 1.5 + combo
        return 3 + card_pressure_bonus(state, me, action.card_id) + combo

    if card.card_type == CardType.UTILITY:
        if len(player.utilities) >= CONSTANTS.max_utilities:
            return -8.0
        return (utility_play_priority(state, me, design) - 58) * 0.45

    return 0.0


def _reply_actions(state: GameState) -> list[Action]:
    if state.pending_resolution is not None and state.pending_guard_reaction is None \
            and state.pending_ware_card_reaction is None:
        return [Action.resolve(r) for r in fallback_responses(state)]
    return legal_actions(state)


def opponent_reply_penalty(
    state: GameState,
    perspective: int,
    tier: TierSettings = HARD,
    evaluator: BoardEvaluator = DEFAULT_EVALUATOR,
) -> float:
    """
    How badly the opponent's best immediate reply hurts `perspective`.

    Zero at game over or when `perspective` is the one to act next.
    Only the first `tier.reply_branching` replies are examined.
    """
    if state.phase == Phase.GAME_OVER or responder(state) == perspective:
        return 0.0
    base = evaluator.evaluate(state, perspective)
    worst = 0.0
    for reply in _reply_actions(state)[:tier.reply_branching]:
        after = try_apply(state, reply)
        if after is None:
            continue
        worst = min(worst, evaluator.evaluate(after, perspective) - base)
    return -worst * tier.reply_penalty


def one_ply_scores(
    state: GameState,
    actions: Sequence[Action],
    evaluator: BoardEvaluator = DEFAULT_EVALUATOR,
) -> list[tuple[Action, GameState, float]]:
    """(action, resulting state, delta + tactical) for every accepted action."""
    me = state.current_player
    base = evaluator.evaluate(state, me)
    scored = []
    for action in actions:
        after = try_apply(state, action)
        if after is None:
            continue
        delta = evaluator.evaluate(after, me) - base
        scored.append((action, after, delta + tactical_bonus(state, action)))
    return scored


def settle(state: GameState, evaluator: BoardEvaluator = DEFAULT_EVALUATOR, max_steps: int = SETTLE_STEPS) -> GameState:
    """
    Greedily resolve pending decisions, each responder maximizing its own evaluation.

    Stops at quiescence, game over, after `max_steps`, or when no reply
    is accepted.
    """
    for _ in range(max_steps):
        if not state.has_pending or state.phase == Phase.GAME_OVER:
            break
        who = responder(state)
        best_state = None
        best_score = float("-inf")
        for action in _reply_actions(state):
            after = try_apply(state, action)
            if after is None:
                continue
            score = evaluator.evaluate(after, who)
            if score > best_score:
                best_score = score
                best_state = after
        if best_state is None:
            break
        state = best_state
    return state


# ============================================================================
# Policy
# ============================================================================

class HardPolicy(RandomPolicy):
    """
    Hard policy - evaluator-driven one-ply search.

    Used for:
    - Strong opponents at interactive speed
    - The pruning score inside Expert
    """

    default_tier = HARD

    def __init__(self, tier: TierSettings | None = None, evaluator: BoardEvaluator | None = None):
        super().__init__(tier)
        self.evaluator = evaluator or DEFAULT_EVALUATOR

    def decide(self, state: GameState, rng: random.Random) -> BotDecision | None:
        if state.phase == Phase.GAME_OVER:
            return None
        if state.pending_guard_reaction is not None:
            reaction = state.pending_guard_reaction
            bias = GUARD_BIAS.get(AnimalDesign(design_of(reaction.animal_card)), 0.0)
            play = self._reaction_wins(state, reaction.target_player, Action.guard_reaction, bias)
            return BotDecision(Action.guard_reaction(play), "Guard branches compared")
        if state.pending_ware_card_reaction is not None:
            target = state.pending_ware_card_reaction.target_player
            play = self._reaction_wins(state, target, Action.ware_card_reaction, 0.0)
            return BotDecision(Action.ware_card_reaction(play), "Rain maker branches compared")
        if state.pending_resolution is not None:
            return self.decide_interaction(state, rng)
        return self.decide_free(state, rng)

    def _reaction_wins(self, state: GameState, target: int, make, bias: float) -> bool:
        played = try_apply(state, make(True))
        declined = try_apply(state, make(False))
        if played is None:
            return False
        if declined is None:
            return True
        play_score = self.evaluator.evaluate(settle(played, self.evaluator), target) + bias
        decline_score = self.evaluator.evaluate(settle(declined, self.evaluator), target)
        logger.debug("Reaction for player %d: play=%.2f decline=%.2f", target, play_score, decline_score)
        return play_score > decline_score

    def decide_interaction(self, state: GameState, rng: random.Random) -> BotDecision | None:
        auction = auction_bidding(state)
        if auction is not None:
            return BotDecision(self._auction_action(state, auction), "Auction branches compared")

        who = pending_responder(state)
        best: Action | None = None
        best_score = float("-inf")
        candidates = interaction_candidates(state, rng, self.tier.interaction_samples)
        for response in candidates:
            action = Action.resolve(response)
            after = try_apply(state, action)
            if after is None:
                continue
            score = self.evaluator.evaluate(after, who)
            if score > best_score:
                best_score = score
                best = action
        if best is None:
            return self.random_interaction(state, rng)
        return BotDecision(best, "Best evaluated response", evaluated_actions=len(candidates), best_score=best_score)

    def _auction_action(self, state: GameState, auction: Auction) -> Action:
        bidder = auction.next_bidder
        bid = auction.current_bid + 1
        pass_action = Action.resolve(Response.auction_pass())
        ceiling = auction_max_bid(state, bidder, auction.wares)
        if state.players[bidder].gold < bid or bid > ceiling:
            return pass_action

        bid_action = Action.resolve(Response.auction_bid(bid))
        current = self.evaluator.evaluate(state, bidder)
        passed = try_apply(state, pass_action)
        if passed is not None and self.evaluator.evaluate(passed, bidder) < current - 3:
            return bid_action
        if bid <= -(-7 * ceiling // 10):
            return bid_action
        return pass_action

    def score_actions(self, state: GameState) -> list[tuple[Action, float]]:
        me = state.current_player
        scored = []
        for action, after, score in one_ply_scores(state, legal_actions(state), self.evaluator):
            score -= opponent_reply_penalty(after, me, self.tier, self.evaluator)
            scored.append((action, score))
        return scored

    def decide_free(self, state: GameState, rng: random.Random) -> BotDecision | None:
        scored = self.score_actions(state)
        if not scored:
            return None
        action, score = choose_scored(scored, self.tier.ware_window, rng)
        return BotDecision(action, "One-ply search", evaluated_actions=len(scored), best_score=score)
