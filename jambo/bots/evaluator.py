"""
Board Evaluator - Scores game states for bot decision-making.

The evaluator assigns a scalar to a state from one player's perspective
based on:
- Economy (gold, market headroom, hand value)
- Engine strength (utilities and their activation value)
- Readiness and risk (sellable cards, market exposure, bloated hands)
- The race to 60 gold (endgame proximity, opponent urgency, terminal result)

Higher is better for the perspective player. Used directly by the
Medium and Hard tiers, as a before/after delta by Hard and Expert, and
as the terminal reading of Expert's rollouts.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..engine_core.state import GameState, Phase, opponent_of
from .heuristics import (
    card_economy_value,
    hand_risk_penalty,
    market_exposure_penalty,
    sell_ready_count,
    utility_set_strength,
)


@dataclass(frozen=True)
class EvaluationWeights:
    """
    Weights for the board evaluator.

    These coefficients are tuned together; every tier above Random
    depends on them.
    """
    # Gold
    own_gold: float = 6.5
    opponent_gold: float = 4.0

    # Market headroom
    own_free_slot: float = 0.8
    opponent_free_slot: float = 0.5
    filled_differential: float = 0.5

    # Hand
    own_hand_value: float = 0.55
    opponent_hand_value: float = 0.35

    # Utilities
    utility_count_differential: float = 1.2
    own_utility_strength: float = 1.0
    opponent_utility_strength: float = 0.8

    # Sell readiness
    own_sell_ready: float = 4.5
    opponent_sell_ready: float = 2.5

    # Penalties (opponent's credited back)
    opponent_exposure_credit: float = 0.55
    opponent_hand_risk_credit: float = 0.45

    # Turn modifiers
    buy_discount_bonus: float = 6.0
    sell_bonus_bonus: float = 9.0

    # Race to 60
    endgame_target: int = 60
    proximity_far_gap: int = 20
    proximity_near_gap: int = 8
    proximity_ramp_max: float = 18.0
    proximity_burst_min: float = 25.0
    proximity_burst_max: float = 65.0
    urgency_gap: int = 12
    urgency_max: float = 30.0
    endgame_triggered: float = 40.0
    terminal: float = 800.0


class BoardEvaluator:
    """
    Evaluates game states using weighted heuristics.

    Used by bots for one-ply lookahead:
    1. Generate legal actions
    2. Apply each action to get new state
    3. Evaluate new states
    4. Select action leading to best state
    """

    def __init__(self, weights: EvaluationWeights | None = None):
        self.weights = weights or EvaluationWeights()

    def evaluate(self, state: GameState, perspective: int) -> float:
        w = self.weights
        me = state.players[perspective]
        opp_index = opponent_of(perspective)
        op = state.players[opp_index]

        score = me.gold * w.own_gold - op.gold * w.opponent_gold

        score += me.empty_slots * w.own_free_slot - op.empty_slots * w.opponent_free_slot
        score += (me.filled_slots - op.filled_slots) * w.filled_differential

        score += card_economy_value(len(me.hand)) * w.own_hand_value
        score -= card_economy_value(len(op.hand)) * w.opponent_hand_value

        score += (len(me.utilities) - len(op.utilities)) * w.utility_count_differential
        score += utility_set_strength(state, perspective) * w.own_utility_strength
        score -= utility_set_strength(state, opp_index) * w.opponent_utility_strength

        score += sell_ready_count(me) * w.own_sell_ready
        score -= sell_ready_count(op) * w.opponent_sell_ready

        score -= market_exposure_penalty(me)
        score += market_exposure_penalty(op) * w.opponent_exposure_credit
        score -= hand_risk_penalty(len(me.hand))
        score += hand_risk_penalty(len(op.hand)) * w.opponent_hand_risk_credit

        if state.current_player == perspective:
            if state.turn_modifiers.buy_discount > 0:
                score += w.buy_discount_bonus
            if state.turn_modifiers.sell_bonus > 0:
                score += w.sell_bonus_bonus

        score += self.endgame_proximity(me.gold)
        score -= self.opponent_urgency(op.gold)
        if state.endgame is not None:
            score += w.endgame_triggered

        if state.phase == Phase.GAME_OVER:
            if me.gold > op.gold:
                score += w.terminal
            elif me.gold < op.gold:
                score -= w.terminal

        return score

    def endgame_proximity(self, gold: int) -> float:
        """Nonlinear burst as gold approaches the endgame target."""
        w = self.weights
        gap = max(0, w.endgame_target - gold)
        if gap > w.proximity_far_gap:
            return 0.0
        if gap >= w.proximity_near_gap:
            span = w.proximity_far_gap - w.proximity_near_gap
            return (w.proximity_far_gap - gap) / span * w.proximity_ramp_max
        burst = w.proximity_burst_max - w.proximity_burst_min
        return w.proximity_burst_min + (w.proximity_near_gap - gap) / w.proximity_near_gap * burst

    def opponent_urgency(self, opponent_gold: int) -> float:
        w = self.weights
        gap = max(0, w.endgame_target - opponent_gold)
        if gap >= w.urgency_gap:
            return 0.0
        return (w.urgency_gap - gap) / w.urgency_gap * w.urgency_max

    def delta(self, before: GameState, after: GameState, perspective: int) -> float:
        return self.evaluate(after, perspective) - self.evaluate(before, perspective)


DEFAULT_EVALUATOR = BoardEvaluator()


def evaluate_board(state: GameState, perspective: int) -> float:
    """Convenience function using the default weights."""
    return DEFAULT_EVALUATOR.evaluate(state, perspective)
