"""
Expert Policy - Hard's scores refined by Monte Carlo rollouts.

Free play:
1. Score every legal action with Hard's delta + tactical bonus
2. Keep the top K finite scores
3. For each survivor, average a fixed number of bounded rollouts
4. Blend: hard_weight * hard score + rollout_weight * (rollout mean - baseline)
5. Prefer a ware trade near the top, otherwise break ties randomly

Interactions are answered by rolling out every candidate response and
keeping the one with the best mean from the responder's view.
Reactions and auctions follow Hard.
"""

from __future__ import annotations
import logging
import random

from ..engine_core.action import Action
from ..engine_core.action_generator import legal_actions
from ..engine_core.state import GameState
from .candidates import interaction_candidates, pending_responder
from .difficulty import EXPERT
from .hard import HardPolicy, one_ply_scores
from .medium import choose_scored
from .policy import BotDecision, auction_bidding, try_apply
from .rollout import rollout_value
from .seeding import sub_rng

logger = logging.getLogger(__name__)


class ExpertPolicy(HardPolicy):
    """
    Expert policy - top-K pruning plus rollouts.

    Budgets are fixed counts (top_k, rollout_count, rollout_depth), so
    the same state and stream always produce the same decision.
    """

    default_tier = EXPERT

    def decide_free(self, state: GameState, rng: random.Random) -> BotDecision | None:
        tier = self.tier
        me = state.current_player
        scored = one_ply_scores(state, legal_actions(state), self.evaluator)
        if not scored:
            return None
        if len(scored) == 1:
            action, _, score = scored[0]
            return BotDecision(action, "Only accepted action", evaluated_actions=1, best_score=score)

        ranked = sorted(scored, key=lambda item: item[2], reverse=True)[:tier.top_k]
        baseline = self.evaluator.evaluate(state, me)

        blended = []
        for index, (action, after, hard_score) in enumerate(ranked):
            mean = rollout_value(
                after, me, tier.rollout_count, tier.rollout_depth, sub_rng(rng, index), self.evaluator,
            )
            blended.append((action, tier.hard_weight * hard_score + tier.rollout_weight * (mean - baseline)))
            logger.debug("%s: hard=%.2f rollout=%.2f", action.describe(), hard_score, mean - baseline)

        action, score = choose_scored(blended, tier.ware_window, rng)
        return BotDecision(
            action,
            "Rollout-refined search",
            evaluated_actions=len(scored),
            best_score=score,
            evaluation_details={"survivors": len(ranked)},
        )

    def decide_interaction(self, state: GameState, rng: random.Random) -> BotDecision | None:
        if auction_bidding(state) is not None:
            return super().decide_interaction(state, rng)

        tier = self.tier
        who = pending_responder(state)
        candidates = interaction_candidates(state, rng, tier.interaction_samples)

        best: Action | None = None
        best_mean = float("-inf")
        for index, response in enumerate(candidates):
            action = Action.resolve(response)
            after = try_apply(state, action)
            if after is None:
                continue
            mean = rollout_value(
                after, who, tier.interaction_rollouts, tier.rollout_depth, sub_rng(rng, index), self.evaluator,
            )
            if mean > best_mean:
                best_mean = mean
                best = action

        if best is None:
            return self.random_interaction(state, rng)
        return BotDecision(best, "Rollout-scored response", evaluated_actions=len(candidates), best_score=best_mean)
