"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a game state and a random stream and returns a
decision for whoever must act: a draw/play move, a reply to a pending
interaction, or a guard / rain maker reaction.

Policies never raise on rule violations. Every candidate is checked
against the engine (validate_action or a speculative apply_action),
and exhaustion is reported as None.
"""

from __future__ import annotations
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..engine_core.action import Action, ActionType, Response, WareMode
from ..engine_core.action_generator import legal_actions, validate_action
from ..engine_core.cards import CardType, get_card
from ..engine_core.pending import Auction
from ..engine_core.reducer import apply_action
from ..engine_core.state import CONSTANTS, GameState, Phase
from .candidates import fallback_responses, sample_response
from .difficulty import EASY, RANDOM, TierSettings
from .seeding import chance, derive_rng, pick


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for logs and reports)
    - How many candidates were evaluated and the winning score
    """
    action: Action
    explanation: str = ""
    evaluated_actions: int = 0
    best_score: float = 0.0
    evaluation_details: dict[str, Any] = field(default_factory=dict)


# ============================================================================
# Engine checks
# ============================================================================

def try_apply(state: GameState, action: Action) -> GameState | None:
    """Speculatively apply an action; None if the engine rejects it."""
    result = apply_action(state, action)
    return result.new_state if result.success else None


def accepts(state: GameState, action: Action) -> bool:
    return apply_action(state, action).success


def first_accepted_response(state: GameState, first: Response | None) -> Action | None:
    """
    Try `first`, then each distinct fallback, returning the first the
    engine accepts. If none is accepted the first fallback is returned
    unchecked; with no fallbacks at all, None.
    """
    fallbacks = fallback_responses(state)
    tried: set[Response] = set()
    for response in ([first] if first is not None else []) + fallbacks:
        if response in tried:
            continue
        tried.add(response)
        action = Action.resolve(response)
        if accepts(state, action):
            return action
    if fallbacks:
        return Action.resolve(fallbacks[0])
    return None


def auction_bidding(state: GameState) -> Auction | None:
    pending = state.pending_resolution
    if isinstance(pending, Auction) and pending.is_bidding:
        return pending
    return None


# ============================================================================
# Policies
# ============================================================================

class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects actions. Implementations range
    from coin flips to Monte Carlo search.
    """

    default_tier: ClassVar[TierSettings] = RANDOM

    def __init__(self, tier: TierSettings | None = None):
        self.tier = tier or self.default_tier

    def derive_rng(self, state: GameState) -> random.Random:
        """Deterministic stream from the state's fingerprint and this tier's salt."""
        return derive_rng(state, self.tier.salt)

    def choose(self, state: GameState, rng: random.Random | None = None) -> Action | None:
        decision = self.decide(state, rng if rng is not None else self.derive_rng(state))
        return decision.action if decision is not None else None

    @abstractmethod
    def decide(self, state: GameState, rng: random.Random) -> BotDecision | None:
        """
        Decide for whoever must act in `state`.

        Returns None when no acceptable action could be produced.
        """

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.tier.name


class RandomPolicy(BotPolicy):
    """
    Random policy - coin flips over feasible moves.

    Used for:
    - Baseline comparison
    - The fallback path of every stronger tier
    """

    default_tier = RANDOM

    def decide(self, state: GameState, rng: random.Random) -> BotDecision | None:
        if state.phase == Phase.GAME_OVER:
            return None
        if state.pending_guard_reaction is not None:
            play = chance(rng, self.tier.reaction_rate)
            return BotDecision(Action.guard_reaction(play), "Guard coin flip")
        if state.pending_ware_card_reaction is not None:
            play = chance(rng, self.tier.reaction_rate)
            return BotDecision(Action.ware_card_reaction(play), "Rain maker coin flip")
        if state.pending_resolution is not None:
            return self.decide_interaction(state, rng)
        if state.phase == Phase.DRAW:
            return self.decide_draw(state, rng)
        return self.decide_play(state, rng)

    def decide_interaction(self, state: GameState, rng: random.Random) -> BotDecision | None:
        return self.random_interaction(state, rng)

    def random_interaction(self, state: GameState, rng: random.Random) -> BotDecision | None:
        action = first_accepted_response(state, sample_response(state, rng))
        if action is None:
            return None
        return BotDecision(action, "Sampled response")

    def decide_draw(self, state: GameState, rng: random.Random) -> BotDecision | None:
        if state.drawn_card is not None:
            action = Action.keep_card() if chance(rng, 0.5) else Action.discard_drawn()
            return BotDecision(action, "Keep/discard coin flip")
        if state.actions_left > 0 and validate_action(state, Action.draw_card()).valid:
            return BotDecision(Action.draw_card(), "Draw")
        return BotDecision(Action.skip_draw(), "Skip draw")

    def decide_play(self, state: GameState, rng: random.Random) -> BotDecision | None:
        """
        One roll picks card play (< 0.4), utility activation (< 0.6) or END_TURN.

        A rejected card play falls through to the activation branch with the
        same roll, so activation fires on 60% of rolls, not 20%, whenever no
        card play is accepted.
        """
        player = state.active_player
        roll = rng.random()

        if roll < 0.4 and player.hand and state.actions_left > 0:
            action = self._random_card_play(state, rng)
            if action is not None and accepts(state, action):
                return BotDecision(action, "Random card play")

        if roll < 0.6 and state.actions_left > 0:
            unused = [i for i, u in enumerate(player.utilities) if not u.used_this_turn]
            if unused:
                action = Action.activate_utility(pick(unused, rng))
                if validate_action(state, action).valid and accepts(state, action):
                    return BotDecision(action, "Random activation")

        return BotDecision(Action.end_turn(), "End turn")

    def _random_card_play(self, state: GameState, rng: random.Random) -> Action | None:
        player = state.active_player
        card_id = pick(player.hand, rng)
        card = get_card(card_id)

        if card.card_type == CardType.WARE:
            buy = Action.play_card(card_id, WareMode.BUY)
            sell = Action.play_card(card_id, WareMode.SELL)
            can_buy = validate_action(state, buy).valid
            can_sell = validate_action(state, sell).valid
            if can_buy and can_sell:
                return buy if chance(rng, 0.5) else sell
            if can_buy:
                return buy
            if can_sell:
                return sell
            return None

        if card.card_type == CardType.UTILITY and len(player.utilities) >= CONSTANTS.max_utilities:
            return None

        action = Action.play_card(card_id)
        return action if validate_action(state, action).valid else None


class EasyPolicy(RandomPolicy):
    """
    Easy policy - Random with an economic bias.

    Prefers sells, then any ware trade, before falling back to
    Random's distribution.
    """

    default_tier = EASY

    def decide_play(self, state: GameState, rng: random.Random) -> BotDecision | None:
        legal = legal_actions(state)
        sells = [a for a in legal if a.action_type == ActionType.PLAY_CARD and a.ware_mode == WareMode.SELL]
        if sells and chance(rng, self.tier.sell_bias):
            return BotDecision(pick(sells, rng), "Sell bias", evaluated_actions=len(legal))

        wares = [a for a in legal if a.is_ware_play]
        if wares and chance(rng, self.tier.ware_bias):
            return BotDecision(pick(wares, rng), "Ware bias", evaluated_actions=len(legal))

        return super().decide_play(state, rng)
