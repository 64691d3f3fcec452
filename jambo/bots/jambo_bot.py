"""
Jambo Bot - Entry point of the decision engine.

choose_action(state, difficulty, rng=None) answers whatever the game is
waiting on: a draw/play move, a reply to a pending interaction, or a
guard / rain maker reaction, for whichever player must act.

The bot does NOT:
- Mutate the state it is given
- Read a global random source (without rng, a stream is derived from
  the state fingerprint and the tier's salt)
- Raise on rule violations (None means nothing acceptable was found)

Every decision carries the responder's TurnFeatures under
evaluation_details["features"].
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from ..engine_core.action import Action
from ..engine_core.state import GameState
from .candidates import responder
from .difficulty import Difficulty
from .expert import ExpertPolicy
from .hard import HardPolicy
from .medium import MediumPolicy
from .policy import BotDecision, BotPolicy, EasyPolicy, RandomPolicy
from .telemetry import extract_features

logger = logging.getLogger(__name__)

POLICIES: dict[Difficulty, BotPolicy] = {
    Difficulty.RANDOM: RandomPolicy(),
    Difficulty.EASY: EasyPolicy(),
    Difficulty.MEDIUM: MediumPolicy(),
    Difficulty.HARD: HardPolicy(),
    Difficulty.EXPERT: ExpertPolicy(),
}


def get_policy(difficulty: Difficulty | str) -> BotPolicy:
    """Shared policy instance for a difficulty. Raises ValueError on unknown names."""
    return POLICIES[Difficulty.parse(difficulty)]


def decide(state: GameState, difficulty: Difficulty | str, rng: random.Random | None = None) -> BotDecision | None:
    policy = get_policy(difficulty)
    stream = rng if rng is not None else policy.derive_rng(state)
    decision = policy.decide(state, stream)
    if decision is None:
        logger.debug("%s found no acceptable action on turn %d", policy.get_name(), state.turn)
        return None
    decision.evaluation_details["features"] = extract_features(state, responder(state)).as_dict()
    return decision


def choose_action(state: GameState, difficulty: Difficulty | str, rng: random.Random | None = None) -> Action | None:
    """
    Choose the next action for whoever must act in `state`.

    Deterministic: the same state, difficulty and stream always yield
    the same action.
    """
    decision = decide(state, difficulty, rng)
    return decision.action if decision is not None else None


@dataclass
class JamboBot:
    """
    A seat bound to a difficulty.

    Usage:
        bot = JamboBot(player=1, difficulty=Difficulty.HARD)
        action = bot.choose(state)
    """
    player: int
    difficulty: Difficulty = Difficulty.MEDIUM
    decisions: int = field(default=0, init=False)

    def choose(self, state: GameState, rng: random.Random | None = None) -> BotDecision | None:
        self.decisions += 1
        return decide(state, self.difficulty, rng)

    def get_name(self) -> str:
        return f"{get_policy(self.difficulty).get_name()} (P{self.player})"
