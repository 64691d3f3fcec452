"""
Difficulty Tiers - Per-tier behaviour and search budgets.

Tiers adjust:
- Reaction rates (how often guards and rain makers are played)
- Near-top ware windows (how strongly trades are preferred)
- Search budgets (reply branching, top-K width, rollout count x depth)
- Seed salts (so tiers never share a random stream)

Budgets are fixed counts, never wall-clock limits.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .seeding import SeedSalt


class Difficulty(str, Enum):
    RANDOM = "random"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @classmethod
    def parse(cls, value: Difficulty | str) -> Difficulty:
        """Accept an enum member or its string value. Raises ValueError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            names = ", ".join(d.value for d in cls)
            raise ValueError(f"Unknown difficulty {value!r}; expected one of {names}") from None


@dataclass(frozen=True)
class TierSettings:
    """
    Tunable parameters of one difficulty tier.

    Only the fields a tier's policy reads matter for that tier.
    """
    name: str
    description: str
    salt: SeedSalt

    reaction_rate: float = 0.3
    ware_window: float = 0.0

    # Easy's economic bias
    sell_bias: float = 0.0
    ware_bias: float = 0.0

    # Hard's one-ply search
    reply_branching: int = 20
    reply_penalty: float = 0.3

    # Expert's pruning and rollouts
    top_k: int = 10
    rollout_count: int = 30
    rollout_depth: int = 16
    hard_weight: float = 0.4
    rollout_weight: float = 0.6
    interaction_samples: int = 16
    interaction_rollouts: int = 16


# ============================================================================
# Predefined Tiers
# ============================================================================

RANDOM = TierSettings(
    name="Random",
    description="Coin-flip baseline",
    salt=SeedSalt(3, 5, 7, 0x9E3779B1, 0x85EBCA6B, 0xC2B2AE35, final_xor=0x5BD1E995),
    reaction_rate=0.3,
)

EASY = TierSettings(
    name="Easy",
    description="Random play with a bias toward trading wares",
    salt=SeedSalt(5, 9, 13, 0x85EBCA6B, 0xC2B2AE35, 0x9E3779B1, final_xor=0x68E31DA4),
    reaction_rate=0.4,
    sell_bias=0.75,
    ware_bias=0.6,
)

MEDIUM = TierSettings(
    name="Medium",
    description="Greedy single-ply heuristic scoring",
    salt=SeedSalt(1, 3, 11, 0x7FEB352D, 0x846CA68B, 0x9E3779B1),
    reaction_rate=0.6,
    ware_window=9.0,
)

HARD = TierSettings(
    name="Hard",
    description="One-ply search over the board evaluator with an opponent-reply penalty",
    salt=SeedSalt(7, 13, 17, 0x1B873593, 0x85EBCA6B, 0xC2B2AE35),
    reaction_rate=1.0,
    ware_window=12.0,
    reply_branching=20,
    reply_penalty=0.3,
)

EXPERT = TierSettings(
    name="Expert",
    description="Top-K pruning of Hard's scores plus Monte Carlo rollouts",
    salt=SeedSalt(11, 19, 23, 0x1B873593, 0x85EBCA6B, 0xC2B2AE35, final_xor=0xDEADBEEF),
    reaction_rate=1.0,
    ware_window=12.0,
    top_k=10,
    rollout_count=30,
    rollout_depth=16,
    hard_weight=0.4,
    rollout_weight=0.6,
    interaction_samples=16,
    interaction_rollouts=16,
)

TIERS: dict[Difficulty, TierSettings] = {
    Difficulty.RANDOM: RANDOM,
    Difficulty.EASY: EASY,
    Difficulty.MEDIUM: MEDIUM,
    Difficulty.HARD: HARD,
    Difficulty.EXPERT: EXPERT,
}


def get_tier(difficulty: Difficulty | str) -> TierSettings:
    return TIERS[Difficulty.parse(difficulty)]
