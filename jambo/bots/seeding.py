"""
Seeding - Deterministic random streams for bot decisions.

Each policy derives its own random stream from a fingerprint of the
state, so the same state always yields the same decision while
distinct states diverge.

Design principles:
- Pure integer mixing (splitmix-style finalizer), no global random source
- The stream object is a random.Random, drawn only through .random()
- Sub-streams for rollouts are seeded from the parent stream
"""

from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Sequence, TypeVar

from ..engine_core.state import GameState

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
PENDING_MIX = 0x165667B1


@dataclass(frozen=True)
class SeedSalt:
    """Per-difficulty salt constants for the fingerprint mixer."""
    turn_offset: int
    actions_offset: int
    player_offset: int
    turn_mult: int
    actions_mult: int
    player_mult: int
    log_mult: int = 0x27D4EB2F
    final_xor: int = 0


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def mix32(x: int) -> int:
    """Splitmix-style 32-bit finalizer."""
    x = (x + 0x9E3779B9) & MASK32
    x ^= x >> 16
    x = _imul(x, 0x85EBCA6B)
    x ^= x >> 13
    x = _imul(x, 0xC2B2AE35)
    x ^= x >> 16
    return x


def pending_discriminant(state: GameState) -> int:
    """Small integer identifying what kind of decision is pending."""
    if state.pending_guard_reaction is not None:
        return 101
    if state.pending_ware_card_reaction is not None:
        return 102
    pending = state.pending_resolution
    if pending is None:
        return 0
    # Stable position of the kind in its enum
    return list(type(pending.kind)).index(pending.kind) + 1


def fingerprint_seed(state: GameState, salt: SeedSalt) -> int:
    seed = state.rng_seed & MASK32
    seed ^= _imul(state.turn + salt.turn_offset, salt.turn_mult)
    seed ^= _imul(state.actions_left + salt.actions_offset, salt.actions_mult)
    seed ^= _imul(state.current_player + salt.player_offset, salt.player_mult)
    seed ^= _imul(len(state.log), salt.log_mult)
    seed ^= _imul(pending_discriminant(state), PENDING_MIX)
    seed ^= salt.final_xor
    return mix32(seed)


def derive_rng(state: GameState, salt: SeedSalt) -> random.Random:
    return random.Random(fingerprint_seed(state, salt))


def sub_rng(rng: random.Random, offset: int = 0) -> random.Random:
    """Child stream seeded from the parent's next draw."""
    return random.Random(int(rng.random() * 0x7FFFFFFF) + offset)


def chance(rng: random.Random, probability: float) -> bool:
    return rng.random() < probability


def pick(items: Sequence[T], rng: random.Random) -> T:
    """Uniform choice drawn through rng.random()."""
    index = min(int(rng.random() * len(items)), len(items) - 1)
    return items[index]


def shuffled(items: Sequence[T], rng: random.Random) -> list[T]:
    """Fisher-Yates shuffle drawn through rng.random()."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = min(int(rng.random() * (i + 1)), i)
        result[i], result[j] = result[j], result[i]
    return result
