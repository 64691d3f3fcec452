"""
Market and Ware Supply - Pure helpers over market slots and the shared supply.

All functions return new values; none mutate their arguments.
Helpers that can break a rule raise RuleViolation.
"""

from __future__ import annotations
from typing import Iterable

from .action import RuleViolation
from .cards import WARE_TYPES, WareSpec, WareType
from .state import GameState, PlayerState


def ware_counts(wares: Iterable[WareType | None]) -> dict[WareType, int]:
    counts = {w: 0 for w in WARE_TYPES}
    for ware in wares:
        if ware is not None:
            counts[ware] += 1
    return counts


def missing_wares(spec: WareSpec, counts: dict[WareType, int]) -> dict[WareType, int]:
    """How many of each type the market still lacks to sell `spec`."""
    required = ware_counts(spec.types)
    return {w: max(0, required[w] - counts.get(w, 0)) for w in WARE_TYPES}


def missing_total(spec: WareSpec, counts: dict[WareType, int]) -> int:
    return sum(missing_wares(spec, counts).values())


def effective_buy_price(state: GameState, spec: WareSpec) -> int:
    return max(0, spec.buy_price - state.turn_modifiers.buy_discount)


def effective_sell_price(state: GameState, spec: WareSpec) -> int:
    return spec.sell_price + state.turn_modifiers.sell_bonus


def can_buy(state: GameState, player: int, spec: WareSpec) -> bool:
    p = state.players[player]
    if p.gold < effective_buy_price(state, spec) or p.empty_slots < len(spec.types):
        return False
    needed = ware_counts(spec.types)
    return all(state.ware_supply[w] >= n for w, n in needed.items())


def can_sell(player_state: PlayerState, spec: WareSpec) -> bool:
    return missing_total(spec, player_state.market_counts()) == 0


def add_wares(market: tuple[WareType | None, ...], wares: Iterable[WareType]) -> tuple[WareType | None, ...]:
    """Fill the first empty slots with `wares`."""
    slots = list(market)
    for ware in wares:
        try:
            index = slots.index(None)
        except ValueError:
            raise RuleViolation("Not enough empty market slots") from None
        slots[index] = ware
    return tuple(slots)


def remove_wares(market: tuple[WareType | None, ...], wares: Iterable[WareType]) -> tuple[WareType | None, ...]:
    """Clear the first slot holding each ware in `wares`."""
    slots = list(market)
    for ware in wares:
        try:
            index = slots.index(ware)
        except ValueError:
            raise RuleViolation(f"Market has no {ware.value} to remove") from None
        slots[index] = None
    return tuple(slots)


def clear_slot(market: tuple[WareType | None, ...], index: int) -> tuple[tuple[WareType | None, ...], WareType]:
    """Empty one occupied slot; returns the new market and the removed ware."""
    if index is None or index < 0 or index >= len(market) or market[index] is None:
        raise RuleViolation(f"Invalid or empty market slot {index}")
    ware = market[index]
    slots = list(market)
    slots[index] = None
    return tuple(slots), ware


def take_from_supply(state: GameState, ware: WareType, count: int = 1) -> GameState:
    if state.ware_supply[ware] < count:
        raise RuleViolation(f"Not enough {ware.value} in supply")
    supply = dict(state.ware_supply)
    supply[ware] -= count
    return state._copy_with(ware_supply=supply)


def return_to_supply(state: GameState, wares: Iterable[WareType]) -> GameState:
    supply = dict(state.ware_supply)
    for ware in wares:
        supply[ware] += 1
    return state._copy_with(ware_supply=supply)


def gain_wares_from_supply(state: GameState, player: int, ware: WareType, count: int) -> GameState:
    """Move `count` wares of one type from supply into a player's market."""
    state = take_from_supply(state, ware, count)
    market = add_wares(state.players[player].market, [ware] * count)
    return state.update_player(player, market=market)


def available_ware_types(state: GameState, minimum: int = 1) -> list[WareType]:
    return [w for w in WARE_TYPES if state.ware_supply[w] >= minimum]
