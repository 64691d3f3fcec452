"""
Strategy Heuristics - Design-keyed priority tables and valuation helpers.

Shared by the Medium, Hard and Expert tiers and by the board evaluator.

Design principles:
- Every design table is an exhaustive match over a closed design enum
  ending in assert_never, so a new design cannot be silently skipped
- Pure functions of (state, player, ...); nothing here mutates state
"""

from __future__ import annotations
from typing import Sequence, assert_never

from ..engine_core.cards import (
    AnimalDesign,
    CardType,
    PeopleDesign,
    UtilityDesign,
    WareSpec,
    WareType,
    design_of,
    get_card,
)
from ..engine_core.market import (
    effective_buy_price,
    effective_sell_price,
    missing_total,
    missing_wares,
    ware_counts,
)
from ..engine_core.state import GameState, PlayerState, opponent_of


# ============================================================================
# Small helpers
# ============================================================================

def card_economy_value(hand_size: int) -> float:
    """First three cards are worth 2 each, extras 1 each."""
    return min(hand_size, 3) * 2 + max(0, hand_size - 3)


def hand_risk_penalty(hand_size: int) -> float:
    if hand_size <= 4:
        return 0.0
    if hand_size == 5:
        return 0.8
    if hand_size == 6:
        return 1.8
    return 3 + (hand_size - 7) * 0.6


def market_exposure_penalty(player: PlayerState) -> float:
    filled = player.filled_slots
    return 0.0 if filled <= 3 else (filled - 3) * 1.5


def sell_readiness_bonus(spec: WareSpec, counts: dict[WareType, int]) -> int:
    missing = missing_total(spec, counts)
    if missing == 0:
        return 6
    if missing == 1:
        return 3
    if missing == 2:
        return 1
    return 0


def _hand_ware_specs(player: PlayerState) -> list[WareSpec]:
    specs = []
    for card_id in player.hand:
        card = get_card(card_id)
        if card.card_type == CardType.WARE and card.wares is not None:
            specs.append(card.wares)
    return specs


def sell_ready_count(player: PlayerState) -> int:
    """Hand ware cards whose requirement the market already satisfies."""
    counts = player.market_counts()
    return sum(1 for spec in _hand_ware_specs(player) if missing_total(spec, counts) == 0)


def _has_card_design(player: PlayerState, design: str) -> bool:
    return any(design_of(c) == design for c in player.hand)


def estimate_opponent_market_value(state: GameState, player_index: int) -> float:
    """How much the wares in `player_index`'s market are likely worth to them."""
    player = state.players[player_index]
    filled = player.filled_slots
    if filled == 0:
        return 0.0

    counts = player.market_counts()
    likely_sold = 0
    maybe_sold = 0
    for spec in _hand_ware_specs(player):
        missing = missing_total(spec, counts)
        if missing == 0:
            likely_sold += 1
        elif missing <= 2:
            maybe_sold += 1

    if likely_sold > 0:
        return filled * 2.0
    if maybe_sold > 0:
        return float(filled)
    return filled * 0.5


# ============================================================================
# Utilities
# ============================================================================

def _utility_play_base(design: UtilityDesign) -> int:
    match design:
        case UtilityDesign.SUPPLIES:
            return 77
        case UtilityDesign.WELL:
            return 75
        case UtilityDesign.LEOPARD_STATUE:
            return 73
        case UtilityDesign.BOAT:
            return 71
        case UtilityDesign.WEAPONS:
            return 68
        case UtilityDesign.SCALE:
            return 64
        case UtilityDesign.KETTLE:
            return 62
        case UtilityDesign.THRONE:
            return 56
        case UtilityDesign.MASK_OF_TRANSFORMATION:
            return 52
        case UtilityDesign.DRUMS:
            return 50
        case _:
            assert_never(design)


def _utility_activate_base(design: UtilityDesign) -> int:
    match design:
        case UtilityDesign.SUPPLIES:
            return 76
        case UtilityDesign.WELL:
            return 74
        case UtilityDesign.LEOPARD_STATUE:
            return 71
        case UtilityDesign.BOAT:
            return 70
        case UtilityDesign.WEAPONS:
            return 67
        case UtilityDesign.SCALE:
            return 63
        case UtilityDesign.KETTLE:
            return 60
        case UtilityDesign.THRONE:
            return 55
        case UtilityDesign.MASK_OF_TRANSFORMATION:
            return 51
        case UtilityDesign.DRUMS:
            return 48
        case _:
            assert_never(design)


def utility_play_priority(state: GameState, player_index: int, design: UtilityDesign | str) -> float:
    """How much `player_index` wants to place a utility of this design."""
    design = UtilityDesign(design)
    me = state.players[player_index]
    op = state.players[opponent_of(player_index)]
    hand = len(me.hand)
    score = float(_utility_play_base(design))

    match design:
        case UtilityDesign.BOAT:
            if hand <= 1:
                score -= 12
            if hand >= 5:
                score += 5
            if me.has_utility(UtilityDesign.WELL):
                score += 8
            if me.has_utility(UtilityDesign.DRUMS):
                score += 3
            if me.empty_slots == 0:
                score -= 10
        case UtilityDesign.LEOPARD_STATUE:
            if me.gold < 2:
                score -= 12
            if me.empty_slots > 0:
                score += 4
            if me.has_utility(UtilityDesign.WEAPONS):
                score += 6
            if me.has_utility(UtilityDesign.SUPPLIES):
                score += 3
        case UtilityDesign.KETTLE:
            if hand <= 1:
                score -= 9
            if hand >= 4:
                score += 4
            if me.has_utility(UtilityDesign.WELL):
                score += 5
        case UtilityDesign.WELL:
            if me.gold < 1:
                score -= 10
            if hand <= 3:
                score += 7
            if any(me.has_utility(d) for d in (UtilityDesign.BOAT, UtilityDesign.WEAPONS, UtilityDesign.KETTLE)):
                score += 4
        case UtilityDesign.WEAPONS:
            if hand <= 1:
                score -= 8
            if hand >= 4:
                score += 5
            if me.has_utility(UtilityDesign.WELL):
                score += 3
            if me.has_utility(UtilityDesign.LEOPARD_STATUE):
                score += 5
        case UtilityDesign.THRONE:
            if op.filled_slots > 0:
                score += 4
            else:
                score -= 7
            if _has_card_design(me, AnimalDesign.PARROT):
                score += 4
        case UtilityDesign.SCALE:
            if hand <= 4:
                score += 3
            if _has_card_design(me, PeopleDesign.PSYCHIC):
                score += 5
        case UtilityDesign.MASK_OF_TRANSFORMATION:
            if not state.discard_pile or hand == 0:
                score -= 8
        case UtilityDesign.SUPPLIES:
            if me.gold < 1 and hand == 0:
                score -= 15
            if me.small_market_stands > 0:
                score += 3
        case UtilityDesign.DRUMS:
            if me.filled_slots >= 3:
                score += 3
            if me.has_utility(UtilityDesign.BOAT):
                score += 4
            if me.filled_slots == 0:
                score -= 12
        case _:
            assert_never(design)

    score += min(estimate_opponent_market_value(state, opponent_of(player_index)), 8) * 0.2
    return score


def utility_activation_priority(state: GameState, player_index: int, design: UtilityDesign | str) -> float:
    """How much `player_index` wants to activate a placed utility of this design."""
    design = UtilityDesign(design)
    me = state.players[player_index]
    op = state.players[opponent_of(player_index)]
    hand = len(me.hand)
    score = float(_utility_activate_base(design))

    match design:
        case UtilityDesign.WELL:
            if me.gold < 1:
                score -= 15
            if hand <= 3:
                score += 5
        case UtilityDesign.BOAT:
            if hand <= 0:
                score -= 20
            if me.empty_slots == 0:
                score -= 12
            if me.has_utility(UtilityDesign.WELL):
                score += 7
        case UtilityDesign.LEOPARD_STATUE:
            if me.gold < 2:
                score -= 18
            if me.empty_slots == 0:
                score -= 12
            if me.has_utility(UtilityDesign.WEAPONS):
                score += 4
        case UtilityDesign.WEAPONS:
            if hand <= 0:
                score -= 16
            if hand >= 4:
                score += 4
        case UtilityDesign.THRONE:
            if op.filled_slots == 0 or me.empty_slots == 0:
                score -= 12
            else:
                score += 4
        case UtilityDesign.DRUMS:
            if me.filled_slots == 0:
                score -= 18
            if me.has_utility(UtilityDesign.BOAT):
                score += 3
        case UtilityDesign.KETTLE:
            if hand <= 0:
                score -= 14
            if hand >= 3:
                score += 3
        case UtilityDesign.MASK_OF_TRANSFORMATION:
            if not state.discard_pile or hand == 0:
                score -= 12
        case UtilityDesign.SUPPLIES:
            if me.gold < 1 and hand == 0:
                score -= 18
            if me.small_market_stands > 0:
                score += 2
        case UtilityDesign.SCALE:
            if _has_card_design(me, PeopleDesign.PSYCHIC):
                score += 4
        case _:
            assert_never(design)

    return score


def utility_set_strength(state: GameState, player_index: int) -> float:
    player = state.players[player_index]
    return sum(utility_activation_priority(state, player_index, u.design_id) * 0.08 for u in player.utilities)


def pick_best_utility_index(state: GameState, owner: int, designs: Sequence[str]) -> int:
    best_index = 0
    best_score = float("-inf")
    for index, design in enumerate(designs):
        score = utility_activation_priority(state, owner, design)
        if score > best_score:
            best_score = score
            best_index = index
    return best_index


# ============================================================================
# People and animals
# ============================================================================

def card_pressure_bonus(state: GameState, player_index: int, card_id: str) -> float:
    """Tempo value of playing an attacking or card-advantage card."""
    me = state.players[player_index]
    op = state.players[opponent_of(player_index)]
    card = get_card(card_id)
    design = design_of(card_id)

    if card.card_type == CardType.ANIMAL:
        animal = AnimalDesign(design)
        match animal:
            case AnimalDesign.CHEETAH:
                return 11 + (4 if op.gold >= 2 else 3)
            case AnimalDesign.CROCODILE:
                return 7 + len(op.utilities) * 2
            case AnimalDesign.PARROT:
                return 5 + op.filled_slots
            case AnimalDesign.ELEPHANT:
                return 5 + max(0, op.filled_slots - me.filled_slots) * 2
            case AnimalDesign.APE:
                return 4 + max(0, len(op.hand) - len(me.hand)) * 1.2
            case AnimalDesign.LION:
                return 4 + max(0, len(op.utilities) - len(me.utilities)) * 2.2
            case AnimalDesign.HYENA | AnimalDesign.SNAKE:
                return 0.0
            case _:
                assert_never(animal)

    if card.card_type == CardType.PEOPLE:
        if design == PeopleDesign.PSYCHIC:
            return 10.0
        if design == PeopleDesign.DANCER:
            return 9.0 if me.filled_slots >= 3 else 5.0
        if design == PeopleDesign.TRIBAL_ELDER:
            delta = len(op.hand) - len(me.hand)
            return 6 + (delta * 1.5 if delta > 0 else 0)

    return 0.0


def defensive_animal_priority(state: GameState, player_index: int, design: AnimalDesign | str) -> float:
    """
    How much an animal swings the position away from the opponent.

    Negative when the attack would have nothing to hit.
    """
    design = AnimalDesign(design)
    me = state.players[player_index]
    op = state.players[opponent_of(player_index)]

    match design:
        case AnimalDesign.CROCODILE:
            if not op.utilities:
                return -6.0
            return utility_set_strength(state, opponent_of(player_index)) * 0.5
        case AnimalDesign.PARROT:
            return 3.0 if op.filled_slots > 0 and me.empty_slots > 0 else -6.0
        case AnimalDesign.HYENA:
            return 2 + len(op.hand) * 0.5 if op.hand else -6.0
        case AnimalDesign.SNAKE:
            return max(0, len(op.utilities) - 1) * 3.0 - max(0, len(me.utilities) - 1) * 2.0
        case AnimalDesign.ELEPHANT:
            return (op.filled_slots - me.filled_slots) * 1.2
        case AnimalDesign.APE:
            return (len(op.hand) - len(me.hand)) * 0.8
        case AnimalDesign.LION:
            return (len(op.utilities) - len(me.utilities)) * 2.0
        case AnimalDesign.CHEETAH:
            return 3.0 if op.gold >= 2 else 1.0
        case _:
            assert_never(design)


def people_combo_priority(state: GameState, player_index: int, design: PeopleDesign | str) -> float:
    """Situational value of a people card given hand, market and gold."""
    design = PeopleDesign(design)
    me = state.players[player_index]
    op = state.players[opponent_of(player_index)]
    ready = sell_ready_count(me)
    ware_specs = _hand_ware_specs(me)

    match design:
        case PeopleDesign.GUARD | PeopleDesign.RAIN_MAKER:
            return -10.0
        case PeopleDesign.SHAMAN:
            if me.filled_slots == 0:
                return -8.0
            counts = me.market_counts()
            near = sum(1 for spec in ware_specs if 0 < missing_total(spec, counts) <= 2)
            return 2.0 + near
        case PeopleDesign.PSYCHIC:
            return 3.0 if len(state.deck) >= 6 else 0.0
        case PeopleDesign.TRIBAL_ELDER:
            return max(0, len(op.hand) - 3) * 1.5
        case PeopleDesign.WISE_MAN:
            buyable = sum(1 for spec in ware_specs if me.gold >= spec.buy_price - 2)
            score = ready * 2.0 + buyable
            return score if state.actions_left >= 3 else score - 4
        case PeopleDesign.PORTUGUESE:
            return me.filled_slots * 0.5 - ready
        case PeopleDesign.BASKET_MAKER:
            return 3.0 if me.gold >= 2 and me.empty_slots >= 2 else -8.0
        case PeopleDesign.TRAVELING_MERCHANT | PeopleDesign.ARABIAN_MERCHANT:
            return 2.0 if me.empty_slots >= 2 else -4.0
        case PeopleDesign.DANCER:
            return 4.0 if me.filled_slots >= 3 and ware_specs else -8.0
        case PeopleDesign.CARRIER:
            return 2.0
        case PeopleDesign.DRUMMER:
            has_utility = any(get_card(c).card_type == CardType.UTILITY for c in state.discard_pile)
            return 4.0 if has_utility else -6.0
        case _:
            assert_never(design)


# ============================================================================
# Wares
# ============================================================================

def ware_acquisition_priority(state: GameState, player_index: int, spec: WareSpec) -> float:
    """How much `player_index` wants to buy the wares of a ware card."""
    player = state.players[player_index]
    counts = player.market_counts()
    effective_buy = effective_buy_price(state, spec)
    margin = effective_sell_price(state, spec) - effective_buy
    missing = missing_total(spec, counts)

    score = 42.0
    score += margin * 1.1
    score += sell_readiness_bonus(spec, counts) * 2
    score += 8 if missing <= 1 else 3 if missing == 2 else -2
    if player.empty_slots < len(spec.types):
        score -= 20
    if player.gold < effective_buy:
        score -= 25
    score -= market_exposure_penalty(player) * 0.5
    return score


def ware_type_demand_score(state: GameState, player_index: int, ware: WareType) -> float:
    player = state.players[player_index]
    counts = player.market_counts()
    score = 0.0

    for spec in _hand_ware_specs(player):
        needed = missing_wares(spec, counts)
        if needed[ware] <= 0:
            continue
        score += 2.5
        if missing_total(spec, counts) <= 2:
            score += 1.5
        score += sell_readiness_bonus(spec, counts) * 0.35

    score += counts[ware] * 0.45
    if state.ware_supply[ware] <= 1:
        score -= 0.4
    return score


def pick_best_ware_type(state: GameState, player_index: int, candidates: Sequence[WareType]) -> WareType:
    best = candidates[0] if candidates else WareType.TRINKETS
    best_score = float("-inf")
    for ware in candidates:
        score = ware_type_demand_score(state, player_index, ware)
        if score > best_score:
            best_score = score
            best = ware
    return best


def auction_max_bid(state: GameState, player_index: int, wares: Sequence[WareType]) -> int:
    """
    Most gold `player_index` should pay for an auctioned set of wares.

    Built from market fit, supply scarcity and hand synergy: a set that
    completes an in-hand sellable card is worth about half that card's
    sell price. Zero with no free slots; never above ceil(0.4 x gold).
    """
    player = state.players[player_index]
    if player.empty_slots == 0 or not wares or player.gold <= 0:
        return 0

    usable = list(wares[:player.empty_slots])
    counts = player.market_counts()

    value = float(len(usable))
    for ware in usable:
        if counts[ware] > 0:
            value += 0.25
        if state.ware_supply[ware] <= 1:
            value += 0.5

    after = dict(counts)
    for ware, n in ware_counts(usable).items():
        after[ware] += n

    synergy = 0.0
    for spec in _hand_ware_specs(player):
        before_missing = missing_total(spec, counts)
        after_missing = missing_total(spec, after)
        if before_missing > 0 and after_missing == 0:
            synergy = max(synergy, spec.sell_price * 0.5)
        elif after_missing < before_missing:
            synergy = max(synergy, float(before_missing - after_missing))
    value += synergy

    cap = -(-2 * player.gold // 5)
    return max(0, min(cap, int(value)))


# ============================================================================
# Discards
# ============================================================================

def card_discard_cost(state: GameState, player_index: int, card_id: str) -> float:
    """What `player_index` loses by discarding this card. Lower is cheaper."""
    card = get_card(card_id)
    design = design_of(card_id)

    if card.card_type == CardType.WARE and card.wares is not None:
        counts = state.players[player_index].market_counts()
        missing = missing_total(card.wares, counts)
        return card.wares.margin * 0.8 + (4 if missing <= 1 else 2 if missing <= 2 else 0)

    if card.card_type == CardType.ANIMAL:
        if design == AnimalDesign.CHEETAH:
            return 10.0
        if design in (AnimalDesign.CROCODILE, AnimalDesign.ELEPHANT, AnimalDesign.APE, AnimalDesign.LION):
            return 8.0
        return 6.0

    if card.card_type == CardType.PEOPLE:
        if design == PeopleDesign.GUARD:
            return 11.0
        if design in (PeopleDesign.PSYCHIC, PeopleDesign.DANCER):
            return 9.0
        if design == PeopleDesign.TRIBAL_ELDER:
            return 8.0
        return 5.0

    if card.card_type == CardType.UTILITY:
        return utility_play_priority(state, player_index, design)

    if card.card_type == CardType.STAND:
        return 5.0 if state.players[player_index].small_market_stands == 0 else 2.0

    return 1.0


def pick_discard_card(state: GameState, player_index: int, cards: Sequence[str]) -> str:
    best = cards[0] if cards else ""
    best_cost = float("inf")
    for card_id in cards:
        cost = card_discard_cost(state, player_index, card_id)
        if cost < best_cost:
            best_cost = cost
            best = card_id
    return best


def rank_discards(state: GameState, player_index: int, cards: Sequence[str]) -> list[str]:
    """Cards ordered cheapest-to-discard first (stable)."""
    return sorted(cards, key=lambda c: card_discard_cost(state, player_index, c))
