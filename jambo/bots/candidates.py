"""
Candidate Generator - Responses for pending interactions.

For every pending resolution kind this module can:
1. Sample one plausible response from a random stream (sample_response)
2. List an exhaustive or representative set of legal-shaped responses
   (fallback_responses)

Design principles:
- Total: every known kind has a branch; an unknown kind yields None / []
- Domain constraints are respected up front (supply and capacity,
  distinct trade types, exact discard counts, affordable bids)
- When nothing is eligible a well-formed placeholder is emitted so the
  engine's auto-resolve path runs
"""

from __future__ import annotations
import random
from itertools import combinations
from typing import Sequence

from ..engine_core.action import Response
from ..engine_core.cards import CardType, UtilityDesign, WareType, design_of, get_card
from ..engine_core.market import available_ware_types
from ..engine_core.pending import (
    Auction,
    BinaryChoice,
    CarrierWareSelect,
    CrocodileUse,
    DeckPeek,
    DiscardPick,
    Draft,
    DraftMode,
    DrawModifier,
    HandSwap,
    OpponentChoice,
    OpponentDiscard,
    PendingResolution,
    Step,
    SuppliesDiscard,
    UtilityEffect,
    UtilityKeep,
    UtilityReplace,
    WareCashConversion,
    WareSelectMultiple,
    WareSellBulk,
    WareTheftSingle,
    WareTheftSwap,
    WareTrade,
)
from ..engine_core.state import GameState, opponent_of
from .seeding import chance, pick, shuffled, sub_rng

PLACEHOLDER_WARE = WareType.TRINKETS
MAX_COMBINATIONS = 20


# ============================================================================
# Who must act
# ============================================================================

def pending_responder(state: GameState) -> int:
    """Player who must answer the pending resolution."""
    pending = state.pending_resolution
    cp = state.current_player
    match pending:
        case None:
            return cp
        case Auction():
            return pending.next_bidder if pending.is_bidding else cp
        case Draft():
            return pending.current_picker
        case OpponentDiscard() | CarrierWareSelect():
            return pending.target_player
        case UtilityKeep():
            return cp if pending.step == Step.ACTIVE_CHOOSE else opponent_of(cp)
        case OpponentChoice():
            return opponent_of(cp)
        case _:
            return cp


def responder(state: GameState) -> int:
    """Player whose decision the game is waiting on."""
    if state.pending_guard_reaction is not None:
        return state.pending_guard_reaction.target_player
    if state.pending_ware_card_reaction is not None:
        return state.pending_ware_card_reaction.target_player
    if state.pending_resolution is not None:
        return pending_responder(state)
    return state.current_player


# ============================================================================
# Shared helpers
# ============================================================================

def _filled_indices(market: Sequence[WareType | None]) -> list[int]:
    return [i for i, w in enumerate(market) if w is not None]


def _distinct_ware_indices(market: Sequence[WareType | None]) -> list[int]:
    """First slot index of each distinct ware type."""
    seen: set[WareType] = set()
    indices = []
    for i, ware in enumerate(market):
        if ware is not None and ware not in seen:
            seen.add(ware)
            indices.append(i)
    return indices


def _distinct_designs(cards: Sequence[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for card_id in cards:
        design = design_of(card_id)
        if design not in seen:
            seen.add(design)
            result.append(card_id)
    return result


def _limited_combinations(items: Sequence[int], size: int) -> list[tuple[int, ...]]:
    result = []
    for combo in combinations(items, size):
        result.append(combo)
        if len(result) >= MAX_COMBINATIONS:
            break
    return result


def _ware_cards(hand: Sequence[str]) -> list[str]:
    return [c for c in hand if get_card(c).card_type == CardType.WARE]


def _receivable_types(state: GameState, pending: WareTrade) -> list[WareType]:
    return [w for w in available_ware_types(state, max(1, pending.give_count)) if w != pending.give_type]


def _multi_select_types(state: GameState, pending: WareSelectMultiple) -> list[WareType]:
    player = state.active_player
    if player.empty_slots < pending.count or player.gold < 2:
        return []
    return available_ware_types(state, pending.count)


def _single_ware_types(state: GameState, player: int) -> list[WareType]:
    if state.players[player].empty_slots == 0:
        return []
    return available_ware_types(state)


def _can_steal(state: GameState) -> bool:
    cp = state.current_player
    return state.players[cp].empty_slots > 0 and state.players[opponent_of(cp)].filled_slots > 0


# ============================================================================
# Sampling
# ============================================================================

def sample_response(state: GameState, rng: random.Random) -> Response | None:
    """One plausible response to the pending resolution, or None."""
    pending = state.pending_resolution
    if pending is None:
        return None

    cp = state.current_player
    opp = opponent_of(cp)
    player = state.players[cp]

    match pending:
        case OpponentDiscard():
            hand = state.players[pending.target_player].hand
            count = len(hand) - pending.discard_to
            if count <= 0:
                return Response.discard_selection(())
            chosen = shuffled(range(len(hand)), rng)[:count]
            return Response.discard_selection(tuple(sorted(chosen)))

        case Auction():
            if not pending.is_bidding:
                available = available_ware_types(state)
                return Response.ware_type_pick(pick(available, rng) if available else PLACEHOLDER_WARE)
            bid = pending.current_bid + 1
            if state.players[pending.next_bidder].gold >= bid and chance(rng, 0.5):
                return Response.auction_bid(bid)
            return Response.auction_pass()

        case Draft():
            if pending.draft_mode == DraftMode.WARES:
                if not pending.available_wares:
                    return Response.ware_pick(0)
                return Response.ware_pick(int(rng.random() * len(pending.available_wares)))
            if not pending.available_cards:
                return Response.card_pick("")
            return Response.card_pick(pick(pending.available_cards, rng))

        case WareTheftSwap() if pending.step == Step.GIVE:
            filled = _filled_indices(player.market)
            return Response.ware_pick(pick(filled, rng) if filled else 0)

        case WareTheftSwap() | WareTheftSingle():
            filled = _filled_indices(state.players[opp].market)
            if not filled or not _can_steal(state):
                return Response.ware_pick(0)
            return Response.ware_pick(pick(filled, rng))

        case WareTrade():
            if pending.step == Step.SELECT_GIVE:
                present = [w for w in player.market if w is not None]
                return Response.ware_type_pick(pick(present, rng) if present else PLACEHOLDER_WARE)
            receivable = _receivable_types(state, pending)
            return Response.ware_type_pick(pick(receivable, rng) if receivable else PLACEHOLDER_WARE)

        case BinaryChoice():
            return Response.binary_choice(0 if chance(rng, 0.5) else 1)

        case OpponentChoice():
            return Response.opponent_choice(0 if chance(rng, 0.5) else 1)

        case DeckPeek():
            if not pending.revealed_cards:
                return Response.deck_peek_pick(0)
            return Response.deck_peek_pick(int(rng.random() * len(pending.revealed_cards)))

        case WareCashConversion():
            if pending.step == Step.SELECT_CARD:
                cards = _ware_cards(player.hand)
                if not cards or player.filled_slots < 3:
                    return Response.card_pick("")
                return Response.card_pick(pick(cards, rng))
            filled = _filled_indices(player.market)
            if len(filled) < 3:
                return Response.wares_pick((0, 1, 2))
            return Response.wares_pick(tuple(sorted(shuffled(filled, rng)[:3])))

        case DiscardPick():
            eligible = [c for c in pending.eligible_cards if c in state.discard_pile]
            return Response.discard_pick(pick(eligible, rng) if eligible else "")

        case WareSelectMultiple():
            types = _multi_select_types(state, pending)
            return Response.ware_type_pick(pick(types, rng) if types else PLACEHOLDER_WARE)

        case WareSellBulk():
            filled = _filled_indices(player.market)
            if not filled:
                return Response.sell_wares(())
            count = min(1 + int(rng.random() * 3), len(filled))
            return Response.sell_wares(tuple(sorted(shuffled(filled, rng)[:count])))

        case DrawModifier():
            if not player.hand or not state.discard_pile:
                return Response.card_pick("")
            return Response.card_pick(pick(player.hand, rng))

        case UtilityEffect():
            return _sample_utility_effect(state, pending, rng)

        case HandSwap():
            hand = state.players[opp].hand if pending.step == Step.TAKE else player.hand
            return Response.card_pick(pick(hand, rng) if hand else "")

        case SuppliesDiscard():
            return Response.card_pick(pick(player.hand, rng) if player.hand else "")

        case CarrierWareSelect():
            types = _single_ware_types(state, pending.target_player)
            return Response.ware_type_pick(pick(types, rng) if types else PLACEHOLDER_WARE)

        case UtilityKeep():
            owner = pending_responder(state)
            utilities = state.players[owner].utilities
            if len(utilities) <= 1:
                return Response.utility_pick(0)
            return Response.utility_pick(int(rng.random() * len(utilities)))

        case CrocodileUse():
            utilities = state.players[pending.opponent_player].utilities
            if not utilities:
                return Response.utility_pick(0)
            return Response.utility_pick(int(rng.random() * len(utilities)))

        case UtilityReplace():
            if not player.utilities:
                return Response.utility_pick(0)
            return Response.utility_pick(int(rng.random() * len(player.utilities)))

        case _:
            return None


def _sample_utility_effect(state: GameState, pending: UtilityEffect, rng: random.Random) -> Response | None:
    player = state.active_player
    match UtilityDesign(pending.utility_design):
        case UtilityDesign.DRUMS:
            filled = _filled_indices(player.market)
            return Response.return_ware(pick(filled, rng) if filled else 0)
        case UtilityDesign.BOAT if pending.step == Step.SELECT_WARE_TYPE:
            types = _single_ware_types(state, state.current_player)
            return Response.ware_type_pick(pick(types, rng) if types else PLACEHOLDER_WARE)
        case UtilityDesign.BOAT | UtilityDesign.WEAPONS:
            return Response.card_pick(pick(player.hand, rng) if player.hand else "")
        case UtilityDesign.SCALE:
            if not pending.selected_cards:
                return Response.card_pick("")
            return Response.card_pick(pick(pending.selected_cards, rng))
        case UtilityDesign.KETTLE:
            if not player.hand:
                return Response.cards_pick(())
            count = min(1 + int(rng.random() * 2), len(player.hand))
            return Response.cards_pick(tuple(shuffled(player.hand, rng)[:count]))
        case UtilityDesign.LEOPARD_STATUE:
            types = _single_ware_types(state, state.current_player)
            return Response.ware_type_pick(pick(types, rng) if types else PLACEHOLDER_WARE)
        case _:
            return None


# ============================================================================
# Fallbacks
# ============================================================================

def fallback_responses(state: GameState) -> list[Response]:
    """Exhaustive or representative legal-shaped responses, never raising."""
    pending = state.pending_resolution
    if pending is None:
        return []

    cp = state.current_player
    opp = opponent_of(cp)
    player = state.players[cp]

    match pending:
        case OpponentDiscard():
            hand = state.players[pending.target_player].hand
            count = len(hand) - pending.discard_to
            if count <= 0:
                return [Response.discard_selection(())]
            return [Response.discard_selection(c) for c in _limited_combinations(range(len(hand)), count)]

        case Auction():
            if not pending.is_bidding:
                available = available_ware_types(state)
                return [Response.ware_type_pick(w) for w in available] or [Response.ware_type_pick(PLACEHOLDER_WARE)]
            responses = [Response.auction_pass()]
            bid = pending.current_bid + 1
            if state.players[pending.next_bidder].gold >= bid:
                responses.append(Response.auction_bid(bid))
            return responses

        case Draft():
            if pending.draft_mode == DraftMode.WARES:
                indices = _distinct_ware_indices(pending.available_wares)
                return [Response.ware_pick(i) for i in indices] or [Response.ware_pick(0)]
            cards = _distinct_designs(pending.available_cards)
            return [Response.card_pick(c) for c in cards] or [Response.card_pick("")]

        case WareTheftSwap() if pending.step == Step.GIVE:
            return [Response.ware_pick(i) for i in _distinct_ware_indices(player.market)] or [Response.ware_pick(0)]

        case WareTheftSwap() | WareTheftSingle():
            if not _can_steal(state):
                return [Response.ware_pick(0)]
            return [Response.ware_pick(i) for i in _distinct_ware_indices(state.players[opp].market)]

        case WareTrade():
            if pending.step == Step.SELECT_GIVE:
                present = [player.market[i] for i in _distinct_ware_indices(player.market)]
                return [Response.ware_type_pick(w) for w in present] or [Response.ware_type_pick(PLACEHOLDER_WARE)]
            receivable = _receivable_types(state, pending)
            return [Response.ware_type_pick(w) for w in receivable] or [Response.ware_type_pick(PLACEHOLDER_WARE)]

        case BinaryChoice():
            return [Response.binary_choice(0), Response.binary_choice(1)]

        case OpponentChoice():
            return [Response.opponent_choice(0), Response.opponent_choice(1)]

        case DeckPeek():
            if not pending.revealed_cards:
                return [Response.deck_peek_pick(0)]
            return [Response.deck_peek_pick(i) for i in range(len(pending.revealed_cards))]

        case WareCashConversion():
            if pending.step == Step.SELECT_CARD:
                cards = _distinct_designs(_ware_cards(player.hand))
                if not cards or player.filled_slots < 3:
                    return [Response.card_pick("")]
                return [Response.card_pick(c) for c in cards]
            filled = _filled_indices(player.market)
            if len(filled) < 3:
                return [Response.wares_pick((0, 1, 2))]
            return [Response.wares_pick(c) for c in _limited_combinations(filled, 3)]

        case DiscardPick():
            eligible = _distinct_designs([c for c in pending.eligible_cards if c in state.discard_pile])
            return [Response.discard_pick(c) for c in eligible] or [Response.discard_pick("")]

        case WareSelectMultiple():
            types = _multi_select_types(state, pending)
            return [Response.ware_type_pick(w) for w in types] or [Response.ware_type_pick(PLACEHOLDER_WARE)]

        case WareSellBulk():
            filled = _filled_indices(player.market)
            if not filled:
                return [Response.sell_wares(())]
            responses = [Response.sell_wares(tuple(filled))]
            responses.extend(Response.sell_wares((i,)) for i in _distinct_ware_indices(player.market))
            return responses

        case DrawModifier():
            if not player.hand or not state.discard_pile:
                return [Response.card_pick("")]
            return [Response.card_pick(c) for c in _distinct_designs(player.hand)]

        case UtilityEffect():
            return _fallback_utility_effect(state, pending)

        case HandSwap():
            hand = state.players[opp].hand if pending.step == Step.TAKE else player.hand
            return [Response.card_pick(c) for c in _distinct_designs(hand)] or [Response.card_pick("")]

        case SuppliesDiscard():
            return [Response.card_pick(c) for c in _distinct_designs(player.hand)] or [Response.card_pick("")]

        case CarrierWareSelect():
            types = _single_ware_types(state, pending.target_player)
            return [Response.ware_type_pick(w) for w in types] or [Response.ware_type_pick(PLACEHOLDER_WARE)]

        case UtilityKeep():
            utilities = state.players[pending_responder(state)].utilities
            if len(utilities) <= 1:
                return [Response.utility_pick(0)]
            return [Response.utility_pick(i) for i in range(len(utilities))]

        case CrocodileUse():
            utilities = state.players[pending.opponent_player].utilities
            return [Response.utility_pick(i) for i in range(len(utilities))] or [Response.utility_pick(0)]

        case UtilityReplace():
            return [Response.utility_pick(i) for i in range(len(player.utilities))] or [Response.utility_pick(0)]

        case _:
            return []


def _fallback_utility_effect(state: GameState, pending: UtilityEffect) -> list[Response]:
    player = state.active_player
    hand = _distinct_designs(player.hand)
    match UtilityDesign(pending.utility_design):
        case UtilityDesign.DRUMS:
            return [Response.return_ware(i) for i in _distinct_ware_indices(player.market)] or [Response.return_ware(0)]
        case UtilityDesign.BOAT if pending.step == Step.SELECT_WARE_TYPE:
            types = _single_ware_types(state, state.current_player)
            return [Response.ware_type_pick(w) for w in types] or [Response.ware_type_pick(PLACEHOLDER_WARE)]
        case UtilityDesign.BOAT | UtilityDesign.WEAPONS:
            return [Response.card_pick(c) for c in hand] or [Response.card_pick("")]
        case UtilityDesign.SCALE:
            return [Response.card_pick(c) for c in pending.selected_cards] or [Response.card_pick("")]
        case UtilityDesign.KETTLE:
            if not player.hand:
                return [Response.cards_pick(())]
            responses = [Response.cards_pick((c,)) for c in hand]
            responses.extend(
                Response.cards_pick((player.hand[i], player.hand[j]))
                for i, j in _limited_combinations(range(len(player.hand)), 2)
            )
            return responses
        case UtilityDesign.LEOPARD_STATUE:
            types = _single_ware_types(state, state.current_player)
            return [Response.ware_type_pick(w) for w in types] or [Response.ware_type_pick(PLACEHOLDER_WARE)]
        case _:
            return []


def interaction_candidates(state: GameState, rng: random.Random, samples: int) -> list[Response]:
    """Sampled responses followed by fallbacks, deduplicated in order."""
    seen: dict[Response, None] = {}
    for i in range(samples):
        response = sample_response(state, sub_rng(rng, i))
        if response is not None:
            seen.setdefault(response, None)
    for response in fallback_responses(state):
        seen.setdefault(response, None)
    return list(seen)


def pending_kind_of(pending: PendingResolution | None) -> str:
    return pending.kind.value if pending is not None else "NONE"
