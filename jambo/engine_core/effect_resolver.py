"""
Effect Resolver - Step-based resolution of card interactions.

This module handles the multi-step logic of card effects:
- initialize_resolution() opens the pending resolution for a played
  card or an activated utility
- resolve_interaction() feeds one Response into the pending resolution
  and advances it, possibly to completion

Design principles:
- One resolver function per PendingKind, dispatched through a table
- Resolvers auto-resolve when nothing is eligible, whatever response
  they were given, so a placeholder response always completes them
- Rule violations raise RuleViolation; the reducer turns them into
  failed ActionResults
"""

from __future__ import annotations
from dataclasses import replace
from typing import Callable, assert_never

from .action import Response, ResponseType, RuleViolation
from .cards import (
    AnimalDesign,
    CardType,
    PeopleDesign,
    UtilityDesign,
    WareType,
    design_of,
    get_card,
)
from .deck import discard, draw_card, draw_to_hand, remove_from_hand
from .market import (
    add_wares,
    available_ware_types,
    clear_slot,
    gain_wares_from_supply,
    remove_wares,
    return_to_supply,
    take_from_supply,
)
from .pending import (
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
    PendingKind,
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
from .state import CONSTANTS, CrocodileCleanup, GameState, UtilitySlot, opponent_of

DISCARD_TO_HAND_SIZE = 3
DECK_PEEK_SIZE = 6
BULK_SELL_PRICE = 2
BASKET_COUNT = 2
BASKET_COST = 2
LEOPARD_COST = 2
WEAPONS_GOLD = 2
SUPPLIES_COST = 1
CHEETAH_GOLD = 2


# ============================================================================
# Initialization
# ============================================================================

def initialize_resolution(state: GameState, card_id: str) -> GameState:
    """
    Open the pending resolution for a played card or activated utility.

    Draft animals pool their zones immediately. Cards without a
    multi-step effect (Well, Wise Man) are handled by the reducer.
    """
    card = get_card(card_id)
    cp = state.current_player
    opp = opponent_of(cp)
    design = design_of(card_id)

    if card.card_type == CardType.PEOPLE:
        return _initialize_people(state, card_id, PeopleDesign(design), cp, opp)
    if card.card_type == CardType.ANIMAL:
        return _initialize_animal(state, card_id, AnimalDesign(design), cp, opp)
    if card.card_type == CardType.UTILITY:
        pending = utility_pending(card_id, UtilityDesign(design), opp)
        return state._copy_with(pending_resolution=pending)
    raise RuleViolation(f"{card.name} has no interaction")


def _initialize_people(state: GameState, card_id: str, design: PeopleDesign, cp: int, opp: int) -> GameState:
    pending: PendingResolution
    match design:
        case PeopleDesign.SHAMAN:
            pending = WareTrade(card_id)
        case PeopleDesign.PSYCHIC:
            pending = DeckPeek(card_id, revealed_cards=state.deck[:DECK_PEEK_SIZE])
        case PeopleDesign.TRIBAL_ELDER:
            pending = OpponentDiscard(card_id, target_player=opp, discard_to=DISCARD_TO_HAND_SIZE)
        case PeopleDesign.PORTUGUESE:
            pending = WareSellBulk(card_id, price_per_ware=BULK_SELL_PRICE)
        case PeopleDesign.BASKET_MAKER:
            pending = WareSelectMultiple(card_id, count=BASKET_COUNT)
        case PeopleDesign.TRAVELING_MERCHANT | PeopleDesign.ARABIAN_MERCHANT:
            pending = Auction(card_id, current_bidder=cp, next_bidder=opp)
        case PeopleDesign.DANCER:
            pending = WareCashConversion(card_id)
        case PeopleDesign.CARRIER:
            pending = BinaryChoice(card_id, options=("Opponent draws 2, you take 2 wares",
                                                     "You draw 2, opponent takes 2 wares"))
        case PeopleDesign.DRUMMER:
            eligible = tuple(c for c in state.discard_pile if get_card(c).card_type == CardType.UTILITY)
            pending = DiscardPick(card_id, eligible_cards=eligible)
        case PeopleDesign.GUARD | PeopleDesign.RAIN_MAKER | PeopleDesign.WISE_MAN:
            raise RuleViolation(f"{design.value} has no pending resolution")
        case _:
            assert_never(design)
    return state._copy_with(pending_resolution=pending)


def _initialize_animal(state: GameState, card_id: str, design: AnimalDesign, cp: int, opp: int) -> GameState:
    pending: PendingResolution
    match design:
        case AnimalDesign.CROCODILE:
            pending = CrocodileUse(card_id, opponent_player=opp)
        case AnimalDesign.PARROT:
            pending = WareTheftSingle(card_id)
        case AnimalDesign.HYENA:
            pending = HandSwap(card_id, revealed_hand=state.players[opp].hand)
        case AnimalDesign.SNAKE:
            pending = UtilityKeep(card_id)
        case AnimalDesign.CHEETAH:
            pending = OpponentChoice(card_id, options=("Give 2 gold", "Let the opponent draw 2 cards"))
        case AnimalDesign.ELEPHANT:
            pool = tuple(w for p in (cp, opp) for w in state.players[p].market if w is not None)
            for p in (cp, opp):
                market = state.players[p].market
                state = state.update_player(p, market=(None,) * len(market))
            pending = Draft(card_id, DraftMode.WARES, current_picker=cp, available_wares=pool)
        case AnimalDesign.APE:
            pool = state.players[cp].hand + state.players[opp].hand
            for p in (cp, opp):
                state = state.update_player(p, hand=())
            pending = Draft(card_id, DraftMode.CARDS, current_picker=cp, available_cards=pool)
        case AnimalDesign.LION:
            pool = tuple(u.card_id for p in (cp, opp) for u in state.players[p].utilities)
            for p in (cp, opp):
                state = state.update_player(p, utilities=())
            pending = Draft(card_id, DraftMode.UTILITIES, current_picker=cp, available_cards=pool)
        case _:
            assert_never(design)
    return state._copy_with(pending_resolution=pending)


def utility_pending(card_id: str, design: UtilityDesign, opp: int) -> PendingResolution:
    """Pending resolution for activating a utility (Well excluded)."""
    match design:
        case UtilityDesign.THRONE:
            return WareTheftSwap(card_id)
        case UtilityDesign.BOAT | UtilityDesign.SCALE | UtilityDesign.KETTLE | UtilityDesign.WEAPONS:
            return UtilityEffect(card_id, utility_design=design.value, step=Step.SELECT_CARD)
        case UtilityDesign.LEOPARD_STATUE:
            return UtilityEffect(card_id, utility_design=design.value, step=Step.SELECT_WARE_TYPE)
        case UtilityDesign.DRUMS:
            return UtilityEffect(card_id, utility_design=design.value, step=Step.SELECT_WARES)
        case UtilityDesign.MASK_OF_TRANSFORMATION:
            return DrawModifier(card_id)
        case UtilityDesign.SUPPLIES:
            return BinaryChoice(card_id, options=("Pay 1 gold: draw until a ware card",
                                                  "Discard a card: draw until a ware card"))
        case UtilityDesign.WELL:
            raise RuleViolation("Well has no pending resolution")
        case _:
            assert_never(design)


# ============================================================================
# Shared helpers
# ============================================================================

def _done(state: GameState, action: str, details: str = "") -> GameState:
    return state._copy_with(pending_resolution=None).with_log(action, details)


def _expect(response: Response, *types: ResponseType) -> None:
    if response.response_type not in types:
        expected = " or ".join(t.value for t in types)
        raise RuleViolation(f"Expected {expected} response, got {response.response_type.value}")


def _expect_ware_type(state: GameState, response: Response, minimum: int = 1) -> WareType:
    _expect(response, ResponseType.SELECT_WARE_TYPE)
    ware = response.ware_type
    if ware is None or state.ware_supply[ware] < minimum:
        raise RuleViolation(f"Not enough {ware.value if ware else 'wares'} in supply")
    return ware


def _unique_indices(indices: tuple[int, ...], valid: set[int]) -> None:
    if len(set(indices)) != len(indices):
        raise RuleViolation("Duplicate indices")
    for index in indices:
        if index not in valid:
            raise RuleViolation(f"Invalid index {index}")


def _filled_indices(market) -> set[int]:
    return {i for i, w in enumerate(market) if w is not None}


def draw_until_ware(state: GameState, player: int) -> GameState:
    """Draw cards, discarding non-wares, until a ware card goes to hand."""
    for _ in range(CONSTANTS.total_cards):
        state, card = draw_card(state)
        if card is None:
            return state
        if get_card(card).card_type == CardType.WARE:
            return state.update_player(player, hand=state.players[player].hand + (card,))
        state = discard(state, card)
    return state


# ============================================================================
# Resolvers
# ============================================================================

def _resolve_ware_trade(state: GameState, pending: WareTrade, response: Response) -> GameState:
    cp = state.current_player
    player = state.players[cp]

    if pending.step == Step.SELECT_GIVE:
        if player.filled_slots == 0:
            return _done(state, "SHAMAN_TRADE", "No wares to trade")
        _expect(response, ResponseType.SELECT_WARE_TYPE)
        count = player.market_counts()[response.ware_type] if response.ware_type else 0
        if count == 0:
            raise RuleViolation("Must give a ware type from your market")
        return state._copy_with(pending_resolution=replace(
            pending, step=Step.SELECT_RECEIVE, give_type=response.ware_type, give_count=count,
        ))

    give, count = pending.give_type, pending.give_count
    if not [w for w in available_ware_types(state, count) if w != give]:
        return _done(state, "SHAMAN_TRADE", "No ware type available to receive")
    receive = _expect_ware_type(state, response, count)
    if receive == give:
        raise RuleViolation("Must receive a different ware type")
    market = remove_wares(player.market, [give] * count)
    state = return_to_supply(state.update_player(cp, market=market), [give] * count)
    state = gain_wares_from_supply(state, cp, receive, count)
    return _done(state, "SHAMAN_TRADE", f"Traded {count} {give.value} for {receive.value}")


def _steal_ware(state: GameState, index: int | None) -> tuple[GameState, WareType]:
    cp = state.current_player
    opp = opponent_of(cp)
    opp_market, ware = clear_slot(state.players[opp].market, index)
    state = state.update_player(opp, market=opp_market)
    state = state.update_player(cp, market=add_wares(state.players[cp].market, [ware]))
    return state, ware


def _resolve_ware_theft_swap(state: GameState, pending: WareTheftSwap, response: Response) -> GameState:
    cp = state.current_player
    opp = opponent_of(cp)

    if pending.step == Step.STEAL:
        if state.players[cp].empty_slots == 0 or state.players[opp].filled_slots == 0:
            return _done(state, "THRONE", "Nothing to take")
        _expect(response, ResponseType.SELECT_WARE)
        state, ware = _steal_ware(state, response.index)
        return state._copy_with(pending_resolution=replace(pending, step=Step.GIVE)).with_log(
            "THRONE_STEAL", f"Took {ware.value}")

    _expect(response, ResponseType.SELECT_WARE)
    my_market, ware = clear_slot(state.players[cp].market, response.index)
    state = state.update_player(cp, market=my_market)
    state = state.update_player(opp, market=add_wares(state.players[opp].market, [ware]))
    return _done(state, "THRONE_GIVE", f"Gave {ware.value}")


def _resolve_ware_theft_single(state: GameState, pending: WareTheftSingle, response: Response) -> GameState:
    cp = state.current_player
    opp = opponent_of(cp)
    if state.players[cp].empty_slots == 0 or state.players[opp].filled_slots == 0:
        return _done(state, "PARROT", "Nothing to take")
    _expect(response, ResponseType.SELECT_WARE)
    state, ware = _steal_ware(state, response.index)
    return _done(state, "PARROT", f"Took {ware.value}")


def _resolve_auction(state: GameState, pending: Auction, response: Response) -> GameState:
    if not pending.is_bidding:
        if not available_ware_types(state):
            if not pending.wares:
                return _done(state, "AUCTION", "No wares to auction")
            return state._copy_with(pending_resolution=_open_bidding(state, pending, pending.wares))
        ware = _expect_ware_type(state, response)
        state = take_from_supply(state, ware)
        wares = pending.wares + (ware,)
        if len(wares) < 2:
            return state._copy_with(pending_resolution=replace(pending, wares=wares))
        return state._copy_with(pending_resolution=_open_bidding(state, pending, wares))

    bidder = pending.next_bidder
    if response.response_type == ResponseType.AUCTION_BID:
        amount = response.amount or 0
        if amount <= pending.current_bid:
            raise RuleViolation("Bid must exceed the current bid")
        if amount > state.players[bidder].gold:
            raise RuleViolation("Cannot bid more gold than you have")
        return state._copy_with(pending_resolution=replace(
            pending,
            current_bid=amount,
            current_bidder=bidder,
            next_bidder=opponent_of(bidder),
        )).with_log("AUCTION_BID", f"{amount}", player=bidder)

    _expect(response, ResponseType.AUCTION_PASS)
    if pending.current_bid <= 0:
        state = return_to_supply(state, pending.wares)
        return _done(state, "AUCTION", "No winner")

    winner = pending.current_bidder
    player = state.players[winner]
    keep = list(pending.wares[:player.empty_slots])
    state = state.update_player(
        winner,
        gold=player.gold - pending.current_bid,
        market=add_wares(player.market, keep),
    )
    state = return_to_supply(state, pending.wares[len(keep):])
    return _done(state, "AUCTION", f"Player {winner} won for {pending.current_bid}")


def _open_bidding(state: GameState, pending: Auction, wares: tuple[WareType, ...]) -> Auction:
    """The auctioneer opens at 1 gold if they can afford it."""
    cp = state.current_player
    opening = min(1, state.players[cp].gold)
    return replace(
        pending,
        wares=wares,
        is_bidding=True,
        current_bid=opening,
        current_bidder=cp,
        next_bidder=opponent_of(cp),
    )


def _resolve_binary_choice(state: GameState, pending: BinaryChoice, response: Response) -> GameState:
    _expect(response, ResponseType.BINARY_CHOICE)
    if response.choice not in (0, 1):
        raise RuleViolation("Choice must be 0 or 1")
    cp = state.current_player
    opp = opponent_of(cp)

    if design_of(pending.source_card) == PeopleDesign.CARRIER:
        drawer, receiver = (opp, cp) if response.choice == 0 else (cp, opp)
        state, _ = draw_to_hand(state, drawer, 2)
        return state._copy_with(
            pending_resolution=CarrierWareSelect(pending.source_card, target_player=receiver),
        ).with_log("CARRIER", f"Player {drawer} drew 2")

    if response.choice == 0:
        if state.players[cp].gold < SUPPLIES_COST:
            raise RuleViolation("Supplies costs 1 gold")
        state = state.update_player(cp, gold=state.players[cp].gold - SUPPLIES_COST)
        return _done(draw_until_ware(state, cp), "SUPPLIES", "Paid 1 gold")
    return state._copy_with(pending_resolution=SuppliesDiscard(pending.source_card))


def _resolve_carrier_ware_select(state: GameState, pending: CarrierWareSelect, response: Response) -> GameState:
    target = state.players[pending.target_player]
    if target.empty_slots == 0 or not available_ware_types(state):
        return _done(state, "CARRIER", "No wares received")
    ware = _expect_ware_type(state, response)
    count = min(2, state.ware_supply[ware], target.empty_slots)
    state = gain_wares_from_supply(state, pending.target_player, ware, count)
    return _done(state, "CARRIER", f"Player {pending.target_player} received {count} {ware.value}")


def _resolve_crocodile(state: GameState, pending: CrocodileUse, response: Response) -> GameState:
    opp = pending.opponent_player
    utilities = state.players[opp].utilities
    state = discard(state, pending.source_card)
    if not utilities:
        return _done(state, "CROCODILE", "Opponent has no utilities")
    _expect(response, ResponseType.SELECT_UTILITY)
    index = response.index
    if index is None or index < 0 or index >= len(utilities):
        raise RuleViolation(f"Invalid utility index {index}")
    utility = utilities[index]
    state = state._copy_with(crocodile_cleanup=CrocodileCleanup(opp, utility.card_id))
    design = UtilityDesign(utility.design_id)
    if design == UtilityDesign.WELL:
        state, _ = draw_to_hand(state, state.current_player, 1)
        return _done(state, "CROCODILE", "Used Well")
    inner = utility_pending(utility.card_id, design, opp)
    return state._copy_with(pending_resolution=inner).with_log("CROCODILE", f"Using {design.value}")


def _resolve_deck_peek(state: GameState, pending: DeckPeek, response: Response) -> GameState:
    if not pending.revealed_cards:
        return _done(state, "PSYCHIC", "Deck is empty")
    _expect(response, ResponseType.DECK_PEEK_PICK)
    index = response.index
    if index is None or index < 0 or index >= len(pending.revealed_cards):
        raise RuleViolation(f"Invalid deck peek index {index}")
    card = pending.revealed_cards[index]
    if card not in state.deck:
        raise RuleViolation(f"{card} is no longer in the deck")
    cp = state.current_player
    state = state._copy_with(deck=remove_from_hand(state.deck, card))
    state = state.update_player(cp, hand=state.players[cp].hand + (card,))
    return _done(state, "PSYCHIC", f"Took {card}")


def _resolve_discard_pick(state: GameState, pending: DiscardPick, response: Response) -> GameState:
    eligible = [c for c in pending.eligible_cards if c in state.discard_pile]
    if not eligible:
        return _done(state, "DRUMMER", "No utility in the discard pile")
    _expect(response, ResponseType.DISCARD_PICK)
    if response.card_id not in eligible:
        raise RuleViolation(f"{response.card_id} is not eligible")
    cp = state.current_player
    state = state._copy_with(discard_pile=remove_from_hand(state.discard_pile, response.card_id))
    state = state.update_player(cp, hand=state.players[cp].hand + (response.card_id,))
    return _done(state, "DRUMMER", f"Took {response.card_id}")


def _resolve_draft(state: GameState, pending: Draft, response: Response) -> GameState:
    picker = pending.current_picker
    player = state.players[picker]

    if pending.draft_mode == DraftMode.WARES:
        if not pending.available_wares:
            return _done(state, "DRAFT", "Nothing left to draft")
        _expect(response, ResponseType.SELECT_WARE)
        index = response.index
        if index is None or index < 0 or index >= len(pending.available_wares):
            raise RuleViolation(f"Invalid draft index {index}")
        ware = pending.available_wares[index]
        if player.empty_slots > 0:
            state = state.update_player(picker, market=add_wares(player.market, [ware]))
        else:
            state = return_to_supply(state, [ware])
        remaining = pending.available_wares[:index] + pending.available_wares[index + 1:]
        if not remaining:
            return _done(state, "DRAFT", "Draft complete")
        return state._copy_with(pending_resolution=replace(
            pending, available_wares=remaining, current_picker=opponent_of(picker),
        ))

    if not pending.available_cards:
        return _done(state, "DRAFT", "Nothing left to draft")
    _expect(response, ResponseType.SELECT_CARD)
    if response.card_id not in pending.available_cards:
        raise RuleViolation(f"{response.card_id} is not in the draft")
    card = response.card_id
    if pending.draft_mode == DraftMode.CARDS:
        state = state.update_player(picker, hand=player.hand + (card,))
    elif len(player.utilities) < CONSTANTS.max_utilities:
        slot = UtilitySlot(card_id=card, design_id=design_of(card))
        state = state.update_player(picker, utilities=player.utilities + (slot,))
    else:
        state = discard(state, card)
    remaining = remove_from_hand(pending.available_cards, card)
    if not remaining:
        return _done(state, "DRAFT", "Draft complete")
    return state._copy_with(pending_resolution=replace(
        pending, available_cards=remaining, current_picker=opponent_of(picker),
    ))


def _resolve_draw_modifier(state: GameState, pending: DrawModifier, response: Response) -> GameState:
    cp = state.current_player
    hand = state.players[cp].hand
    if not state.discard_pile or not hand:
        return _done(state, "MASK", "Nothing to swap")
    _expect(response, ResponseType.SELECT_CARD)
    if response.card_id not in hand:
        raise RuleViolation(f"{response.card_id} is not in hand")
    top = state.discard_pile[0]
    state = state._copy_with(discard_pile=state.discard_pile[1:])
    state = state.update_player(cp, hand=remove_from_hand(hand, response.card_id) + (top,))
    state = discard(state, response.card_id)
    return _done(state, "MASK", f"Swapped {response.card_id} for {top}")


def _resolve_hand_swap(state: GameState, pending: HandSwap, response: Response) -> GameState:
    cp = state.current_player
    opp = opponent_of(cp)

    if pending.step == Step.TAKE:
        opp_hand = state.players[opp].hand
        if not opp_hand:
            return _done(state, "HYENA", "Opponent hand is empty")
        _expect(response, ResponseType.SELECT_CARD)
        if response.card_id not in opp_hand:
            raise RuleViolation(f"{response.card_id} is not in the opponent's hand")
        state = state.update_player(opp, hand=remove_from_hand(opp_hand, response.card_id))
        state = state.update_player(cp, hand=state.players[cp].hand + (response.card_id,))
        return state._copy_with(pending_resolution=replace(
            pending, step=Step.GIVE, taken_card=response.card_id,
        ))

    hand = state.players[cp].hand
    if not hand:
        return _done(state, "HYENA", "Nothing to give")
    _expect(response, ResponseType.SELECT_CARD)
    if response.card_id not in hand:
        raise RuleViolation(f"{response.card_id} is not in hand")
    state = state.update_player(cp, hand=remove_from_hand(hand, response.card_id))
    state = state.update_player(opp, hand=state.players[opp].hand + (response.card_id,))
    return _done(state, "HYENA", f"Took {pending.taken_card}, gave {response.card_id}")


def _resolve_opponent_choice(state: GameState, pending: OpponentChoice, response: Response) -> GameState:
    _expect(response, ResponseType.OPPONENT_CHOICE)
    cp = state.current_player
    opp = opponent_of(cp)
    if response.choice == 0:
        paid = min(CHEETAH_GOLD, state.players[opp].gold)
        state = state.update_player(opp, gold=state.players[opp].gold - paid)
        state = state.update_player(cp, gold=state.players[cp].gold + paid)
        return _done(state, "CHEETAH", f"Opponent paid {paid}")
    if response.choice == 1:
        state, drawn = draw_to_hand(state, cp, 2)
        return _done(state, "CHEETAH", f"Drew {len(drawn)}")
    raise RuleViolation("Choice must be 0 or 1")


def _resolve_opponent_discard(state: GameState, pending: OpponentDiscard, response: Response) -> GameState:
    target = pending.target_player
    hand = state.players[target].hand
    count = len(hand) - pending.discard_to
    if count <= 0:
        return _done(state, "TRIBAL_ELDER", "Nothing to discard")
    _expect(response, ResponseType.OPPONENT_DISCARD_SELECTION)
    if len(response.indices) != count:
        raise RuleViolation(f"Must discard exactly {count} cards")
    _unique_indices(response.indices, set(range(len(hand))))
    discarded = [hand[i] for i in response.indices]
    kept = tuple(c for i, c in enumerate(hand) if i not in response.indices)
    state = discard(state.update_player(target, hand=kept), *discarded)
    return _done(state, "TRIBAL_ELDER", f"Player {target} discarded {count}")


def _resolve_supplies_discard(state: GameState, pending: SuppliesDiscard, response: Response) -> GameState:
    cp = state.current_player
    hand = state.players[cp].hand
    if hand:
        _expect(response, ResponseType.SELECT_CARD)
        if response.card_id not in hand:
            raise RuleViolation(f"{response.card_id} is not in hand")
        state = discard(state.update_player(cp, hand=remove_from_hand(hand, response.card_id)), response.card_id)
    return _done(draw_until_ware(state, cp), "SUPPLIES", "Discarded a card")


def _resolve_utility_effect(state: GameState, pending: UtilityEffect, response: Response) -> GameState:
    cp = state.current_player
    player = state.players[cp]
    design = UtilityDesign(pending.utility_design)

    match design:
        case UtilityDesign.DRUMS:
            if player.filled_slots > 0:
                _expect(response, ResponseType.RETURN_WARE)
                market, ware = clear_slot(player.market, response.index)
                state = return_to_supply(state.update_player(cp, market=market), [ware])
            state, _ = draw_to_hand(state, cp, 1)
            return _done(state, "DRUMS", "Returned a ware and drew")

        case UtilityDesign.BOAT:
            if pending.step == Step.SELECT_CARD:
                if not player.hand:
                    return _done(state, "BOAT", "Nothing to discard")
                _expect(response, ResponseType.SELECT_CARD)
                if response.card_id not in player.hand:
                    raise RuleViolation(f"{response.card_id} is not in hand")
                state = discard(state.update_player(cp, hand=remove_from_hand(player.hand, response.card_id)),
                                response.card_id)
                return state._copy_with(pending_resolution=replace(pending, step=Step.SELECT_WARE_TYPE))
            if player.empty_slots == 0 or not available_ware_types(state):
                return _done(state, "BOAT", "No ware received")
            ware = _expect_ware_type(state, response)
            return _done(gain_wares_from_supply(state, cp, ware, 1), "BOAT", f"Took {ware.value}")

        case UtilityDesign.SCALE:
            if not pending.selected_cards:
                drawn = []
                for _ in range(2):
                    state, card = draw_card(state)
                    if card is None:
                        break
                    drawn.append(card)
                if not drawn:
                    return _done(state, "SCALE", "Deck is empty")
                if len(drawn) == 1:
                    state = state.update_player(cp, hand=state.players[cp].hand + (drawn[0],))
                    return _done(state, "SCALE", "Drew 1")
                return state._copy_with(pending_resolution=replace(pending, selected_cards=tuple(drawn)))
            _expect(response, ResponseType.SELECT_CARD)
            if response.card_id not in pending.selected_cards:
                raise RuleViolation(f"{response.card_id} was not drawn")
            other = next(c for c in pending.selected_cards if c != response.card_id)
            opp = opponent_of(cp)
            state = state.update_player(cp, hand=state.players[cp].hand + (response.card_id,))
            state = state.update_player(opp, hand=state.players[opp].hand + (other,))
            return _done(state, "SCALE", f"Kept {response.card_id}")

        case UtilityDesign.KETTLE:
            if not player.hand:
                return _done(state, "KETTLE", "Nothing to discard")
            _expect(response, ResponseType.SELECT_CARDS)
            cards = response.card_ids
            if not 1 <= len(cards) <= 2 or len(set(cards)) != len(cards):
                raise RuleViolation("Kettle discards 1 or 2 cards")
            hand = player.hand
            for card in cards:
                if card not in hand:
                    raise RuleViolation(f"{card} is not in hand")
                hand = remove_from_hand(hand, card)
            state = discard(state.update_player(cp, hand=hand), *cards)
            state, _ = draw_to_hand(state, cp, len(cards))
            return _done(state, "KETTLE", f"Replaced {len(cards)} cards")

        case UtilityDesign.LEOPARD_STATUE:
            if player.gold < LEOPARD_COST or player.empty_slots == 0 or not available_ware_types(state):
                return _done(state, "LEOPARD_STATUE", "No ware bought")
            ware = _expect_ware_type(state, response)
            state = state.update_player(cp, gold=player.gold - LEOPARD_COST)
            return _done(gain_wares_from_supply(state, cp, ware, 1), "LEOPARD_STATUE", f"Bought {ware.value}")

        case UtilityDesign.WEAPONS:
            if player.hand:
                _expect(response, ResponseType.SELECT_CARD)
                if response.card_id not in player.hand:
                    raise RuleViolation(f"{response.card_id} is not in hand")
                state = discard(state.update_player(cp, hand=remove_from_hand(player.hand, response.card_id)),
                                response.card_id)
            state = state.update_player(cp, gold=state.players[cp].gold + WEAPONS_GOLD)
            return _done(state, "WEAPONS", "Gained 2 gold")

        case (UtilityDesign.WELL | UtilityDesign.THRONE | UtilityDesign.MASK_OF_TRANSFORMATION
              | UtilityDesign.SUPPLIES):
            raise RuleViolation(f"{design.value} does not use a utility effect")
        case _:
            assert_never(design)


def _keep_one_utility(state: GameState, player: int, response: Response) -> GameState:
    utilities = state.players[player].utilities
    _expect(response, ResponseType.SELECT_UTILITY)
    index = response.index
    if index is None or index < 0 or index >= len(utilities):
        raise RuleViolation(f"Invalid utility index {index}")
    dropped = [u.card_id for i, u in enumerate(utilities) if i != index]
    state = state.update_player(player, utilities=(utilities[index],))
    return discard(state, *dropped)


def _resolve_utility_keep(state: GameState, pending: UtilityKeep, response: Response) -> GameState:
    cp = state.current_player
    opp = opponent_of(cp)

    if pending.step == Step.ACTIVE_CHOOSE:
        if len(state.players[cp].utilities) > 1:
            state = _keep_one_utility(state, cp, response)
        if len(state.players[opp].utilities) <= 1:
            return _done(state, "SNAKE", "Utilities kept")
        return state._copy_with(pending_resolution=replace(pending, step=Step.OPPONENT_CHOOSE))

    if len(state.players[opp].utilities) > 1:
        state = _keep_one_utility(state, opp, response)
    return _done(state, "SNAKE", "Utilities kept")


def _resolve_ware_cash_conversion(state: GameState, pending: WareCashConversion, response: Response) -> GameState:
    cp = state.current_player
    player = state.players[cp]
    ware_cards = [c for c in player.hand if get_card(c).card_type == CardType.WARE]

    if pending.step == Step.SELECT_CARD:
        if not ware_cards or player.filled_slots < 3:
            return _done(state, "DANCER", "Nothing to convert")
        _expect(response, ResponseType.SELECT_CARD)
        if response.card_id not in ware_cards:
            raise RuleViolation(f"{response.card_id} is not a ware card in hand")
        return state._copy_with(pending_resolution=replace(
            pending, step=Step.SELECT_WARES, selected_card=response.card_id,
        ))

    _expect(response, ResponseType.SELECT_WARES)
    if len(response.indices) != 3:
        raise RuleViolation("Dancer returns exactly 3 wares")
    _unique_indices(response.indices, _filled_indices(player.market))
    market = player.market
    returned = []
    for index in response.indices:
        market, ware = clear_slot(market, index)
        returned.append(ware)
    card = pending.selected_card
    price = get_card(card).wares.sell_price
    state = state.update_player(cp, market=market, hand=remove_from_hand(player.hand, card), gold=player.gold + price)
    state = discard(return_to_supply(state, returned), card)
    return _done(state, "DANCER", f"Sold 3 wares for {price}")


def _resolve_ware_sell_bulk(state: GameState, pending: WareSellBulk, response: Response) -> GameState:
    cp = state.current_player
    player = state.players[cp]
    if player.filled_slots == 0:
        return _done(state, "PORTUGUESE", "No wares to sell")
    _expect(response, ResponseType.SELL_WARES)
    if not response.indices:
        raise RuleViolation("Must sell at least one ware")
    _unique_indices(response.indices, _filled_indices(player.market))
    market = player.market
    sold = []
    for index in response.indices:
        market, ware = clear_slot(market, index)
        sold.append(ware)
    earned = len(sold) * pending.price_per_ware
    state = return_to_supply(state.update_player(cp, market=market, gold=player.gold + earned), sold)
    return _done(state, "PORTUGUESE", f"Sold {len(sold)} wares for {earned}")


def _resolve_ware_select_multiple(state: GameState, pending: WareSelectMultiple, response: Response) -> GameState:
    cp = state.current_player
    player = state.players[cp]
    if (player.gold < BASKET_COST or player.empty_slots < pending.count
            or not available_ware_types(state, pending.count)):
        return _done(state, "BASKET_MAKER", "No wares taken")
    ware = _expect_ware_type(state, response, pending.count)
    state = state.update_player(cp, gold=player.gold - BASKET_COST)
    state = gain_wares_from_supply(state, cp, ware, pending.count)
    return _done(state, "BASKET_MAKER", f"Took {pending.count} {ware.value}")


def _resolve_utility_replace(state: GameState, pending: UtilityReplace, response: Response) -> GameState:
    cp = state.current_player
    utilities = state.players[cp].utilities
    _expect(response, ResponseType.SELECT_UTILITY)
    index = response.index
    if index is None or index < 0 or index >= len(utilities):
        raise RuleViolation(f"Invalid utility index {index}")
    replaced = utilities[index]
    slot = UtilitySlot(card_id=pending.source_card, design_id=pending.new_utility_design)
    new_utilities = utilities[:index] + (slot,) + utilities[index + 1:]
    state = discard(state.update_player(cp, utilities=new_utilities), replaced.card_id)
    return _done(state, "UTILITY_REPLACE", f"Replaced {replaced.design_id}")


Resolver = Callable[[GameState, PendingResolution, Response], GameState]

RESOLVERS: dict[PendingKind, Resolver] = {
    PendingKind.OPPONENT_DISCARD: _resolve_opponent_discard,
    PendingKind.AUCTION: _resolve_auction,
    PendingKind.DRAFT: _resolve_draft,
    PendingKind.WARE_THEFT_SWAP: _resolve_ware_theft_swap,
    PendingKind.WARE_THEFT_SINGLE: _resolve_ware_theft_single,
    PendingKind.WARE_TRADE: _resolve_ware_trade,
    PendingKind.BINARY_CHOICE: _resolve_binary_choice,
    PendingKind.DECK_PEEK: _resolve_deck_peek,
    PendingKind.WARE_CASH_CONVERSION: _resolve_ware_cash_conversion,
    PendingKind.DISCARD_PICK: _resolve_discard_pick,
    PendingKind.WARE_SELECT_MULTIPLE: _resolve_ware_select_multiple,
    PendingKind.WARE_SELL_BULK: _resolve_ware_sell_bulk,
    PendingKind.DRAW_MODIFIER: _resolve_draw_modifier,
    PendingKind.UTILITY_EFFECT: _resolve_utility_effect,
    PendingKind.HAND_SWAP: _resolve_hand_swap,
    PendingKind.OPPONENT_CHOICE: _resolve_opponent_choice,
    PendingKind.SUPPLIES_DISCARD: _resolve_supplies_discard,
    PendingKind.CARRIER_WARE_SELECT: _resolve_carrier_ware_select,
    PendingKind.UTILITY_KEEP: _resolve_utility_keep,
    PendingKind.CROCODILE_USE: _resolve_crocodile,
    PendingKind.UTILITY_REPLACE: _resolve_utility_replace,
}


def resolve_interaction(state: GameState, response: Response) -> GameState:
    """
    Feed one response into the pending resolution.

    When the resolution completes, the played people/animal card goes
    to the discard pile and any Crocodile cleanup runs.
    """
    pending = state.pending_resolution
    if pending is None:
        raise RuleViolation("No pending resolution")
    resolver = RESOLVERS.get(pending.kind)
    if resolver is None:
        raise RuleViolation(f"No resolver for {pending.kind}")

    state = resolver(state, pending, response)
    if state.pending_resolution is not None:
        return state

    source = pending.source_card
    if get_card(source).card_type in (CardType.PEOPLE, CardType.ANIMAL) and source not in state.discard_pile:
        state = discard(state, source)

    cleanup = state.crocodile_cleanup
    if cleanup is not None:
        owner = state.players[cleanup.opponent_player]
        remaining = tuple(u for u in owner.utilities if u.card_id != cleanup.utility_card_id)
        state = state.update_player(cleanup.opponent_player, utilities=remaining)
        if len(remaining) != len(owner.utilities):
            state = discard(state, cleanup.utility_card_id)
        state = state._copy_with(crocodile_cleanup=None)
    return state
