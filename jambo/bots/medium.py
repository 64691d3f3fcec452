"""
Medium Policy - Greedy single-ply heuristic scoring.

Every legal action gets a hand-tuned priority; the best one wins,
except that any ware trade within the near-top window of the best
score is preferred. Interactions are answered with targeted
heuristics and fall back to the Random path when those are rejected.
"""

from __future__ import annotations
import random
from typing import Sequence, assert_never

from ..engine_core.action import Action, ActionType, Response, WareMode
from ..engine_core.action_generator import legal_actions
from ..engine_core.cards import (
    AnimalDesign,
    CardType,
    PeopleDesign,
    UtilityDesign,
    WareType,
    design_of,
    get_card,
)
from ..engine_core.market import available_ware_types, effective_buy_price, effective_sell_price, missing_total
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
from ..engine_core.state import CONSTANTS, GameState, Phase, opponent_of
from .candidates import pending_responder
from .difficulty import MEDIUM
from .heuristics import (
    auction_max_bid,
    card_discard_cost,
    card_economy_value,
    hand_risk_penalty,
    defensive_animal_priority,
    people_combo_priority,
    pick_best_utility_index,
    pick_best_ware_type,
    pick_discard_card,
    rank_discards,
    utility_activation_priority,
    utility_play_priority,
    ware_type_demand_score,
)
from .policy import BotDecision, RandomPolicy, accepts, auction_bidding
from .seeding import pick


# ============================================================================
# Action scoring
# ============================================================================

def _people_score(state: GameState, design: PeopleDesign) -> float:
    player = state.active_player
    match design:
        case PeopleDesign.WISE_MAN:
            return 82.0 + (6 if state.actions_left > 2 else 0)
        case PeopleDesign.PORTUGUESE:
            return 80.0 + player.filled_slots * 2
        case (PeopleDesign.GUARD | PeopleDesign.RAIN_MAKER | PeopleDesign.SHAMAN | PeopleDesign.PSYCHIC
              | PeopleDesign.TRIBAL_ELDER | PeopleDesign.BASKET_MAKER | PeopleDesign.TRAVELING_MERCHANT
              | PeopleDesign.ARABIAN_MERCHANT | PeopleDesign.DANCER | PeopleDesign.CARRIER
              | PeopleDesign.DRUMMER):
            return 76.0 + min(0.0, people_combo_priority(state, state.current_player, design))
        case _:
            assert_never(design)


def _animal_score(state: GameState, design: AnimalDesign) -> float:
    me = state.active_player
    op = state.players[state.opponent]
    match design:
        case AnimalDesign.CROCODILE:
            score = 74.0 + len(op.utilities) * 4
        case AnimalDesign.PARROT:
            score = 72.0 + op.filled_slots * 2
        case AnimalDesign.ELEPHANT:
            score = 68.0 + (op.filled_slots - me.filled_slots) * 3
        case (AnimalDesign.HYENA | AnimalDesign.SNAKE | AnimalDesign.APE | AnimalDesign.LION
              | AnimalDesign.CHEETAH):
            score = 70.0
        case _:
            assert_never(design)
    return score + min(0.0, defensive_animal_priority(state, state.current_player, design))


def _utility_score(state: GameState, design: UtilityDesign) -> float:
    if len(state.active_player.utilities) >= CONSTANTS.max_utilities:
        return 10.0
    match design:
        case UtilityDesign.WELL | UtilityDesign.WEAPONS:
            return 60.0
        case UtilityDesign.LEOPARD_STATUE | UtilityDesign.DRUMS:
            return 56.0
        case (UtilityDesign.THRONE | UtilityDesign.BOAT | UtilityDesign.SCALE
              | UtilityDesign.MASK_OF_TRANSFORMATION | UtilityDesign.SUPPLIES | UtilityDesign.KETTLE):
            return 50.0
        case _:
            assert_never(design)


def _activation_score(state: GameState, design: UtilityDesign) -> float:
    match design:
        case UtilityDesign.WELL:
            score = 71.0
        case UtilityDesign.WEAPONS:
            score = 66.0
        case UtilityDesign.LEOPARD_STATUE:
            score = 64.0
        case UtilityDesign.DRUMS:
            score = 60.0
        case UtilityDesign.KETTLE:
            score = 58.0
        case (UtilityDesign.THRONE | UtilityDesign.BOAT | UtilityDesign.SCALE
              | UtilityDesign.MASK_OF_TRANSFORMATION | UtilityDesign.SUPPLIES):
            score = 54.0
        case _:
            assert_never(design)
    # Situational penalties only
    priority = utility_activation_priority(state, state.current_player, design)
    return score + min(0.0, priority - 55) * 0.5


def _ware_score(state: GameState, card_id: str, mode: WareMode) -> float:
    spec = get_card(card_id).wares
    player = state.active_player
    n = len(spec.types)
    margin = effective_sell_price(state, spec) - effective_buy_price(state, spec)
    efficiency = margin / max(1, n)

    if mode == WareMode.SELL:
        return 88.0 + efficiency * 2 + n

    score = 52.0 + efficiency * 1.5 + (4 if player.empty_slots >= n else -20)
    # Buying toward another in-hand ware card
    counts = player.market_counts()
    after = dict(counts)
    for ware in spec.types:
        after[ware] += 1
    completed = 0
    for other in player.hand:
        if other == card_id:
            continue
        other_card = get_card(other)
        if other_card.card_type != CardType.WARE:
            continue
        if missing_total(other_card.wares, counts) > 0 and missing_total(other_card.wares, after) == 0:
            completed += 1
    return score + completed * 4


def _end_turn_score(state: GameState) -> float:
    player = state.active_player
    score = 8.0 if state.actions_left >= CONSTANTS.action_bonus_threshold else 20.0
    if state.actions_left > 1:
        score -= min(5.0, card_economy_value(len(player.hand)) * 0.4)
        score += hand_risk_penalty(len(player.hand)) * 0.4
    return score


def _keep_score(state: GameState) -> float:
    if state.drawn_card is None:
        return 64.0
    card = get_card(state.drawn_card)
    if card.card_type in (CardType.PEOPLE, CardType.ANIMAL):
        return 73.0
    if card.card_type == CardType.UTILITY:
        return 70.0
    if card.card_type == CardType.WARE:
        return 64.0 + max(0, card.wares.margin)
    return 64.0


def score_action(state: GameState, action: Action) -> float:
    """Medium's priority for a free (non-interaction) action."""
    match action.action_type:
        case ActionType.DRAW_CARD:
            return 63.0 if state.actions_left > 2 else 56.0
        case ActionType.KEEP_CARD:
            return _keep_score(state)
        case ActionType.DISCARD_DRAWN:
            return 44.0
        case ActionType.SKIP_DRAW:
            return 28.0
        case ActionType.PLAY_CARD:
            card = get_card(action.card_id)
            design = design_of(action.card_id)
            if card.card_type == CardType.WARE:
                return _ware_score(state, action.card_id, action.ware_mode or WareMode.BUY)
            if card.card_type == CardType.PEOPLE:
                return _people_score(state, PeopleDesign(design))
            if card.card_type == CardType.ANIMAL:
                return _animal_score(state, AnimalDesign(design))
            if card.card_type == CardType.UTILITY:
                return _utility_score(state, UtilityDesign(design))
            player = state.active_player
            return 64.0 if player.filled_slots >= len(player.market) - 1 else 38.0
        case ActionType.ACTIVATE_UTILITY:
            utility = state.active_player.utilities[action.utility_index]
            return _activation_score(state, UtilityDesign(utility.design_id))
        case ActionType.DRAW_ACTION:
            return 30.0 if len(state.active_player.hand) <= 3 else 12.0
        case ActionType.END_TURN:
            return _end_turn_score(state)
        case ActionType.RESOLVE_INTERACTION | ActionType.GUARD_REACTION | ActionType.WARE_CARD_REACTION:
            return 0.0
        case _:
            assert_never(action.action_type)


def choose_scored(scored: Sequence[tuple[Action, float]], window: float, rng: random.Random) -> tuple[Action, float]:
    """
    Best-scoring action, preferring ware trades near the top.

    A ware play within `window` of the best score wins over everything
    else (the best such play); otherwise ties at the top are broken with
    the random stream.
    """
    top = max(score for _, score in scored)
    if window > 0:
        wares = [(a, s) for a, s in scored if a.is_ware_play and top - s <= window]
        if wares:
            return max(wares, key=lambda item: item[1])
    best = [(a, s) for a, s in scored if s == top]
    return pick(best, rng)


# ============================================================================
# Interaction heuristics
# ============================================================================

def _lowest_demand_index(state: GameState, player: int, indices: Sequence[int]) -> int:
    market = state.players[player].market
    return min(indices, key=lambda i: ware_type_demand_score(state, player, market[i]))


def _filled(state: GameState, player: int) -> list[int]:
    return [i for i, w in enumerate(state.players[player].market) if w is not None]


def _most_valuable(state: GameState, player: int, cards: Sequence[str]) -> str:
    return max(cards, key=lambda c: card_discard_cost(state, player, c))


def heuristic_response(state: GameState) -> Response | None:
    """Targeted reply to the pending resolution, or None to defer to sampling."""
    pending = state.pending_resolution
    if pending is None:
        return None
    cp = state.current_player
    opp = opponent_of(cp)
    me = pending_responder(state)
    player = state.players[me]

    match pending:
        case OpponentDiscard():
            hand = player.hand
            count = len(hand) - pending.discard_to
            if count <= 0:
                return Response.discard_selection(())
            cheapest = rank_discards(state, me, hand)[:count]
            return Response.discard_selection(tuple(sorted(hand.index(c) for c in cheapest)))

        case Auction() if not pending.is_bidding:
            available = available_ware_types(state)
            if not available:
                return None
            return Response.ware_type_pick(pick_best_ware_type(state, cp, available))

        case Draft():
            if pending.draft_mode == DraftMode.WARES:
                if not pending.available_wares:
                    return None
                best = pick_best_ware_type(state, me, list(dict.fromkeys(pending.available_wares)))
                return Response.ware_pick(pending.available_wares.index(best))
            if not pending.available_cards:
                return None
            if pending.draft_mode == DraftMode.UTILITIES:
                designs = [design_of(c) for c in pending.available_cards]
                return Response.card_pick(pending.available_cards[pick_best_utility_index(state, me, designs)])
            return Response.card_pick(_most_valuable(state, me, pending.available_cards))

        case WareTheftSwap() if pending.step == Step.GIVE:
            filled = _filled(state, cp)
            return Response.ware_pick(_lowest_demand_index(state, cp, filled)) if filled else None

        case WareTheftSwap() | WareTheftSingle():
            filled = _filled(state, opp)
            if not filled:
                return None
            market = state.players[opp].market
            return Response.ware_pick(max(filled, key=lambda i: ware_type_demand_score(state, cp, market[i])))

        case WareTrade():
            if pending.step == Step.SELECT_GIVE:
                present = list(dict.fromkeys(w for w in player.market if w is not None))
                if not present:
                    return None
                return Response.ware_type_pick(min(present, key=lambda w: ware_type_demand_score(state, cp, w)))
            receivable = [w for w in available_ware_types(state, max(1, pending.give_count))
                          if w != pending.give_type]
            return Response.ware_type_pick(pick_best_ware_type(state, cp, receivable)) if receivable else None

        case BinaryChoice():
            if design_of(pending.source_card) == PeopleDesign.CARRIER:
                return Response.binary_choice(0 if player.empty_slots >= 2 else 1)
            return Response.binary_choice(0 if player.gold >= 1 else 1)

        case OpponentChoice():
            # Paying is capped at current gold; a near-broke responder pays
            return Response.opponent_choice(0 if player.gold < 2 else 1)

        case DeckPeek():
            if not pending.revealed_cards:
                return None
            best = _most_valuable(state, cp, pending.revealed_cards)
            return Response.deck_peek_pick(pending.revealed_cards.index(best))

        case WareCashConversion():
            if pending.step == Step.SELECT_CARD:
                cards = [c for c in player.hand if get_card(c).card_type == CardType.WARE]
                if not cards:
                    return None
                return Response.card_pick(max(cards, key=lambda c: get_card(c).wares.sell_price))
            filled = _filled(state, cp)
            if len(filled) < 3:
                return None
            market = player.market
            ranked = sorted(filled, key=lambda i: ware_type_demand_score(state, cp, market[i]))
            return Response.wares_pick(tuple(sorted(ranked[:3])))

        case DiscardPick():
            eligible = [c for c in pending.eligible_cards if c in state.discard_pile]
            if not eligible:
                return None
            return Response.discard_pick(max(eligible, key=lambda c: utility_play_priority(state, cp, design_of(c))))

        case WareSelectMultiple():
            types = available_ware_types(state, pending.count)
            return Response.ware_type_pick(pick_best_ware_type(state, cp, types)) if types else None

        case WareSellBulk():
            filled = _filled(state, cp)
            if not filled:
                return None
            market = player.market
            unneeded = [i for i in filled if not _needed_by_hand(player.hand, market[i])]
            return Response.sell_wares(tuple(unneeded) if unneeded else (_lowest_demand_index(state, cp, filled),))

        case DrawModifier():
            if not player.hand or not state.discard_pile:
                return None
            return Response.card_pick(pick_discard_card(state, cp, player.hand))

        case UtilityEffect():
            return _utility_effect_response(state, pending)

        case HandSwap():
            if pending.step == Step.TAKE:
                hand = state.players[opp].hand
                return Response.card_pick(_most_valuable(state, cp, hand)) if hand else None
            return Response.card_pick(pick_discard_card(state, cp, player.hand)) if player.hand else None

        case SuppliesDiscard():
            return Response.card_pick(pick_discard_card(state, cp, player.hand)) if player.hand else None

        case CarrierWareSelect():
            types = available_ware_types(state)
            if not types:
                return None
            if pending.target_player == cp:
                return Response.ware_type_pick(pick_best_ware_type(state, cp, types))
            # Receiver is the opponent: hand over what they need least
            return Response.ware_type_pick(min(types, key=lambda w: ware_type_demand_score(state, pending.target_player, w)))

        case UtilityKeep() | UtilityReplace():
            utilities = player.utilities
            if not utilities:
                return None
            best = pick_best_utility_index(state, me, [u.design_id for u in utilities])
            if isinstance(pending, UtilityKeep):
                return Response.utility_pick(best)
            worst = min(range(len(utilities)),
                        key=lambda i: utility_activation_priority(state, me, utilities[i].design_id))
            return Response.utility_pick(worst)

        case CrocodileUse():
            utilities = state.players[pending.opponent_player].utilities
            if not utilities:
                return None
            return Response.utility_pick(pick_best_utility_index(state, cp, [u.design_id for u in utilities]))

        case _:
            return None


def ceiling_auction_action(state: GameState, auction: Auction) -> Action:
    """Bid one more than the current bid while it stays within the valuation ceiling."""
    bidder = auction.next_bidder
    bid = auction.current_bid + 1
    ceiling = auction_max_bid(state, bidder, auction.wares)
    if bid <= ceiling and state.players[bidder].gold >= bid:
        return Action.resolve(Response.auction_bid(bid))
    return Action.resolve(Response.auction_pass())


def _needed_by_hand(hand: Sequence[str], ware: WareType) -> bool:
    return any(get_card(c).card_type == CardType.WARE and ware in get_card(c).wares.types for c in hand)


def _utility_effect_response(state: GameState, pending: UtilityEffect) -> Response | None:
    cp = state.current_player
    player = state.active_player
    match UtilityDesign(pending.utility_design):
        case UtilityDesign.DRUMS:
            filled = _filled(state, cp)
            return Response.return_ware(_lowest_demand_index(state, cp, filled)) if filled else None
        case UtilityDesign.BOAT | UtilityDesign.LEOPARD_STATUE if pending.step == Step.SELECT_WARE_TYPE:
            types = available_ware_types(state)
            return Response.ware_type_pick(pick_best_ware_type(state, cp, types)) if types else None
        case UtilityDesign.BOAT | UtilityDesign.WEAPONS:
            return Response.card_pick(pick_discard_card(state, cp, player.hand)) if player.hand else None
        case UtilityDesign.SCALE:
            if not pending.selected_cards:
                return None
            return Response.card_pick(_most_valuable(state, cp, pending.selected_cards))
        case UtilityDesign.KETTLE:
            if not player.hand:
                return None
            count = 2 if len(player.hand) >= 4 else 1
            return Response.cards_pick(tuple(rank_discards(state, cp, player.hand)[:count]))
        case _:
            return None


# ============================================================================
# Policy
# ============================================================================

class MediumPolicy(RandomPolicy):
    """
    Medium policy - greedy over hand-tuned priorities.

    Used for:
    - A solid mid-strength opponent
    - The default move generator inside Expert's rollouts
    """

    default_tier = MEDIUM

    def decide_interaction(self, state: GameState, rng: random.Random) -> BotDecision | None:
        auction = auction_bidding(state)
        if auction is not None:
            return BotDecision(ceiling_auction_action(state, auction), "Auction within valuation")
        response = heuristic_response(state)
        if response is not None:
            action = Action.resolve(response)
            if accepts(state, action):
                return BotDecision(action, "Heuristic response")
        return self.random_interaction(state, rng)

    def decide(self, state: GameState, rng: random.Random) -> BotDecision | None:
        if state.phase == Phase.GAME_OVER:
            return None
        if state.has_pending:
            return super().decide(state, rng)
        return self.decide_free(state, rng)

    def decide_free(
        self,
        state: GameState,
        rng: random.Random,
        legal: Sequence[Action] | None = None,
    ) -> BotDecision | None:
        if legal is None:
            legal = legal_actions(state)
        if not legal:
            return None
        scored = [(action, score_action(state, action)) for action in legal]
        action, score = choose_scored(scored, self.tier.ware_window, rng)
        return BotDecision(action, "Greedy priority", evaluated_actions=len(scored), best_score=score)

