"""
Deck - Drawing, discarding and reshuffling.

The discard pile is stored top-first. When the deck runs out the
discard pile is reshuffled deterministically from (rng_seed, rng_state).
"""

from __future__ import annotations
import random

from .state import GameState


def _reshuffle_seed(state: GameState) -> int:
    return (state.rng_seed * 0x9E3779B1 + state.rng_state * 0x85EBCA6B + 0x27D4EB2F) & 0xFFFFFFFF


def seeded_shuffle(cards: list[str], seed: int) -> list[str]:
    shuffled = list(cards)
    random.Random(seed).shuffle(shuffled)
    return shuffled


def is_deadlocked(state: GameState) -> bool:
    """True when nothing can ever be drawn again."""
    return not state.deck and not state.discard_pile


def draw_card(state: GameState) -> tuple[GameState, str | None]:
    """
    Take the top card of the deck.

    Reshuffles the discard pile into a new deck when the deck is empty.
    Returns (state, None) if both are empty.
    """
    if not state.deck:
        if not state.discard_pile:
            return state, None
        deck = seeded_shuffle(list(state.discard_pile), _reshuffle_seed(state))
        state = state._copy_with(
            deck=tuple(deck),
            discard_pile=(),
            rng_state=state.rng_state + max(1, len(deck) - 1),
            reshuffle_count=state.reshuffle_count + 1,
        )
    card = state.deck[0]
    return state._copy_with(deck=state.deck[1:]), card


def discard(state: GameState, *card_ids: str) -> GameState:
    """Put cards on top of the discard pile, last one on top."""
    pile = state.discard_pile
    for card_id in card_ids:
        pile = (card_id,) + pile
    return state._copy_with(discard_pile=pile)


def draw_to_hand(state: GameState, player: int, count: int = 1) -> tuple[GameState, list[str]]:
    """Draw up to `count` cards into a player's hand."""
    drawn = []
    for _ in range(count):
        state, card = draw_card(state)
        if card is None:
            break
        drawn.append(card)
    if drawn:
        hand = state.players[player].hand + tuple(drawn)
        state = state.update_player(player, hand=hand)
    return state, drawn


def remove_from_hand(hand: tuple[str, ...], card_id: str) -> tuple[str, ...]:
    items = list(hand)
    items.remove(card_id)
    return tuple(items)
