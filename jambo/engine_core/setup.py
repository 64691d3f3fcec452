"""
Game Setup - Builds the initial state for a new game.
"""

from __future__ import annotations

from .cards import ALL_CARD_IDS
from .deck import seeded_shuffle
from .state import CONSTANTS, GameState, Phase, PlayerState


def create_initial_state(seed: int = 0) -> GameState:
    """
    Create a fresh two-player game.

    Shuffles all 110 cards from `seed`, deals 5 to each player, and
    starts player 0's draw phase with 20 gold each and empty markets.
    """
    deck = seeded_shuffle(list(ALL_CARD_IDS), seed & 0xFFFFFFFF)
    size = CONSTANTS.initial_hand_size
    hands = (tuple(deck[:size]), tuple(deck[size:2 * size]))
    players = (PlayerState(hand=hands[0]), PlayerState(hand=hands[1]))

    return GameState(
        players=players,
        current_player=0,
        turn=1,
        phase=Phase.DRAW,
        actions_left=CONSTANTS.max_actions,
        deck=tuple(deck[2 * size:]),
        rng_seed=seed,
        rng_state=len(deck) - 1,
    )
