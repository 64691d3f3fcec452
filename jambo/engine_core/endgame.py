"""
Endgame - Gold threshold trigger, final turn and winner.

The first player to end a turn with 60+ gold triggers the endgame;
the other player then takes one final turn. Ties go to the
final-turn player.
"""

from __future__ import annotations

from .state import CONSTANTS, EndgameState, GameState, Phase, opponent_of


def check_endgame(state: GameState) -> GameState:
    """Called at end of turn, before the turn passes."""
    if state.has_pending:
        return state

    cp = state.current_player
    if state.endgame is not None:
        if cp == state.endgame.final_turn_player:
            return state._copy_with(phase=Phase.GAME_OVER).with_log(
                "GAME_OVER", f"winner: player {winner(state)}"
            )
        return state._copy_with(endgame=EndgameState(
            trigger_player=state.endgame.trigger_player,
            final_turn_player=state.endgame.final_turn_player,
            is_final_turn=True,
        ))

    if state.players[cp].gold >= CONSTANTS.endgame_gold_threshold:
        return state._copy_with(
            endgame=EndgameState(trigger_player=cp, final_turn_player=opponent_of(cp)),
        ).with_log("ENDGAME_TRIGGERED", f"player {cp} reached {state.players[cp].gold} gold")

    return state


def winner(state: GameState) -> int | None:
    """
    Winner of a game in (or about to enter) GAME_OVER.

    The trigger player wins only if strictly ahead. Without an
    endgame the richer player is reported, or None on a tie.
    """
    g0, g1 = state.players[0].gold, state.players[1].gold
    if state.endgame is None:
        if g0 == g1:
            return None
        return 0 if g0 > g1 else 1
    trigger = state.endgame.trigger_player
    final = state.endgame.final_turn_player
    if state.players[trigger].gold > state.players[final].gold:
        return trigger
    return final


def final_scores(state: GameState) -> tuple[int, int]:
    return state.players[0].gold, state.players[1].gold
