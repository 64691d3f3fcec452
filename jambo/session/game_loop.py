"""
Game Loop - Bot-versus-bot play-through of one seeded game.

The loop:
1. Find the responder (reaction target, pending responder, or current player)
2. Ask the responder's difficulty for an action
3. Apply it; if the engine rejects it, apply the first accepted fallback
4. Repeat until game over, the step limit, or the wall-clock limit

A game that ends any other way than GAME_OVER is a stall, and the
reason is recorded rather than raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import time
from typing import Callable

from ..bots.candidates import fallback_responses, pending_kind_of, responder
from ..bots.difficulty import Difficulty
from ..bots.jambo_bot import choose_action
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import legal_actions
from ..engine_core.cards import CardType, UtilityDesign, get_card
from ..engine_core.reducer import apply_action
from ..engine_core.setup import create_initial_state
from ..engine_core.state import GameState, Phase

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 2500
DEFAULT_MAX_GAME_MS = 8000
EXPERT_MAX_GAME_MS = 120_000

StepObserver = Callable[[int, int, Action, GameState], None]


def utility_counter() -> dict[str, int]:
    return {design.value: 0 for design in UtilityDesign}


@dataclass
class GameOutcome:
    """
    Result of one bot-versus-bot game.

    Contains:
    - Winner by gold (None for a tie or a stall)
    - Stall flag and reason
    - Turns, steps and final gold
    - Utilities played and activated, by seat
    """
    seed: int
    p0: Difficulty
    p1: Difficulty
    winner: int | None = None
    stalled: bool = False
    stall_reason: str | None = None
    turns: int = 0
    steps: int = 0
    gold: tuple[int, int] = (0, 0)
    utility_played: tuple[dict[str, int], dict[str, int]] = field(
        default_factory=lambda: (utility_counter(), utility_counter())
    )
    utility_activated: tuple[dict[str, int], dict[str, int]] = field(
        default_factory=lambda: (utility_counter(), utility_counter())
    )

    def finish(self, state: GameState, stall_reason: str | None = None) -> GameOutcome:
        self.turns = state.turn
        self.gold = (state.players[0].gold, state.players[1].gold)
        if stall_reason is not None:
            self.stalled = True
            self.stall_reason = stall_reason
            self.winner = None
            return self
        if self.gold[0] > self.gold[1]:
            self.winner = 0
        elif self.gold[1] > self.gold[0]:
            self.winner = 1
        return self


def _record_utilities(outcome: GameOutcome, state: GameState, seat: int, action: Action) -> None:
    if action.action_type == ActionType.PLAY_CARD:
        card = get_card(action.card_id)
        if card.card_type == CardType.UTILITY:
            outcome.utility_played[seat][UtilityDesign(card.design_id).value] += 1
    elif action.action_type == ActionType.ACTIVATE_UTILITY:
        utilities = state.active_player.utilities
        if 0 <= action.utility_index < len(utilities):
            outcome.utility_activated[seat][UtilityDesign(utilities[action.utility_index].design_id).value] += 1


def _fallback_action(state: GameState) -> Action | None:
    """First accepted legal action other than DRAW_ACTION (or response, while pending)."""
    candidates = legal_actions(state)
    if not candidates and state.pending_resolution is not None:
        candidates = [Action.resolve(r) for r in fallback_responses(state)]
    for candidate in candidates:
        if candidate.action_type == ActionType.DRAW_ACTION:
            continue
        if apply_action(state, candidate).success:
            return candidate
    return None


def game_budget_ms(
    p0: Difficulty,
    p1: Difficulty,
    max_game_ms: int = DEFAULT_MAX_GAME_MS,
    expert_max_game_ms: int = EXPERT_MAX_GAME_MS,
) -> int:
    """Wall-clock budget for one pairing: the Expert budget when either seat is Expert."""
    if Difficulty.EXPERT in (p0, p1):
        return expert_max_game_ms
    return max_game_ms


def _context(state: GameState, difficulty: Difficulty, seat: int) -> str:
    pending = pending_kind_of(state.pending_resolution)
    return f"{difficulty.value}:phase={state.phase.value}:pending={pending}:responder={seat}"


def play_game(
    seed: int,
    p0: Difficulty | str,
    p1: Difficulty | str,
    max_steps: int = DEFAULT_MAX_STEPS,
    max_game_ms: int | None = None,
    observer: StepObserver | None = None,
) -> GameOutcome:
    """
    Play one seeded game between two difficulties.

    Never raises for in-game problems: stalls are reported on the outcome.
    Without max_game_ms the pairing budget from game_budget_ms applies.
    """
    seats = (Difficulty.parse(p0), Difficulty.parse(p1))
    outcome = GameOutcome(seed=seed, p0=seats[0], p1=seats[1])
    if max_game_ms is None:
        max_game_ms = game_budget_ms(seats[0], seats[1])
    state = create_initial_state(seed)
    started = time.monotonic()

    while state.phase != Phase.GAME_OVER and outcome.steps < max_steps:
        if (time.monotonic() - started) * 1000 > max_game_ms:
            return _stall(outcome, state, f"game-timeout>{max_game_ms}ms")

        seat = responder(state)
        difficulty = seats[seat]
        try:
            action = choose_action(state, difficulty)
        except Exception as exc:
            logger.exception("Bot %s raised on seed %d", difficulty.value, seed)
            return _stall(outcome, state, f"ai-throw:{difficulty.value}:{exc}")

        if action is None:
            return _stall(outcome, state, f"no-action:{_context(state, difficulty, seat)}")

        result = apply_action(state, action)
        if not result.success:
            logger.debug("Rejected %s (%s); trying fallback", action.describe(), result.error)
            action = _fallback_action(state)
            if action is None:
                message = " ".join((result.error or "").split())[:120]
                return _stall(outcome, state, f"fallback-none:{_context(state, difficulty, seat)}:err={message}")
            result = apply_action(state, action)

        _record_utilities(outcome, state, seat, action)
        if observer is not None:
            observer(outcome.steps, seat, action, result.new_state)
        state = result.new_state
        outcome.steps += 1

    if state.phase != Phase.GAME_OVER:
        return _stall(outcome, state, f"max-steps>{max_steps}")

    outcome.finish(state)
    logger.info(
        "Seed %d %s vs %s: winner=%s gold=%s turns=%d",
        seed, seats[0].value, seats[1].value, outcome.winner, outcome.gold, outcome.turns,
    )
    return outcome


def _stall(outcome: GameOutcome, state: GameState, reason: str) -> GameOutcome:
    logger.warning("Seed %d stalled: %s", outcome.seed, reason)
    return outcome.finish(state, stall_reason=reason)
