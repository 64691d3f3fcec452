"""
Action System - Actions, interaction responses, and results.

Actions represent:
1. Draw phase moves (draw, keep, discard, skip)
2. Play phase moves (play card, activate utility, draw action, end turn)
3. Replies to interactions (resolve interaction, guard / ware-card reactions)

All state changes flow through actions. Actions and responses are
frozen and hashable so they can be compared and deduplicated.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .cards import WareType


class RuleViolation(Exception):
    """Raised inside handlers when an action breaks a rule."""

    def __init__(self, message: str, error_code: str = "RULE_VIOLATION"):
        super().__init__(message)
        self.error_code = error_code


class ActionType(str, Enum):
    """Types of moves in the game."""
    # Draw phase
    DRAW_CARD = "DRAW_CARD"
    KEEP_CARD = "KEEP_CARD"
    DISCARD_DRAWN = "DISCARD_DRAWN"
    SKIP_DRAW = "SKIP_DRAW"

    # Play phase
    PLAY_CARD = "PLAY_CARD"
    ACTIVATE_UTILITY = "ACTIVATE_UTILITY"
    DRAW_ACTION = "DRAW_ACTION"
    END_TURN = "END_TURN"

    # Interactions
    RESOLVE_INTERACTION = "RESOLVE_INTERACTION"
    GUARD_REACTION = "GUARD_REACTION"
    WARE_CARD_REACTION = "WARE_CARD_REACTION"


class WareMode(str, Enum):
    BUY = "buy"
    SELL = "sell"


class ResponseType(str, Enum):
    SELECT_WARE_TYPE = "SELECT_WARE_TYPE"
    SELECT_WARE = "SELECT_WARE"
    SELECT_WARES = "SELECT_WARES"
    SELECT_CARD = "SELECT_CARD"
    SELECT_CARDS = "SELECT_CARDS"
    SELECT_UTILITY = "SELECT_UTILITY"
    RETURN_WARE = "RETURN_WARE"
    SELL_WARES = "SELL_WARES"
    AUCTION_BID = "AUCTION_BID"
    AUCTION_PASS = "AUCTION_PASS"
    BINARY_CHOICE = "BINARY_CHOICE"
    OPPONENT_CHOICE = "OPPONENT_CHOICE"
    DECK_PEEK_PICK = "DECK_PEEK_PICK"
    DISCARD_PICK = "DISCARD_PICK"
    OPPONENT_DISCARD_SELECTION = "OPPONENT_DISCARD_SELECTION"


@dataclass(frozen=True)
class Response:
    """
    A reply to a pending resolution.

    Only the fields relevant to response_type are set. Use the
    factory classmethods rather than the constructor.
    """
    response_type: ResponseType
    ware_type: WareType | None = None
    card_id: str | None = None
    card_ids: tuple[str, ...] = ()
    index: int | None = None
    indices: tuple[int, ...] = ()
    amount: int | None = None
    choice: int | None = None

    @classmethod
    def ware_type_pick(cls, ware_type: WareType) -> Response:
        return cls(ResponseType.SELECT_WARE_TYPE, ware_type=ware_type)

    @classmethod
    def ware_pick(cls, index: int) -> Response:
        return cls(ResponseType.SELECT_WARE, index=index)

    @classmethod
    def wares_pick(cls, indices: list[int] | tuple[int, ...]) -> Response:
        return cls(ResponseType.SELECT_WARES, indices=tuple(indices))

    @classmethod
    def card_pick(cls, card_id: str) -> Response:
        return cls(ResponseType.SELECT_CARD, card_id=card_id)

    @classmethod
    def cards_pick(cls, card_ids: list[str] | tuple[str, ...]) -> Response:
        return cls(ResponseType.SELECT_CARDS, card_ids=tuple(card_ids))

    @classmethod
    def utility_pick(cls, index: int) -> Response:
        return cls(ResponseType.SELECT_UTILITY, index=index)

    @classmethod
    def return_ware(cls, index: int) -> Response:
        return cls(ResponseType.RETURN_WARE, index=index)

    @classmethod
    def sell_wares(cls, indices: list[int] | tuple[int, ...]) -> Response:
        return cls(ResponseType.SELL_WARES, indices=tuple(indices))

    @classmethod
    def auction_bid(cls, amount: int) -> Response:
        return cls(ResponseType.AUCTION_BID, amount=amount)

    @classmethod
    def auction_pass(cls) -> Response:
        return cls(ResponseType.AUCTION_PASS)

    @classmethod
    def binary_choice(cls, choice: int) -> Response:
        return cls(ResponseType.BINARY_CHOICE, choice=choice)

    @classmethod
    def opponent_choice(cls, choice: int) -> Response:
        return cls(ResponseType.OPPONENT_CHOICE, choice=choice)

    @classmethod
    def deck_peek_pick(cls, index: int) -> Response:
        return cls(ResponseType.DECK_PEEK_PICK, index=index)

    @classmethod
    def discard_pick(cls, card_id: str) -> Response:
        return cls(ResponseType.DISCARD_PICK, card_id=card_id)

    @classmethod
    def discard_selection(cls, indices: list[int] | tuple[int, ...]) -> Response:
        return cls(ResponseType.OPPONENT_DISCARD_SELECTION, indices=tuple(indices))


@dataclass(frozen=True)
class Action:
    """
    A complete move to be applied to the game state.

    Actions are:
    - Validated before application
    - Applied atomically by the reducer
    - Logged on success
    """
    action_type: ActionType
    card_id: str | None = None
    ware_mode: WareMode | None = None
    utility_index: int | None = None
    response: Response | None = None
    play: bool | None = None

    @classmethod
    def draw_card(cls) -> Action:
        return cls(ActionType.DRAW_CARD)

    @classmethod
    def keep_card(cls) -> Action:
        return cls(ActionType.KEEP_CARD)

    @classmethod
    def discard_drawn(cls) -> Action:
        return cls(ActionType.DISCARD_DRAWN)

    @classmethod
    def skip_draw(cls) -> Action:
        return cls(ActionType.SKIP_DRAW)

    @classmethod
    def play_card(cls, card_id: str, ware_mode: WareMode | None = None) -> Action:
        """Factory for playing a card from hand. Ware cards need a ware_mode."""
        return cls(ActionType.PLAY_CARD, card_id=card_id, ware_mode=ware_mode)

    @classmethod
    def activate_utility(cls, utility_index: int) -> Action:
        return cls(ActionType.ACTIVATE_UTILITY, utility_index=utility_index)

    @classmethod
    def draw_action(cls) -> Action:
        return cls(ActionType.DRAW_ACTION)

    @classmethod
    def end_turn(cls) -> Action:
        return cls(ActionType.END_TURN)

    @classmethod
    def resolve(cls, response: Response) -> Action:
        """Factory for a reply to the pending resolution."""
        return cls(ActionType.RESOLVE_INTERACTION, response=response)

    @classmethod
    def guard_reaction(cls, play: bool) -> Action:
        return cls(ActionType.GUARD_REACTION, play=play)

    @classmethod
    def ware_card_reaction(cls, play: bool) -> Action:
        return cls(ActionType.WARE_CARD_REACTION, play=play)

    @property
    def is_ware_play(self) -> bool:
        return self.action_type == ActionType.PLAY_CARD and self.ware_mode is not None

    def describe(self) -> str:
        """Short human-readable form for logs and reports."""
        parts = [self.action_type.value]
        if self.card_id:
            parts.append(self.card_id)
        if self.ware_mode:
            parts.append(self.ware_mode.value)
        if self.utility_index is not None:
            parts.append(f"#{self.utility_index}")
        if self.response is not None:
            parts.append(self.response.response_type.value)
        if self.play is not None:
            parts.append("play" if self.play else "decline")
        return " ".join(parts)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(True)

    @classmethod
    def fail(cls, reason: str) -> ValidationResult:
        return cls(False, reason)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Error message and code (if failed)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(cls, state: Any) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state)
