"""
Game State - Immutable snapshot of a Jambo game.

Design principles:
- Frozen dataclasses: a state is never mutated in place
- Every transition produces a new state via _copy_with()
- Collections are tuples; ware_supply is copied on write
- Fields only the AI reads (rng_seed, log length) live here too
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

from .cards import WARE_TYPES, WareType

if TYPE_CHECKING:
    from .pending import PendingResolution


@dataclass(frozen=True)
class GameConstants:
    """Fixed rule constants."""
    max_actions: int = 5
    max_utilities: int = 3
    market_slots: int = 6
    stand_expansion_slots: int = 3
    endgame_gold_threshold: int = 60
    starting_gold: int = 20
    action_bonus_threshold: int = 2  # 2+ actions left at end of turn = +1g
    action_bonus_gold: int = 1
    first_stand_cost: int = 6
    additional_stand_cost: int = 3
    initial_hand_size: int = 5
    initial_ware_supply: int = 6
    total_cards: int = 110


CONSTANTS = GameConstants()

TOTAL_WARES = CONSTANTS.initial_ware_supply * len(WARE_TYPES)


class Phase(str, Enum):
    DRAW = "DRAW"
    PLAY = "PLAY"
    GAME_OVER = "GAME_OVER"


@dataclass(frozen=True)
class UtilitySlot:
    """A utility placed in front of a player."""
    card_id: str
    design_id: str
    used_this_turn: bool = False


@dataclass(frozen=True)
class PlayerState:
    gold: int = CONSTANTS.starting_gold
    hand: tuple[str, ...] = ()
    market: tuple[WareType | None, ...] = (None,) * CONSTANTS.market_slots
    utilities: tuple[UtilitySlot, ...] = ()
    small_market_stands: int = 0

    @property
    def filled_slots(self) -> int:
        return sum(1 for slot in self.market if slot is not None)

    @property
    def empty_slots(self) -> int:
        return len(self.market) - self.filled_slots

    def market_counts(self) -> dict[WareType, int]:
        """Count of each ware type currently in the market."""
        counts = {w: 0 for w in WARE_TYPES}
        for slot in self.market:
            if slot is not None:
                counts[slot] += 1
        return counts

    def has_utility(self, design_id: str) -> bool:
        return any(u.design_id == design_id for u in self.utilities)

    def _copy_with(self, **kwargs) -> PlayerState:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class TurnModifiers:
    buy_discount: int = 0
    sell_bonus: int = 0

    @property
    def active(self) -> bool:
        return self.buy_discount > 0 or self.sell_bonus > 0


@dataclass(frozen=True)
class EndgameState:
    """Set once a player reaches the gold threshold."""
    trigger_player: int
    final_turn_player: int
    is_final_turn: bool = False


@dataclass(frozen=True)
class GuardReaction:
    """An animal attack the target may cancel with a Guard."""
    animal_card: str
    target_player: int


@dataclass(frozen=True)
class WareCardReaction:
    """A played ware card the target may take with a Rain Maker."""
    ware_card_id: str
    target_player: int


@dataclass(frozen=True)
class CrocodileCleanup:
    """Utility to discard from the opponent once a Crocodile resolution ends."""
    opponent_player: int
    utility_card_id: str


@dataclass(frozen=True)
class LogEntry:
    turn: int
    player: int
    action: str
    details: str = ""


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state the reducer operates on.
    All state changes go through apply_action().
    """
    players: tuple[PlayerState, PlayerState] = field(
        default_factory=lambda: (PlayerState(), PlayerState())
    )
    current_player: int = 0
    turn: int = 1
    phase: Phase = Phase.DRAW
    actions_left: int = CONSTANTS.max_actions

    # Shared zones
    deck: tuple[str, ...] = ()
    discard_pile: tuple[str, ...] = ()  # index 0 is the top

    # Draw phase bookkeeping
    drawn_card: str | None = None
    draws_this_phase: int = 0
    kept_card_this_draw_phase: bool = False

    # Interactions
    pending_resolution: PendingResolution | None = None
    pending_guard_reaction: GuardReaction | None = None
    pending_ware_card_reaction: WareCardReaction | None = None
    crocodile_cleanup: CrocodileCleanup | None = None

    turn_modifiers: TurnModifiers = field(default_factory=TurnModifiers)
    ware_supply: dict[WareType, int] = field(
        default_factory=lambda: {w: CONSTANTS.initial_ware_supply for w in WARE_TYPES}
    )
    endgame: EndgameState | None = None

    # Determinism
    rng_seed: int = 0
    rng_state: int = 0
    reshuffle_count: int = 0

    # History
    log: tuple[LogEntry, ...] = ()

    @property
    def opponent(self) -> int:
        return 1 - self.current_player

    @property
    def active_player(self) -> PlayerState:
        return self.players[self.current_player]

    @property
    def has_pending(self) -> bool:
        return (
            self.pending_resolution is not None
            or self.pending_guard_reaction is not None
            or self.pending_ware_card_reaction is not None
        )

    def with_player(self, index: int, player: PlayerState) -> GameState:
        """Return new state with one player replaced."""
        players = list(self.players)
        players[index] = player
        return self._copy_with(players=tuple(players))

    def update_player(self, index: int, **kwargs) -> GameState:
        return self.with_player(index, self.players[index]._copy_with(**kwargs))

    def with_log(self, action: str, details: str = "", player: int | None = None) -> GameState:
        entry = LogEntry(
            turn=self.turn,
            player=self.current_player if player is None else player,
            action=action,
            details=details,
        )
        return self._copy_with(log=self.log + (entry,))

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


def opponent_of(player: int) -> int:
    return 1 - player


def total_wares(state: GameState) -> int:
    """Wares in supply, markets and any auction or draft pool. Always TOTAL_WARES."""
    from .pending import Auction, Draft

    count = sum(state.ware_supply.values())
    count += sum(p.filled_slots for p in state.players)
    pending = state.pending_resolution
    if isinstance(pending, Auction):
        count += len(pending.wares)
    elif isinstance(pending, Draft):
        count += len(pending.available_wares)
    return count
