"""
Telemetry - Per-decision feature vector for the responding player.

Used for:
- Attaching a compact board summary to every BotDecision
- Offline analysis of benchmark games

All counts are from the responder's point of view; *_diff fields are
responder minus opponent.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Any

from ..engine_core.state import GameState, opponent_of
from .candidates import pending_kind_of


@dataclass(frozen=True)
class TurnFeatures:
    turn: int
    responder: int
    phase: str
    actions_left: int
    pending_type: str | None
    has_guard_window: bool
    has_rain_maker_window: bool
    my_gold: int
    opp_gold: int
    gold_diff: int
    my_hand_count: int
    opp_hand_count: int
    hand_diff: int
    my_market_filled: int
    opp_market_filled: int
    market_diff: int
    my_utility_count: int
    opp_utility_count: int
    utility_diff: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def extract_features(state: GameState, responder: int) -> TurnFeatures:
    """Summarize `state` for the player about to act."""
    me = state.players[responder]
    opp = state.players[opponent_of(responder)]
    pending = state.pending_resolution
    return TurnFeatures(
        turn=state.turn,
        responder=responder,
        phase=state.phase.value,
        actions_left=state.actions_left,
        pending_type=pending_kind_of(pending) if pending is not None else None,
        has_guard_window=state.pending_guard_reaction is not None,
        has_rain_maker_window=state.pending_ware_card_reaction is not None,
        my_gold=me.gold,
        opp_gold=opp.gold,
        gold_diff=me.gold - opp.gold,
        my_hand_count=len(me.hand),
        opp_hand_count=len(opp.hand),
        hand_diff=len(me.hand) - len(opp.hand),
        my_market_filled=me.filled_slots,
        opp_market_filled=opp.filled_slots,
        market_diff=me.filled_slots - opp.filled_slots,
        my_utility_count=len(me.utilities),
        opp_utility_count=len(opp.utilities),
        utility_diff=len(me.utilities) - len(opp.utilities),
    )
