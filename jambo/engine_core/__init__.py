"""
Engine Core - Deterministic Jambo game state management.

The engine is the runtime that:
1. Creates the initial GameState
2. Validates actions and generates legal moves
3. Applies actions via the reducer
4. Resolves card interactions step-by-step
"""

from .action import (
    Action,
    ActionResult,
    ActionType,
    Response,
    ResponseType,
    RuleViolation,
    ValidationResult,
    WareMode,
)
from .action_generator import legal_actions, validate_action
from .cards import (
    ALL_CARD_IDS,
    AnimalDesign,
    CardDef,
    CardType,
    PeopleDesign,
    UtilityDesign,
    WareSpec,
    WareType,
    design_of,
    get_card,
)
from .endgame import final_scores, winner
from .pending import PendingKind, PendingResolution, Step
from .reducer import Reducer, apply_action
from .setup import create_initial_state
from .state import CONSTANTS, GameConstants, GameState, Phase, PlayerState, UtilitySlot, total_wares

__all__ = [
    "Action",
    "ActionResult",
    "ActionType",
    "Response",
    "ResponseType",
    "RuleViolation",
    "ValidationResult",
    "WareMode",
    "legal_actions",
    "validate_action",
    "ALL_CARD_IDS",
    "AnimalDesign",
    "CardDef",
    "CardType",
    "PeopleDesign",
    "UtilityDesign",
    "WareSpec",
    "WareType",
    "design_of",
    "get_card",
    "final_scores",
    "winner",
    "PendingKind",
    "PendingResolution",
    "Step",
    "Reducer",
    "apply_action",
    "create_initial_state",
    "CONSTANTS",
    "GameConstants",
    "GameState",
    "Phase",
    "PlayerState",
    "UtilitySlot",
    "total_wares",
]
