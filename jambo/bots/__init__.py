"""
Bots module - Tiered AI opponents for Jambo.

Provides:
- choose_action: Single entry point for every difficulty
- BotPolicy: Interface for bot decision-making
- Random / Easy / Medium / Hard / Expert policies
- BoardEvaluator: Scores game states
- TierSettings: Per-difficulty budgets and salts
"""

from .difficulty import Difficulty, TierSettings, TIERS, get_tier
from .evaluator import BoardEvaluator, EvaluationWeights, evaluate_board
from .policy import BotPolicy, BotDecision, RandomPolicy, EasyPolicy
from .medium import MediumPolicy
from .hard import HardPolicy
from .expert import ExpertPolicy
from .candidates import fallback_responses, interaction_candidates, responder, sample_response
from .rollout import rollout_value, simulate
from .telemetry import TurnFeatures, extract_features
from .jambo_bot import JamboBot, POLICIES, choose_action, get_policy

__all__ = [
    "Difficulty",
    "TierSettings",
    "TIERS",
    "get_tier",
    "BoardEvaluator",
    "EvaluationWeights",
    "evaluate_board",
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "EasyPolicy",
    "MediumPolicy",
    "HardPolicy",
    "ExpertPolicy",
    "fallback_responses",
    "interaction_candidates",
    "responder",
    "sample_response",
    "rollout_value",
    "simulate",
    "TurnFeatures",
    "extract_features",
    "JamboBot",
    "POLICIES",
    "choose_action",
    "get_policy",
]
