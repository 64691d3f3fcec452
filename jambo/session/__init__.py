"""
Session Module - Bot-versus-bot games and benchmarks.

A session here is one seeded play-through between two difficulties:
- Created from a seed
- Driven entirely by choose_action
- Ends at GAME_OVER or as a recorded stall

Benchmarks aggregate many sessions into pydantic reports.
"""

from .game_loop import DEFAULT_MAX_GAME_MS, EXPERT_MAX_GAME_MS, GameOutcome, game_budget_ms, play_game
from .benchmark import (
    BENCHMARK_CONFIGS,
    DEFAULT_MATCHUPS,
    BenchmarkConfig,
    build_csv,
    parse_matchup,
    run_matchup,
    run_matchups,
    summarize,
    write_reports,
)
from .schemas import BenchmarkMode, MatchSummary, MatchupRunResult, SkewFlag

__all__ = [
    "GameOutcome",
    "play_game",
    "DEFAULT_MAX_GAME_MS",
    "EXPERT_MAX_GAME_MS",
    "game_budget_ms",
    "BENCHMARK_CONFIGS",
    "DEFAULT_MATCHUPS",
    "BenchmarkConfig",
    "build_csv",
    "parse_matchup",
    "run_matchup",
    "run_matchups",
    "summarize",
    "write_reports",
    "BenchmarkMode",
    "MatchSummary",
    "MatchupRunResult",
    "SkewFlag",
]
