"""
Pydantic Schemas for benchmark reports.

These models define the JSON contract of a benchmark run: one
MatchSummary per matchup, wrapped in a MatchupRunResult.

Skew flags:
- none: decisive skew below 0.1
- moderate: at least 0.1
- high: at least 0.2
"""

from enum import Enum
from pydantic import BaseModel, Field


class SkewFlag(str, Enum):
    NONE = "none"
    MODERATE = "moderate"
    HIGH = "high"


class BenchmarkMode(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class SeatUtilityStats(BaseModel):
    """Utilities one seat placed and activated, keyed by design."""
    played: dict[str, int] = Field(default_factory=dict)
    activated: dict[str, int] = Field(default_factory=dict)


class UtilityStats(BaseModel):
    played: dict[str, int] = Field(default_factory=dict)
    activated: dict[str, int] = Field(default_factory=dict)
    p0: SeatUtilityStats = Field(default_factory=SeatUtilityStats)
    p1: SeatUtilityStats = Field(default_factory=SeatUtilityStats)


class MatchSummary(BaseModel):
    """Aggregate result of one matchup."""
    label: str = Field(..., description="'<p0> vs <p1>'")
    games: int = Field(..., ge=0)
    p0_wins: int = 0
    p1_wins: int = 0
    ties: int = 0
    p0_win_rate: float = Field(0.0, description="Rounded to 4 places")
    p1_win_rate: float = 0.0
    decisive_skew: float = Field(0.0, description="|p0 wins - p1 wins| / games")
    skew_flag: SkewFlag = SkewFlag.NONE
    avg_turns: float = 0.0
    avg_gold_p0: float = 0.0
    avg_gold_p1: float = 0.0
    avg_gold_delta: float = 0.0
    stalls: int = 0
    stall_reasons: dict[str, int] = Field(default_factory=dict)
    utility_stats: UtilityStats = Field(default_factory=UtilityStats)


class MatchupRunResult(BaseModel):
    """A full benchmark run."""
    mode: BenchmarkMode | None = None
    games_per_matchup: int
    seed_base: int
    max_steps: int
    max_game_ms: int
    expert_max_game_ms: int | None = None
    summaries: list[MatchSummary] = Field(default_factory=list)
