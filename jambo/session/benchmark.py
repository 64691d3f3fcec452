"""
Benchmark - Seeded matchups between difficulty tiers.

Runs a list of (p0, p1) pairings for a fixed number of games each and
summarizes wins, ties, skew, average turns and gold, stalls, and
utility usage. Reports are written as JSON and CSV.

Seeds are deterministic: game i of matchup k uses
seed_base + k * 1000 + i.
"""

from __future__ import annotations
from dataclasses import dataclass
import csv
import io
import logging
from pathlib import Path
from typing import Sequence

from ..bots.difficulty import Difficulty
from ..engine_core.cards import UtilityDesign
from .game_loop import (
    DEFAULT_MAX_GAME_MS,
    DEFAULT_MAX_STEPS,
    EXPERT_MAX_GAME_MS,
    GameOutcome,
    game_budget_ms,
    play_game,
    utility_counter,
)
from .schemas import (
    BenchmarkMode,
    MatchSummary,
    MatchupRunResult,
    SeatUtilityStats,
    SkewFlag,
    UtilityStats,
)

logger = logging.getLogger(__name__)

SEED_STRIDE = 1000
HIGH_SKEW = 0.2
MODERATE_SKEW = 0.1

Matchup = tuple[Difficulty, Difficulty]

DEFAULT_MATCHUPS: list[Matchup] = [
    (Difficulty.EASY, Difficulty.EASY),
    (Difficulty.EASY, Difficulty.MEDIUM),
    (Difficulty.EASY, Difficulty.HARD),
    (Difficulty.MEDIUM, Difficulty.MEDIUM),
    (Difficulty.MEDIUM, Difficulty.HARD),
    (Difficulty.HARD, Difficulty.MEDIUM),
    (Difficulty.HARD, Difficulty.HARD),
    (Difficulty.HARD, Difficulty.EXPERT),
    (Difficulty.EXPERT, Difficulty.HARD),
    (Difficulty.EXPERT, Difficulty.EXPERT),
]


@dataclass(frozen=True)
class BenchmarkConfig:
    games: int
    seed_base: int = 23000
    max_steps: int = DEFAULT_MAX_STEPS
    max_game_ms: int = DEFAULT_MAX_GAME_MS
    expert_max_game_ms: int = EXPERT_MAX_GAME_MS


BENCHMARK_CONFIGS: dict[BenchmarkMode, BenchmarkConfig] = {
    BenchmarkMode.SHORT: BenchmarkConfig(games=20),
    BenchmarkMode.MEDIUM: BenchmarkConfig(games=100),
    BenchmarkMode.LONG: BenchmarkConfig(games=300),
}


def parse_matchup(value: str) -> Matchup:
    """Parse 'p0:p1'. Raises ValueError."""
    parts = value.split(":")
    if len(parts) != 2:
        raise ValueError(f"Matchup must look like 'hard:expert', got {value!r}")
    return Difficulty.parse(parts[0]), Difficulty.parse(parts[1])


def run_matchup(
    p0: Difficulty | str,
    p1: Difficulty | str,
    games: int,
    seed_base: int,
    index: int = 0,
    max_steps: int = DEFAULT_MAX_STEPS,
    max_game_ms: int = DEFAULT_MAX_GAME_MS,
    expert_max_game_ms: int = EXPERT_MAX_GAME_MS,
) -> list[GameOutcome]:
    """Play one pairing. Pairings with an Expert seat run under expert_max_game_ms."""
    p0, p1 = Difficulty.parse(p0), Difficulty.parse(p1)
    budget = game_budget_ms(p0, p1, max_game_ms, expert_max_game_ms)
    first_seed = seed_base + index * SEED_STRIDE
    return [
        play_game(first_seed + i, p0, p1, max_steps=max_steps, max_game_ms=budget)
        for i in range(games)
    ]


def _skew_flag(skew: float) -> SkewFlag:
    if skew >= HIGH_SKEW:
        return SkewFlag.HIGH
    if skew >= MODERATE_SKEW:
        return SkewFlag.MODERATE
    return SkewFlag.NONE


def summarize(outcomes: Sequence[GameOutcome], label: str | None = None) -> MatchSummary:
    """Aggregate outcomes of one matchup."""
    games = len(outcomes)
    if label is None:
        label = f"{outcomes[0].p0.value} vs {outcomes[0].p1.value}" if outcomes else "empty"
    if games == 0:
        return MatchSummary(label=label, games=0)

    p0_wins = sum(1 for o in outcomes if o.winner == 0)
    p1_wins = sum(1 for o in outcomes if o.winner == 1)
    stall_reasons: dict[str, int] = {}
    for outcome in outcomes:
        if outcome.stall_reason:
            stall_reasons[outcome.stall_reason] = stall_reasons.get(outcome.stall_reason, 0) + 1

    seats = [SeatUtilityStats(played=utility_counter(), activated=utility_counter()) for _ in range(2)]
    for outcome in outcomes:
        for seat in (0, 1):
            for design, count in outcome.utility_played[seat].items():
                seats[seat].played[design] += count
            for design, count in outcome.utility_activated[seat].items():
                seats[seat].activated[design] += count
    totals = UtilityStats(
        played={d: seats[0].played[d] + seats[1].played[d] for d in seats[0].played},
        activated={d: seats[0].activated[d] + seats[1].activated[d] for d in seats[0].activated},
        p0=seats[0],
        p1=seats[1],
    )

    gold_p0 = sum(o.gold[0] for o in outcomes)
    gold_p1 = sum(o.gold[1] for o in outcomes)
    skew = abs(p0_wins - p1_wins) / games
    return MatchSummary(
        label=label,
        games=games,
        p0_wins=p0_wins,
        p1_wins=p1_wins,
        ties=games - p0_wins - p1_wins,
        p0_win_rate=round(p0_wins / games, 4),
        p1_win_rate=round(p1_wins / games, 4),
        decisive_skew=round(skew, 4),
        skew_flag=_skew_flag(skew),
        avg_turns=round(sum(o.turns for o in outcomes) / games, 2),
        avg_gold_p0=round(gold_p0 / games, 2),
        avg_gold_p1=round(gold_p1 / games, 2),
        avg_gold_delta=round((gold_p0 - gold_p1) / games, 2),
        stalls=sum(1 for o in outcomes if o.stalled),
        stall_reasons=stall_reasons,
        utility_stats=totals,
    )


def run_matchups(
    games: int,
    seed_base: int,
    matchups: Sequence[Matchup] = DEFAULT_MATCHUPS,
    max_steps: int = DEFAULT_MAX_STEPS,
    max_game_ms: int = DEFAULT_MAX_GAME_MS,
    mode: BenchmarkMode | None = None,
    expert_max_game_ms: int = EXPERT_MAX_GAME_MS,
) -> MatchupRunResult:
    summaries = []
    for index, (p0, p1) in enumerate(matchups):
        outcomes = run_matchup(p0, p1, games, seed_base, index, max_steps, max_game_ms, expert_max_game_ms)
        summary = summarize(outcomes, label=f"{p0.value} vs {p1.value}")
        logger.info(
            "%s: %d-%d (%d ties), %d stalls",
            summary.label, summary.p0_wins, summary.p1_wins, summary.ties, summary.stalls,
        )
        summaries.append(summary)
    return MatchupRunResult(
        mode=mode,
        games_per_matchup=games,
        seed_base=seed_base,
        max_steps=max_steps,
        max_game_ms=max_game_ms,
        expert_max_game_ms=expert_max_game_ms,
        summaries=summaries,
    )


CSV_UTILITIES = [
    UtilityDesign.WELL,
    UtilityDesign.SUPPLIES,
    UtilityDesign.LEOPARD_STATUE,
    UtilityDesign.BOAT,
    UtilityDesign.WEAPONS,
    UtilityDesign.SCALE,
    UtilityDesign.DRUMS,
    UtilityDesign.KETTLE,
    UtilityDesign.THRONE,
    UtilityDesign.MASK_OF_TRANSFORMATION,
]


def build_csv(result: MatchupRunResult) -> str:
    """One row per matchup with per-game activation rates."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([
        "label", "games", "p0_wins", "p1_wins", "ties", "p0_win_rate", "p1_win_rate",
        "avg_turns", "avg_gold_delta", "stalls",
        *(f"{u.value}_act_per_game" for u in CSV_UTILITIES),
    ])
    for s in result.summaries:
        rates = [
            f"{s.utility_stats.activated.get(u.value, 0) / s.games:.2f}" if s.games else "0.00"
            for u in CSV_UTILITIES
        ]
        writer.writerow([
            s.label, s.games, s.p0_wins, s.p1_wins, s.ties, s.p0_win_rate, s.p1_win_rate,
            s.avg_turns, s.avg_gold_delta, s.stalls, *rates,
        ])
    return buffer.getvalue()


def write_reports(result: MatchupRunResult, out_dir: Path, name: str) -> tuple[Path, Path]:
    """Write <name>.json and <name>.csv under out_dir, creating it if needed."""
    out_dir.mkdir(parents=True, exist_ok=True)
    json_path = out_dir / f"{name}.json"
    csv_path = out_dir / f"{name}.csv"
    json_path.write_text(result.model_dump_json(indent=2) + "\n", encoding="utf-8")
    csv_path.write_text(build_csv(result), encoding="utf-8")
    return json_path, csv_path
