"""
Jambo CLI - Command-line interface for the bot engine.

Usage:
    jambo benchmark [--mode short|medium|long] [--games N] [--matchup p0:p1 ...]
                    [--seed-base N] [--out-dir DIR]
    jambo play --seed N --p0 DIFFICULTY --p1 DIFFICULTY [--verbose]
"""

import argparse
import logging
import sys
from pathlib import Path

from .bots.difficulty import Difficulty

DIFFICULTIES = [d.value for d in Difficulty]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Jambo - Tiered AI opponents",
        prog="jambo",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Benchmark command
    bench_parser = subparsers.add_parser("benchmark", help="Run seeded matchups between tiers")
    bench_parser.add_argument("--mode", default="short", choices=["short", "medium", "long"])
    bench_parser.add_argument("--games", type=int, help="Games per matchup (overrides the mode)")
    bench_parser.add_argument(
        "--matchup",
        action="append",
        metavar="P0:P1",
        help="Pairing such as hard:expert; repeatable (default: the standard ten)",
    )
    bench_parser.add_argument("--seed-base", type=int, help="First seed (overrides the mode)")
    bench_parser.add_argument("--out-dir", default="reports/ai-benchmark", help="Report directory")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play one seeded bot-versus-bot game")
    play_parser.add_argument("--seed", type=int, default=0)
    play_parser.add_argument("--p0", default="medium", choices=DIFFICULTIES)
    play_parser.add_argument("--p1", default="hard", choices=DIFFICULTIES)
    play_parser.add_argument("--verbose", "-v", action="store_true", help="Print every action")

    return parser


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "benchmark":
        cmd_benchmark(args)
    elif args.command == "play":
        cmd_play(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_benchmark(args):
    """Run matchups and write JSON/CSV reports."""
    from .session import BENCHMARK_CONFIGS, DEFAULT_MATCHUPS, BenchmarkMode, parse_matchup, run_matchups, write_reports

    mode = BenchmarkMode(args.mode)
    config = BENCHMARK_CONFIGS[mode]
    try:
        matchups = [parse_matchup(m) for m in args.matchup] if args.matchup else DEFAULT_MATCHUPS
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)

    games = args.games if args.games is not None else config.games
    seed_base = args.seed_base if args.seed_base is not None else config.seed_base

    result = run_matchups(
        games,
        seed_base,
        matchups,
        max_steps=config.max_steps,
        max_game_ms=config.max_game_ms,
        mode=mode,
        expert_max_game_ms=config.expert_max_game_ms,
    )
    json_path, csv_path = write_reports(result, Path(args.out_dir), mode.value)

    print(f"Benchmark mode: {mode.value}")
    for summary in result.summaries:
        print(
            f"  {summary.label:<20} {summary.p0_wins:>4}-{summary.p1_wins:<4} "
            f"ties={summary.ties} stalls={summary.stalls} skew={summary.skew_flag.value}"
        )
    print(f"JSON: {json_path}")
    print(f"CSV: {csv_path}")


def cmd_play(args):
    """Play one game and print the result."""
    from .session import play_game

    def show(step, seat, action, state):
        print(f"[{step:>4}] turn {state.turn:>3} P{seat}: {action.describe()}")

    outcome = play_game(args.seed, args.p0, args.p1, observer=show if args.verbose else None)

    print(f"Seed {outcome.seed}: {outcome.p0.value} vs {outcome.p1.value}")
    print(f"Turns: {outcome.turns}  Gold: {outcome.gold[0]} - {outcome.gold[1]}")
    if outcome.stalled:
        print(f"Stalled: {outcome.stall_reason}")
        sys.exit(1)
    print("Tie" if outcome.winner is None else f"Winner: P{outcome.winner}")


if __name__ == "__main__":
    main()
