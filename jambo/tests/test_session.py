"""
Tests for the bot-versus-bot game loop, benchmarks and the CLI.
"""

import itertools
import json

import pytest

from ..bots.difficulty import Difficulty
from ..cli import main
from ..session import (
    BENCHMARK_CONFIGS,
    DEFAULT_MATCHUPS,
    DEFAULT_MAX_GAME_MS,
    EXPERT_MAX_GAME_MS,
    BenchmarkMode,
    GameOutcome,
    MatchupRunResult,
    SkewFlag,
    build_csv,
    game_budget_ms,
    parse_matchup,
    play_game,
    run_matchup,
    run_matchups,
    summarize,
    write_reports,
)

SLOW_GAMES = 20


def _outcome(seed, winner, gold=(60, 50), turns=30, stall_reason=None):
    outcome = GameOutcome(seed=seed, p0=Difficulty.EASY, p1=Difficulty.HARD)
    outcome.winner = winner
    outcome.gold = gold
    outcome.turns = turns
    if stall_reason is not None:
        outcome.stalled = True
        outcome.stall_reason = stall_reason
    return outcome


class TestSummaries:
    """Tests for aggregating outcomes."""

    def test_counts_and_rates(self):
        outcomes = [_outcome(i, 0) for i in range(6)] + [_outcome(i, 1, gold=(40, 62)) for i in range(6, 9)]
        outcomes.append(_outcome(9, None, gold=(61, 61)))
        summary = summarize(outcomes)
        assert summary.label == "easy vs hard"
        assert (summary.p0_wins, summary.p1_wins, summary.ties) == (6, 3, 1)
        assert summary.p0_win_rate == 0.6
        assert summary.decisive_skew == 0.3
        assert summary.skew_flag == SkewFlag.HIGH
        assert summary.avg_turns == 30.0

    @pytest.mark.parametrize("p0_wins,p1_wins,flag", [
        (5, 5, SkewFlag.NONE),
        (5, 4, SkewFlag.MODERATE),
        (7, 3, SkewFlag.HIGH),
    ])
    def test_skew_flags(self, p0_wins, p1_wins, flag):
        outcomes = [_outcome(i, 0) for i in range(p0_wins)]
        outcomes += [_outcome(i, 1) for i in range(p1_wins)]
        outcomes += [_outcome(i, None) for i in range(10 - p0_wins - p1_wins)]
        assert summarize(outcomes).skew_flag == flag

    def test_stalls_are_grouped_by_reason(self):
        outcomes = [
            _outcome(1, None, stall_reason="max-steps>2500"),
            _outcome(2, None, stall_reason="max-steps>2500"),
            _outcome(3, 0),
        ]
        summary = summarize(outcomes)
        assert summary.stalls == 2
        assert summary.stall_reasons == {"max-steps>2500": 2}

    def test_utility_usage_by_seat(self):
        first = _outcome(1, 0)
        first.utility_activated[0]["well"] += 2
        first.utility_played[1]["boat"] += 1
        second = _outcome(2, 1)
        second.utility_activated[1]["well"] += 1
        stats = summarize([first, second]).utility_stats
        assert stats.activated["well"] == 3
        assert stats.p0.activated["well"] == 2
        assert stats.p1.played["boat"] == 1

    def test_empty(self):
        summary = summarize([], label="nobody")
        assert summary.games == 0
        assert summary.skew_flag == SkewFlag.NONE


class TestMatchups:
    """Tests for matchup parsing and report output."""

    def test_parse_matchup(self):
        assert parse_matchup("hard:Expert") == (Difficulty.HARD, Difficulty.EXPERT)

    @pytest.mark.parametrize("value", ["hard", "hard:expert:easy", "hard:genius"])
    def test_parse_matchup_rejects(self, value):
        with pytest.raises(ValueError):
            parse_matchup(value)

    def test_default_pairings(self):
        assert len(DEFAULT_MATCHUPS) == 10
        assert (Difficulty.EXPERT, Difficulty.EXPERT) in DEFAULT_MATCHUPS

    def test_csv_layout(self):
        result = MatchupRunResult(
            games_per_matchup=2,
            seed_base=1,
            max_steps=10,
            max_game_ms=10,
            summaries=[summarize([_outcome(1, 0), _outcome(2, 1)])],
        )
        lines = build_csv(result).splitlines()
        header = lines[0].split(",")
        assert header[0] == "label"
        assert "well_act_per_game" in header
        assert "mask_of_transformation_act_per_game" in header
        assert lines[1].startswith("easy vs hard,2,1,1,0,")

    def test_write_reports(self, tmp_path):
        result = run_matchups(1, 23000, [(Difficulty.EASY, Difficulty.EASY)], mode=BenchmarkMode.SHORT)
        json_path, csv_path = write_reports(result, tmp_path / "reports", "short")
        data = json.loads(json_path.read_text(encoding="utf-8"))
        assert data["mode"] == "short"
        assert data["max_game_ms"] == DEFAULT_MAX_GAME_MS
        assert data["expert_max_game_ms"] == EXPERT_MAX_GAME_MS
        assert data["summaries"][0]["label"] == "easy vs easy"
        assert data["summaries"][0]["games"] == 1
        assert csv_path.read_text(encoding="utf-8").count("\n") == 2


class TestGameLoop:
    """Tests for play_game."""

    def test_easy_mirror_finishes(self):
        outcome = play_game(23000, "easy", "easy", max_steps=2500, max_game_ms=8000)
        assert not outcome.stalled, outcome.stall_reason
        assert outcome.turns >= 0
        assert min(outcome.gold) >= 0
        if outcome.gold[0] != outcome.gold[1]:
            assert outcome.winner == (0 if outcome.gold[0] > outcome.gold[1] else 1)
        else:
            assert outcome.winner is None

    def test_same_seed_same_game(self):
        first = play_game(23001, "easy", "medium")
        second = play_game(23001, "easy", "medium")
        assert (first.winner, first.gold, first.turns, first.steps) == (
            second.winner, second.gold, second.turns, second.steps
        )

    def test_step_limit_is_a_stall(self):
        outcome = play_game(23000, "medium", "medium", max_steps=5)
        assert outcome.stalled
        assert outcome.stall_reason == "max-steps>5"
        assert outcome.winner is None
        assert outcome.steps == 5

    def test_observer_sees_every_step(self):
        seen = []
        outcome = play_game(23002, "random", "easy", max_steps=40, observer=lambda *args: seen.append(args))
        assert len(seen) == outcome.steps
        assert [step for step, *_ in seen] == list(range(outcome.steps))
        assert all(seat in (0, 1) for _, seat, _, _ in seen)

    def test_unknown_difficulty(self):
        with pytest.raises(ValueError):
            play_game(1, "easy", "grandmaster")

    @pytest.mark.parametrize("p0,p1,budget", [
        (Difficulty.EASY, Difficulty.HARD, DEFAULT_MAX_GAME_MS),
        (Difficulty.HARD, Difficulty.EXPERT, EXPERT_MAX_GAME_MS),
        (Difficulty.EXPERT, Difficulty.RANDOM, EXPERT_MAX_GAME_MS),
    ])
    def test_pairing_budget(self, p0, p1, budget):
        assert game_budget_ms(p0, p1) == budget

    def test_pairing_budget_overrides(self):
        assert game_budget_ms(Difficulty.EASY, Difficulty.MEDIUM, 100, 500) == 100
        assert game_budget_ms(Difficulty.EXPERT, Difficulty.EXPERT, 100, 500) == 500

    def test_configs_give_expert_more_time(self):
        for config in BENCHMARK_CONFIGS.values():
            assert config.max_game_ms == DEFAULT_MAX_GAME_MS
            assert config.expert_max_game_ms > config.max_game_ms

    @pytest.mark.slow
    @pytest.mark.parametrize("p0,p1", list(itertools.product(Difficulty, Difficulty)))
    def test_no_stalls(self, p0, p1):
        outcomes = run_matchup(p0, p1, SLOW_GAMES, 23000)
        stalls = [o.stall_reason for o in outcomes if o.stalled]
        assert stalls == []


class TestCli:
    """Tests for the command-line entry point."""

    def test_play(self, capsys):
        main(["play", "--seed", "23000", "--p0", "easy", "--p1", "easy"])
        out = capsys.readouterr().out
        assert "Seed 23000: easy vs easy" in out
        assert "Winner: P" in out or "Tie" in out

    def test_play_verbose(self, capsys):
        main(["play", "--seed", "23000", "--p0", "easy", "--p1", "easy", "--verbose"])
        out = capsys.readouterr().out
        assert "[   0] turn" in out

    def test_benchmark(self, capsys, tmp_path):
        main([
            "benchmark", "--games", "1", "--matchup", "easy:easy",
            "--seed-base", "23000", "--out-dir", str(tmp_path),
        ])
        out = capsys.readouterr().out
        assert "easy vs easy" in out
        assert (tmp_path / "short.json").exists()
        assert (tmp_path / "short.csv").exists()

    def test_benchmark_bad_matchup(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["benchmark", "--matchup", "easy-hard"])
        assert exc.value.code == 2
        assert "Error:" in capsys.readouterr().out

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])
