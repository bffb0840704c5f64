"""Tests for snake_agent.benchmark module."""

from __future__ import annotations

import json

import pytest

from snake_agent.benchmark import (
    BenchmarkConfig,
    BenchmarkRunner,
    BenchmarkStats,
    GameResult,
    main,
    prime_seeds,
    run_single_game,
)


def _quick_config(**overrides) -> BenchmarkConfig:
    settings = {"iterations": 2, "width": 6, "height": 6, "max_turns": 30}
    settings.update(overrides)
    return BenchmarkConfig(**settings)


def test_prime_seeds() -> None:
    assert prime_seeds(3) == [101, 103, 107]
    assert prime_seeds(2, start=10) == [11, 13]


class TestBenchmarkConfig:
    def test_tier_names_are_normalised(self) -> None:
        config = BenchmarkConfig(challenger="expert", baseline="EASY")
        assert config.challenger == "Expert"
        assert config.baseline == "Easy"

    @pytest.mark.parametrize(
        "kwargs", [{"iterations": 0}, {"workers": 0}, {"challenger": "Legendary"}]
    )
    def test_invalid_settings_raise(self, kwargs) -> None:
        with pytest.raises(ValueError):
            BenchmarkConfig(**kwargs)


class TestBenchmarkStats:
    def test_add_counts_outcomes(self) -> None:
        stats = BenchmarkStats()
        stats.add(GameResult(0, "challenger", turns=10, challenger_length=5, baseline_length=3,
                             death_reason_baseline="out-of-bounds"))
        stats.add(GameResult(1, "draw", turns=20, challenger_length=4, baseline_length=4))
        stats.add(GameResult(2, None, error="arena must be at least 3x3"))

        assert stats.total_games == 3
        assert stats.valid_games == 2
        assert stats.errors == 1
        assert stats.challenger_wins == 1
        assert stats.draws == 1
        assert stats.challenger_win_rate == 50.0
        assert stats.avg_turns == 15.0
        assert stats.avg_challenger_length == 4.5
        assert dict(stats.baseline_death_reasons) == {"out-of-bounds": 1}

    def test_latency_percentiles(self) -> None:
        stats = BenchmarkStats()
        for i, ms in enumerate([1.0, 2.0, 3.0]):
            stats.add(GameResult(i, "draw", challenger_decision_ms=ms))
        latency = stats.latency_percentiles("challenger")
        assert latency["p50"] == pytest.approx(2.0)
        assert latency["max"] == pytest.approx(3.0)

    def test_latency_without_games_is_zero(self) -> None:
        assert BenchmarkStats().latency_percentiles("baseline") == {"p50": 0.0, "p95": 0.0, "max": 0.0}


class TestRunSingleGame:
    def test_plays_a_game(self) -> None:
        result = run_single_game(0, 101, _quick_config())
        assert result.error == ""
        assert result.winner in ("challenger", "baseline", "draw")
        assert 1 <= result.turns <= 30

    def test_invalid_board_is_reported_as_error(self) -> None:
        result = run_single_game(0, 101, _quick_config(width=2))
        assert result.winner is None
        assert "3x3" in result.error


class TestBenchmarkRunner:
    def test_run_and_report(self, capsys) -> None:
        runner = BenchmarkRunner(_quick_config())
        stats = runner.run()
        assert stats.total_games == 2
        assert [r.game_num for r in stats.game_results] == [0, 1]

        report = runner.generate_report()
        assert "BENCHMARK REPORT" in report
        assert "Hard (challenger)" in report
        assert "DIFFICULTY BENCHMARK" in capsys.readouterr().out

    def test_save_results_without_output_dir(self) -> None:
        assert BenchmarkRunner(_quick_config()).save_results() is None

    def test_save_results_writes_files(self, tmp_path) -> None:
        runner = BenchmarkRunner(_quick_config(output_dir=tmp_path))
        runner.run()
        output_dir = runner.save_results()

        summary = json.loads((output_dir / "summary.json").read_text())
        assert summary["config"]["iterations"] == 2
        assert summary["results"]["total_games"] == 2
        assert (output_dir / "report.txt").read_text().strip().startswith("=" * 70)

    def test_significance_section(self) -> None:
        runner = BenchmarkRunner(_quick_config())
        for i in range(40):
            runner.stats.add(GameResult(i, "challenger", turns=10))
        report = runner.generate_report()
        assert "STATISTICAL ANALYSIS" in report
        assert "SIGNIFICANTLY BETTER" in report


def test_main_runs_and_saves(tmp_path, capsys) -> None:
    main(["-n", "1", "--width", "6", "--height", "6", "--max-turns", "20",
          "--challenger", "Impossible", "--baseline", "Easy", "--output-dir", str(tmp_path)])
    out = capsys.readouterr().out
    assert "Impossible (challenger)" in out
    assert "Results saved to" in out
    assert len(list(tmp_path.glob("benchmark_*/summary.json"))) == 1
