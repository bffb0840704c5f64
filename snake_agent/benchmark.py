#!/usr/bin/env python3
"""
Difficulty Tier Benchmarking Tool

This script benchmarks one difficulty tier (the challenger) against another
(the baseline) by playing headless arena matches.

Usage:
    snake-agent-benchmark [--iterations N] [--workers N] [--challenger TIER] [--baseline TIER]

The script will:
1. Run N games (default 200) with prime-number seeds
2. Aggregate wins, lengths, death reasons and decision latency
3. Print a report, and save it to --output-dir when given
"""

import argparse
import json
from collections import defaultdict
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import sympy
from tqdm import tqdm

from snake_agent.agent import Difficulty, create_agent
from snake_agent.arena import ArenaConfig, run_match

CHALLENGER = 0
BASELINE = 1


@dataclass
class BenchmarkConfig:
    """Configuration for benchmark runs"""
    iterations: int = 200
    workers: int = 1
    width: int = 11
    height: int = 11
    max_turns: int = 500
    challenger: str = "Hard"
    baseline: str = "Medium"
    output_dir: Optional[Path] = None

    def __post_init__(self):
        if self.iterations < 1:
            raise ValueError("iterations must be >= 1")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        # Normalise tier names, raising on unknown ones
        self.challenger = Difficulty.parse(self.challenger).value
        self.baseline = Difficulty.parse(self.baseline).value


@dataclass
class GameResult:
    """Result of a single game"""
    game_num: int
    winner: Optional[str]  # "challenger", "baseline", "draw", or None for error
    turns: int = 0
    challenger_length: int = 0
    baseline_length: int = 0
    death_reason_challenger: str = ""
    death_reason_baseline: str = ""
    challenger_decision_ms: float = 0.0
    baseline_decision_ms: float = 0.0
    error: str = ""


@dataclass
class BenchmarkStats:
    """Aggregated benchmark statistics"""
    total_games: int = 0
    challenger_wins: int = 0
    baseline_wins: int = 0
    draws: int = 0
    errors: int = 0

    total_turns: int = 0
    challenger_total_length: int = 0
    baseline_total_length: int = 0

    challenger_death_reasons: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    baseline_death_reasons: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    game_results: List[GameResult] = field(default_factory=list)

    @property
    def valid_games(self) -> int:
        return self.total_games - self.errors

    @property
    def challenger_win_rate(self) -> float:
        return self.challenger_wins / self.valid_games * 100 if self.valid_games > 0 else 0

    @property
    def baseline_win_rate(self) -> float:
        return self.baseline_wins / self.valid_games * 100 if self.valid_games > 0 else 0

    @property
    def draw_rate(self) -> float:
        return self.draws / self.valid_games * 100 if self.valid_games > 0 else 0

    @property
    def avg_turns(self) -> float:
        return self.total_turns / self.valid_games if self.valid_games > 0 else 0

    @property
    def avg_challenger_length(self) -> float:
        return self.challenger_total_length / self.valid_games if self.valid_games > 0 else 0

    @property
    def avg_baseline_length(self) -> float:
        return self.baseline_total_length / self.valid_games if self.valid_games > 0 else 0

    def add(self, result: GameResult):
        """Fold one game result into the totals."""
        self.total_games += 1
        self.game_results.append(result)

        if result.error and result.winner is None:
            self.errors += 1
            return
        if result.winner == "challenger":
            self.challenger_wins += 1
        elif result.winner == "baseline":
            self.baseline_wins += 1
        elif result.winner == "draw":
            self.draws += 1

        self.total_turns += result.turns
        self.challenger_total_length += result.challenger_length
        self.baseline_total_length += result.baseline_length

        if result.death_reason_challenger:
            self.challenger_death_reasons[result.death_reason_challenger] += 1
        if result.death_reason_baseline:
            self.baseline_death_reasons[result.death_reason_baseline] += 1

    def latency_percentiles(self, side: str) -> Dict[str, float]:
        """p50/p95/max of mean per-game decision time for one side, in ms."""
        times = np.array([getattr(r, f"{side}_decision_ms") for r in self.game_results if not r.error])
        if times.size == 0:
            return {"p50": 0.0, "p95": 0.0, "max": 0.0}
        return {
            "p50": float(np.percentile(times, 50)),
            "p95": float(np.percentile(times, 95)),
            "max": float(np.max(times)),
        }


def prime_seeds(count: int, start: int = 100) -> List[int]:
    """Consecutive primes above start, one seed per game."""
    seeds = []
    last_prime = start
    for _ in range(count):
        last_prime = int(sympy.nextprime(last_prime))
        seeds.append(last_prime)
    return seeds


def run_single_game(game_num: int, seed: int, config: BenchmarkConfig) -> GameResult:
    """Run a single game and return the result"""
    result = GameResult(game_num=game_num, winner=None)

    try:
        agents = [
            create_agent(CHALLENGER, config.width, config.height, config.challenger, seed=seed),
            create_agent(BASELINE, config.width, config.height, config.baseline, seed=seed + 1),
        ]
        arena = ArenaConfig(width=config.width, height=config.height, max_turns=config.max_turns, seed=seed)
        match = run_match(agents, arena)
    except ValueError as e:
        result.error = str(e)
        return result

    result.turns = match.turns
    result.challenger_length = match.lengths.get(CHALLENGER, 0)
    result.baseline_length = match.lengths.get(BASELINE, 0)
    result.death_reason_challenger = match.death_reasons.get(CHALLENGER, "")
    result.death_reason_baseline = match.death_reasons.get(BASELINE, "")
    result.challenger_decision_ms = match.mean_decision_time_ms(CHALLENGER)
    result.baseline_decision_ms = match.mean_decision_time_ms(BASELINE)

    if match.winner == CHALLENGER:
        result.winner = "challenger"
    elif match.winner == BASELINE:
        result.winner = "baseline"
    else:
        result.winner = "draw"

    return result


class BenchmarkRunner:
    """Main benchmark runner"""

    def __init__(self, config: BenchmarkConfig):
        self.config = config
        self.stats = BenchmarkStats()

    def run(self) -> BenchmarkStats:
        """Run all benchmark games"""
        print("=" * 70)
        print("     SNAKE AGENT DIFFICULTY BENCHMARK")
        print(f"     {self.config.challenger} (challenger) vs {self.config.baseline} (baseline)")
        print(f"     Running {self.config.iterations} games with {self.config.workers} workers")
        print(f"     Board: {self.config.width}x{self.config.height}")
        print("=" * 70)
        print()

        game_params = list(enumerate(prime_seeds(self.config.iterations)))

        bar_fmt = "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}] {postfix}"
        with tqdm(total=self.config.iterations, desc="Running games", bar_format=bar_fmt) as pbar:
            if self.config.workers == 1:
                for game_num, seed in game_params:
                    self._record(run_single_game(game_num, seed, self.config), pbar)
            else:
                with ProcessPoolExecutor(max_workers=self.config.workers) as executor:
                    futures = [
                        executor.submit(run_single_game, game_num, seed, self.config)
                        for game_num, seed in game_params
                    ]
                    for future in as_completed(futures):
                        self._record(future.result(), pbar)

        self.stats.game_results.sort(key=lambda r: r.game_num)
        return self.stats

    def _record(self, result: GameResult, pbar: tqdm):
        self.stats.add(result)
        pbar.set_postfix({
            "Challenger": self.stats.challenger_wins,
            "Baseline": self.stats.baseline_wins,
            "Draw": self.stats.draws,
        })
        pbar.update(1)

    def generate_report(self) -> str:
        """Generate a benchmark report"""
        s = self.stats
        challenger = self.config.challenger
        baseline = self.config.baseline

        report = []
        report.append("\n" + "=" * 70)
        report.append("                    BENCHMARK REPORT")
        report.append("=" * 70)

        report.append("\nOVERALL RESULTS")
        report.append("-" * 40)
        report.append(f"   Total Games:     {s.total_games}")
        report.append(f"   Valid Games:     {s.valid_games}")
        report.append(f"   Errors:          {s.errors}")
        report.append("")

        report.append("WIN RATES")
        report.append("-" * 40)
        report.append(f"   {challenger} (challenger): {s.challenger_wins:4d} wins ({s.challenger_win_rate:5.1f}%)")
        report.append(f"   {baseline} (baseline):   {s.baseline_wins:4d} wins ({s.baseline_win_rate:5.1f}%)")
        report.append(f"   Draws:           {s.draws:4d}      ({s.draw_rate:5.1f}%)")
        report.append("")

        report.append("PERFORMANCE STATISTICS")
        report.append("-" * 40)
        report.append(f"   Average Game Length:      {s.avg_turns:.1f} turns")
        report.append(f"   Avg Challenger Length:    {s.avg_challenger_length:.1f}")
        report.append(f"   Avg Baseline Length:      {s.avg_baseline_length:.1f}")
        for side, tier in (("challenger", challenger), ("baseline", baseline)):
            latency = s.latency_percentiles(side)
            report.append(f"   {tier} decision time:  p50 {latency['p50']:.2f}ms | "
                          f"p95 {latency['p95']:.2f}ms | max {latency['max']:.2f}ms")
        report.append("")

        for tier, reasons in ((challenger, s.challenger_death_reasons), (baseline, s.baseline_death_reasons)):
            if not reasons:
                continue
            report.append(f"{tier.upper()} DEATH REASONS")
            report.append("-" * 40)
            for reason, count in sorted(reasons.items(), key=lambda x: -x[1]):
                pct = count / s.valid_games * 100 if s.valid_games > 0 else 0
                report.append(f"   {reason:30s} {count:4d} ({pct:5.1f}%)")
            report.append("")

        if s.valid_games >= 30:
            # Normal approximation to the binomial
            p = s.challenger_wins / s.valid_games
            se = np.sqrt(p * (1 - p) / s.valid_games)
            ci_low = max(0.0, p - 1.96 * se)
            ci_high = min(1.0, p + 1.96 * se)

            report.append("STATISTICAL ANALYSIS")
            report.append("-" * 40)
            report.append(f"   Challenger Win Rate: {p * 100:.1f}%")
            report.append(f"   95% Confidence Interval: [{ci_low * 100:.1f}%, {ci_high * 100:.1f}%]")
            if ci_low > 0.5:
                report.append("   Challenger is SIGNIFICANTLY BETTER (p < 0.05)")
            elif ci_high < 0.5:
                report.append("   Challenger is SIGNIFICANTLY WORSE (p < 0.05)")
            else:
                report.append("   No statistically significant difference")
            report.append("")

        report.append("=" * 70)
        return "\n".join(report)

    def summary(self) -> Dict:
        return {
            "config": {
                "iterations": self.config.iterations,
                "workers": self.config.workers,
                "width": self.config.width,
                "height": self.config.height,
                "max_turns": self.config.max_turns,
                "challenger": self.config.challenger,
                "baseline": self.config.baseline,
            },
            "results": {
                "total_games": self.stats.total_games,
                "challenger_wins": self.stats.challenger_wins,
                "baseline_wins": self.stats.baseline_wins,
                "draws": self.stats.draws,
                "errors": self.stats.errors,
                "challenger_win_rate": self.stats.challenger_win_rate,
                "baseline_win_rate": self.stats.baseline_win_rate,
                "avg_turns": self.stats.avg_turns,
                "avg_challenger_length": self.stats.avg_challenger_length,
                "avg_baseline_length": self.stats.avg_baseline_length,
            },
            "latency_ms": {
                "challenger": self.stats.latency_percentiles("challenger"),
                "baseline": self.stats.latency_percentiles("baseline"),
            },
            "death_reasons": {
                "challenger": dict(self.stats.challenger_death_reasons),
                "baseline": dict(self.stats.baseline_death_reasons),
            },
            "timestamp": datetime.now().isoformat(),
        }

    def save_results(self) -> Optional[Path]:
        """Save summary.json and report.txt when an output directory is configured"""
        if self.config.output_dir is None:
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_dir = Path(self.config.output_dir) / f"benchmark_{timestamp}"
        output_dir.mkdir(parents=True, exist_ok=True)

        with open(output_dir / "summary.json", "w") as f:
            json.dump(self.summary(), f, indent=2)
        with open(output_dir / "report.txt", "w") as f:
            f.write(self.generate_report())

        return output_dir


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Benchmark one difficulty tier against another",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    snake-agent-benchmark                                 # Hard vs Medium, 200 games
    snake-agent-benchmark --iterations 50                 # Quick run
    snake-agent-benchmark --challenger Expert --workers 4
        """
    )
    parser.add_argument("--iterations", "-n", type=int, default=200,
                        help="Number of games to run (default: 200)")
    parser.add_argument("--workers", "-w", type=int, default=1,
                        help="Number of parallel worker processes (default: 1)")
    parser.add_argument("--width", type=int, default=11, help="Board width (default: 11)")
    parser.add_argument("--height", type=int, default=11, help="Board height (default: 11)")
    parser.add_argument("--max-turns", type=int, default=500, help="Turn limit per game (default: 500)")
    parser.add_argument("--challenger", default="Hard", help="Challenger difficulty tier (default: Hard)")
    parser.add_argument("--baseline", default="Medium", help="Baseline difficulty tier (default: Medium)")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Directory to save summary.json and report.txt")

    args = parser.parse_args(argv)

    config = BenchmarkConfig(
        iterations=args.iterations,
        workers=args.workers,
        width=args.width,
        height=args.height,
        max_turns=args.max_turns,
        challenger=args.challenger,
        baseline=args.baseline,
        output_dir=args.output_dir,
    )

    runner = BenchmarkRunner(config)
    runner.run()
    print(runner.generate_report())
    output_dir = runner.save_results()
    if output_dir is not None:
        print(f"   Results saved to: {output_dir}")


if __name__ == "__main__":
    main()
