"""Gain sweep framework for the Ramsete controller.

This module runs the closed-loop simulation for combinations of controller
parameters and collects tracking-error statistics. It handles:
- Grid or explicit parameter configurations
- Seeded, jittered repeat runs per configuration
- Failure detection (configuration errors, non-finite errors)
- CSV export of results

Every configuration sees the same sequence of jitter seeds, so differences
between configurations come from the parameters and not from the noise.
"""

import csv
import itertools
import logging
import math
import statistics
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from ramsete_control.config import DEFAULT_SEED, JITTER_MAX_FACTOR, JITTER_MIN_FACTOR
from ramsete_control.controller import RamseteController
from ramsete_control.integrator import IntegrationMode, KinematicIntegrator, TimingJitter
from ramsete_control.model import ConfigurationError, Pose
from ramsete_control.simulation import run_simulation
from ramsete_control.trajectory import Trajectory, lemniscate_trajectory

SWEEPABLE_PARAMETERS = ("b", "zeta", "wheel_base", "max_wheel_speed")
"""Controller keyword arguments a sweep may vary."""

CSV_COLUMNS = [
    "config_name",
    "param_names",
    "param_values",
    "mean",
    "std_dev",
    "median",
    "min",
    "max",
    "q1",
    "q3",
    "iqr",
    "num_runs",
    "num_failures",
    "is_valid",
    "consistency_score",
    "all_scores",
]


@dataclass
class RunResult:
    """Results from a single simulated run."""

    score: float
    success: bool
    error_message: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.success and math.isfinite(self.score)


@dataclass
class ConfigResult:
    """Aggregated results for a parameter configuration."""

    config_name: str
    params: Dict[str, Any]
    scores: List[float]
    num_runs: int
    num_failures: int
    invalid_threshold: float = 1.0
    mean: float = field(init=False)
    std_dev: float = field(init=False)
    median: float = field(init=False)
    min_score: float = field(init=False)
    max_score: float = field(init=False)
    q1: float = field(init=False)
    q3: float = field(init=False)

    def __post_init__(self) -> None:
        if self.scores:
            ordered = sorted(self.scores)
            n = len(ordered)
            self.mean = statistics.mean(ordered)
            self.std_dev = statistics.stdev(ordered) if n > 1 else 0.0
            self.median = statistics.median(ordered)
            self.min_score = ordered[0]
            self.max_score = ordered[-1]
            self.q1 = ordered[n // 4]
            self.q3 = ordered[(3 * n) // 4] if n > 1 else ordered[0]
        else:
            # All runs failed
            self.mean = self.std_dev = self.median = float("inf")
            self.min_score = self.max_score = self.q1 = self.q3 = float("inf")

    @property
    def is_valid(self) -> bool:
        """Valid if no run failed and every score is under the threshold."""
        return (
            self.num_failures == 0
            and len(self.scores) > 0
            and self.max_score <= self.invalid_threshold
        )

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1

    def consistency_score(self) -> float:
        """Mean tracking error plus a variance penalty (lower is better)."""
        return self.mean + 2 * self.std_dev

    def __str__(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        return (
            f"{self.config_name:40s} | "
            f"Mean: {self.mean:8.4f} | "
            f"Std: {self.std_dev:7.4f} | "
            f"Median: {self.median:8.4f} | "
            f"Range: [{self.min_score:7.4f}, {self.max_score:7.4f}] | "
            f"Failures: {self.num_failures:2d}/{self.num_runs} | "
            f"{status}"
        )


class GainSweep:
    """Sweep Ramsete controller parameters over seeded simulation runs.

    Example:
        sweep = GainSweep(
            parameters={'b': [5.0, 15.0, 30.0], 'zeta': [0.5, 0.7, 0.9]},
            runs_per_config=10,
        )
        sweep.run()
        sweep.save_results('results/gain_sweep.csv')
    """

    def __init__(
        self,
        parameters: Optional[Dict[str, List[Any]]] = None,
        runs_per_config: int = 10,
        invalid_threshold: float = 1.0,
        trajectory_factory: Callable[[], Trajectory] = lemniscate_trajectory,
        jitter_range: Tuple[float, float] = (JITTER_MIN_FACTOR, JITTER_MAX_FACTOR),
        base_seed: int = DEFAULT_SEED,
        start_offset: Tuple[float, float, float] = (0.0, 0.0, 0.0),
        mode: IntegrationMode = IntegrationMode.SEMI_IMPLICIT_EULER,
    ):
        """Initialize the sweep.

        Args:
            parameters: Dict mapping controller argument names to values. Every
                        combination (full grid) is tested.
            runs_per_config: Number of jittered runs per configuration
            invalid_threshold: A configuration is invalid if any run's mean
                               tracking error exceeds this
            trajectory_factory: Builds the trajectory followed in every run
            jitter_range: (min, max) timing jitter factors
            base_seed: Seed of the first run; run i uses base_seed + i
            start_offset: (dx, dy, dtheta) applied to the start pose
            mode: Integration scheme

        Raises:
            ValueError: If a parameter name is not sweepable
        """
        self.parameters = parameters or {}
        for name in self.parameters:
            if name not in SWEEPABLE_PARAMETERS:
                raise ValueError(
                    f"Unknown sweep parameter '{name}'; expected one of {SWEEPABLE_PARAMETERS}"
                )

        self.runs_per_config = runs_per_config
        self.invalid_threshold = invalid_threshold
        self.trajectory_factory = trajectory_factory
        self.jitter_range = jitter_range
        self.base_seed = base_seed
        self.start_offset = start_offset
        self.mode = mode

        self.configurations: List[Tuple[str, Dict[str, Any]]] = []
        self.results: List[ConfigResult] = []

    def add_configuration(self, name: str, params: Dict[str, Any]) -> None:
        """Add an explicit configuration to test instead of the grid."""
        self.configurations.append((name, params))

    def grid_configurations(self) -> List[Tuple[str, Dict[str, Any]]]:
        """Every combination of the swept parameter values."""
        names = list(self.parameters)
        configs = []
        for values in itertools.product(*(self.parameters[name] for name in names)):
            params = dict(zip(names, values))
            config_name = " ".join(f"{k}={v}" for k, v in params.items())
            configs.append((config_name, params))
        return configs

    def run_single(self, params: Dict[str, Any], seed: int) -> RunResult:
        """Simulate one run and score it by mean tracking error."""
        try:
            trajectory = self.trajectory_factory()
            controller = RamseteController(trajectory, **params)
            jitter = TimingJitter.from_seed(seed, *self.jitter_range)
            integrator = KinematicIntegrator(mode=self.mode, jitter=jitter)

            start = controller.initial_pose()
            dx, dy, dtheta = self.start_offset
            start_pose = Pose(start.x + dx, start.y + dy, start.theta + dtheta)

            result = run_simulation(controller, integrator, start_pose)
        except ConfigurationError as e:
            return RunResult(score=float("inf"), success=False, error_message=str(e))

        score = result.mean_error
        if not math.isfinite(score):
            return RunResult(score=score, success=False, error_message="non-finite tracking error")
        return RunResult(score=score, success=True)

    def test_configuration(self, config_name: str, params: Dict[str, Any]) -> ConfigResult:
        """Run every seed for one configuration and aggregate the scores."""
        print(f"\n{'=' * 70}")
        print(f"Testing: {config_name}")
        print(f"{'=' * 70}")

        scores = []
        failures = 0
        for i in range(self.runs_per_config):
            run = self.run_single(params, self.base_seed + i)
            if run.is_valid:
                scores.append(run.score)
                print(f"  Run {i + 1}/{self.runs_per_config}: {run.score:.4f}")
            else:
                failures += 1
                print(f"  Run {i + 1}/{self.runs_per_config}: FAILED ({run.error_message})")

        result = ConfigResult(
            config_name=config_name,
            params=params,
            scores=scores,
            num_runs=self.runs_per_config,
            num_failures=failures,
            invalid_threshold=self.invalid_threshold,
        )
        status = "✓ VALID" if result.is_valid else "✗ INVALID"
        print(f"  {status}  Mean: {result.mean:.4f} ± {result.std_dev:.4f}")
        return result

    def run(self) -> List[ConfigResult]:
        """Run the sweep.

        Tests the configurations added via add_configuration(), or the full
        grid of ``parameters`` when none were added.

        Returns:
            List of ConfigResult objects

        Raises:
            ValueError: If there is nothing to test
        """
        if self.configurations:
            configs = self.configurations
        elif self.parameters:
            configs = self.grid_configurations()
        else:
            raise ValueError(
                "Must either add configurations via add_configuration() "
                "or specify parameters dict"
            )

        # Suppress per-run controller/harness chatter
        root = logging.getLogger()
        previous_level = root.level
        if previous_level < logging.WARNING:
            root.setLevel(logging.WARNING)
        try:
            results = [self.test_configuration(name, params) for name, params in configs]
        finally:
            root.setLevel(previous_level)

        self.results.extend(results)
        return results

    def ranked(self) -> List[ConfigResult]:
        """Valid results ordered by consistency score, best first."""
        return sorted((r for r in self.results if r.is_valid), key=lambda r: r.consistency_score())

    def save_results(self, filepath: Optional[Path] = None) -> Path:
        """Save results to CSV file.

        Args:
            filepath: Optional path for CSV file. If None, auto-generates
                     timestamped filename in results/ directory.

        Returns:
            Path to saved CSV file
        """
        if filepath is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filepath = Path("results") / f"gain_sweep_{timestamp}.csv"
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_COLUMNS)
            for result in self.results:
                writer.writerow(
                    [
                        result.config_name,
                        ";".join(result.params.keys()),
                        ";".join(str(v) for v in result.params.values()),
                        f"{result.mean:.6f}",
                        f"{result.std_dev:.6f}",
                        f"{result.median:.6f}",
                        f"{result.min_score:.6f}",
                        f"{result.max_score:.6f}",
                        f"{result.q1:.6f}",
                        f"{result.q3:.6f}",
                        f"{result.iqr:.6f}",
                        result.num_runs,
                        result.num_failures,
                        result.is_valid,
                        f"{result.consistency_score():.6f}",
                        ";".join(f"{s:.6f}" for s in result.scores),
                    ]
                )

        print(f"\n✓ Results saved to {filepath}")
        return filepath

    def print_summary(self, top_n: int = 10) -> None:
        """Print summary of results to console.

        Args:
            top_n: Number of top configurations to display
        """
        valid = self.ranked()
        print("\n" + "=" * 80)
        print("GAIN SWEEP COMPLETE")
        print("=" * 80)
        print(f"\nTotal configurations tested: {len(self.results)}")
        print(f"Valid configurations: {len(valid)}")
        print(f"Invalid configurations: {len(self.results) - len(valid)}")

        if valid:
            print("\n" + "=" * 80)
            print(f"TOP {min(top_n, len(valid))} CONFIGURATIONS (by consistency)")
            print("=" * 80 + "\n")
            for i, result in enumerate(valid[:top_n], 1):
                print(f"{i}. {result}")
                print(f"   Consistency: {result.consistency_score():.4f}")
                print(f"   IQR: {result.iqr:.4f}")
                print(f"   Parameters: {result.params}\n")
