"""Statistical analysis utilities for gain sweep results.

This module provides statistical computation and reporting for gain sweep
results, including:
- Descriptive statistics (mean, std, median, quartiles)
- Confidence intervals
- Result ranking
- Statistical report generation
"""

import csv
import math
import statistics
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np


@dataclass
class Statistics:
    """Statistical summary for a dataset."""

    mean: float
    std: float
    median: float
    min: float
    max: float
    q1: float  # 25th percentile
    q3: float  # 75th percentile
    iqr: float
    ci_95_lower: float
    ci_95_upper: float
    n: int

    def __str__(self) -> str:
        return (
            f"Mean: {self.mean:.4f} ± {self.std:.4f} | "
            f"Median: {self.median:.4f} | "
            f"Range: [{self.min:.4f}, {self.max:.4f}] | "
            f"IQR: {self.iqr:.4f} | "
            f"95% CI: [{self.ci_95_lower:.4f}, {self.ci_95_upper:.4f}] | "
            f"N={self.n}"
        )


def compute_statistics(data: List[float]) -> Optional[Statistics]:
    """Compute descriptive statistics for a dataset.

    Non-finite values are ignored.

    Args:
        data: List of numeric values

    Returns:
        Statistics object, or None if there are no finite values
    """
    finite_data = [x for x in data if math.isfinite(x)]
    if not finite_data:
        return None

    n = len(finite_data)
    mean = statistics.mean(finite_data)
    std = statistics.stdev(finite_data) if n > 1 else 0.0
    q1 = float(np.percentile(finite_data, 25))
    q3 = float(np.percentile(finite_data, 75))

    # Normal approximation for large n, widened for small samples
    if n > 1:
        se = std / math.sqrt(n)
        t_critical = 1.96 if n > 30 else 2.0 + (30 - n) * 0.05
        ci_95_lower = mean - t_critical * se
        ci_95_upper = mean + t_critical * se
    else:
        ci_95_lower = ci_95_upper = mean

    return Statistics(
        mean=mean,
        std=std,
        median=statistics.median(finite_data),
        min=min(finite_data),
        max=max(finite_data),
        q1=q1,
        q3=q3,
        iqr=q3 - q1,
        ci_95_lower=ci_95_lower,
        ci_95_upper=ci_95_upper,
        n=n,
    )


def load_sweep_results(csv_path: Path) -> List[Dict]:
    """Load sweep results written by GainSweep.save_results().

    Args:
        csv_path: Path to CSV file from a gain sweep

    Returns:
        List of result dictionaries
    """
    results = []

    with open(csv_path, "r", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            scores_str = row.get("all_scores", "")
            scores = [float(s) for s in scores_str.split(";") if s] if scores_str else []

            results.append(
                {
                    "config_name": row["config_name"],
                    "param_names": row.get("param_names", "").split(";"),
                    "param_values": row.get("param_values", "").split(";"),
                    "mean": float(row["mean"]),
                    "std_dev": float(row["std_dev"]),
                    "median": float(row.get("median", row["mean"])),
                    "min": float(row["min"]),
                    "max": float(row["max"]),
                    "q1": float(row.get("q1", 0)),
                    "q3": float(row.get("q3", 0)),
                    "iqr": float(row.get("iqr", 0)),
                    "num_runs": int(row["num_runs"]),
                    "num_failures": int(row["num_failures"]),
                    "is_valid": row["is_valid"].lower() == "true",
                    "consistency_score": float(row.get("consistency_score", 0)),
                    "scores": scores,
                }
            )

    return results


def param_value(result: Dict, name: str) -> Optional[float]:
    """Value of parameter ``name`` in a loaded result, or None if not swept."""
    if name not in result["param_names"]:
        return None
    return float(result["param_values"][result["param_names"].index(name)])


def rank_configurations(
    results: List[Dict], metric: str = "consistency_score", ascending: bool = True
) -> List[Dict]:
    """Rank valid configurations by a specified metric.

    Args:
        results: List of result dictionaries
        metric: Metric to rank by ('mean', 'std_dev', 'consistency_score', etc.)
        ascending: True when lower is better

    Returns:
        Sorted list of valid results
    """
    valid_results = [r for r in results if r["is_valid"]]
    return sorted(valid_results, key=lambda r: r[metric], reverse=not ascending)


def generate_report(csv_path: Path, output_path: Optional[Path] = None, top_n: int = 10) -> str:
    """Generate a statistical report from sweep results.

    Args:
        csv_path: Path to CSV file from a gain sweep
        output_path: Optional path to save report text file
        top_n: Number of top configurations to include

    Returns:
        Report text as string
    """
    results = load_sweep_results(csv_path)
    valid_results = [r for r in results if r["is_valid"]]

    lines = ["=" * 80, "GAIN SWEEP REPORT", "=" * 80]
    lines.append(f"\nSource: {csv_path}")
    lines.append(f"Total configurations: {len(results)}")
    lines.append(f"Valid configurations: {len(valid_results)}")
    lines.append(f"Invalid configurations: {len(results) - len(valid_results)}")

    if not valid_results:
        lines.append("\nNo valid configurations found!")
    else:
        all_scores = [s for r in valid_results for s in r["scores"]]
        overall = compute_statistics(all_scores)
        if overall:
            lines.append("\n" + "=" * 80)
            lines.append("MEAN TRACKING ERROR (all valid configurations)")
            lines.append("=" * 80)
            lines.append(f"\n{overall}")

        for title, metric in (
            ("CONSISTENCY SCORE", "consistency_score"),
            ("MEAN TRACKING ERROR", "mean"),
            ("STABILITY (lowest std dev)", "std_dev"),
        ):
            lines.append("\n" + "=" * 80)
            lines.append(f"TOP {top_n} CONFIGURATIONS BY {title}")
            lines.append("=" * 80)
            for i, result in enumerate(rank_configurations(results, metric)[:top_n], 1):
                lines.append(f"\n{i}. {result['config_name']}")
                lines.append(
                    f"   Mean: {result['mean']:.4f} ± {result['std_dev']:.4f}  "
                    f"Median: {result['median']:.4f}  IQR: {result['iqr']:.4f}"
                )

    lines.append("\n" + "=" * 80)
    report_text = "\n".join(lines)

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report_text)
        print(f"✓ Report saved to {output_path}")

    return report_text
