"""Gain sweep analysis for the Ramsete controller.

This package provides a small framework for:
- Sweeping controller parameters over seeded, jittered simulations
- Statistical analysis of the resulting tracking errors
- Result visualization

Quick Start:
    >>> from analysis import GainSweep
    >>> sweep = GainSweep(
    ...     parameters={'b': [5.0, 15.0], 'zeta': [0.7, 0.9]},
    ...     runs_per_config=5
    ... )
    >>> sweep.run()
    >>> sweep.save_results('results/my_sweep.csv')

Command Line:
    python -m analysis.cli sweep --param b=5,15,30 --param zeta=0.5,0.9 --runs 10
    python -m analysis.cli visualize results/gain_sweep_*.csv
    python -m analysis.cli stats results/gain_sweep_*.csv
"""

from analysis.statistics import (
    Statistics,
    compute_statistics,
    generate_report,
    load_sweep_results,
    rank_configurations,
)
from analysis.sweep import ConfigResult, GainSweep, RunResult
from analysis.visualize import plot_box_comparison, plot_gain_heatmap, visualize_csv

__all__ = [
    "GainSweep",
    "RunResult",
    "ConfigResult",
    "Statistics",
    "compute_statistics",
    "load_sweep_results",
    "rank_configurations",
    "generate_report",
    "plot_box_comparison",
    "plot_gain_heatmap",
    "visualize_csv",
]
