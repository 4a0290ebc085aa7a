"""Visualization utilities for gain sweep results.

This module provides plots for gain sweep results:
- Box plots comparing configurations
- Heatmap of mean tracking error over the b/zeta grid
"""

from pathlib import Path
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from analysis.statistics import load_sweep_results, param_value
from ramsete_control.config import ACTUAL_COLOR, GUIDE_COLOR, REFERENCE_COLOR


def plot_box_comparison(
    results: List[Dict],
    output_path: Optional[Path] = None,
    max_configs: int = 20,
    title: str = "Gain Sweep Results",
) -> None:
    """Create box plots comparing the best configurations.

    Args:
        results: List of result dictionaries
        output_path: Optional path to save figure
        max_configs: Maximum number of configurations to display
        title: Plot title
    """
    valid_results = [r for r in results if r["is_valid"] and r["scores"]]
    if not valid_results:
        print("No valid results to plot!")
        return

    valid_results = sorted(valid_results, key=lambda r: r["consistency_score"])[:max_configs]

    fig, ax = plt.subplots(figsize=(14, 8))
    bp = ax.boxplot(
        [r["scores"] for r in valid_results],
        patch_artist=True,
        showmeans=True,
        meanline=True,
    )

    for patch in bp["boxes"]:
        patch.set_facecolor(ACTUAL_COLOR)
        patch.set_alpha(0.6)
    for element in ["whiskers", "fliers", "caps"]:
        plt.setp(bp[element], color=GUIDE_COLOR)
    plt.setp(bp["medians"], color=REFERENCE_COLOR, linewidth=2)

    ax.set_xticks(range(1, len(valid_results) + 1))
    ax.set_xticklabels([r["config_name"] for r in valid_results], rotation=45, ha="right")
    ax.set_xlabel("Configuration", fontsize=12, fontweight="bold")
    ax.set_ylabel("Mean Tracking Error", fontsize=12, fontweight="bold")
    ax.set_title(title, fontsize=14, fontweight="bold", pad=20)
    ax.grid(True, alpha=0.3, axis="y")

    fig.tight_layout()
    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        print(f"✓ Box plot saved to {output_path}")
    else:
        plt.show()
    plt.close(fig)


def plot_gain_heatmap(
    results: List[Dict],
    output_path: Optional[Path] = None,
    x_param: str = "b",
    y_param: str = "zeta",
) -> None:
    """Heatmap of mean tracking error over a two-parameter grid.

    Invalid configurations are left blank.

    Args:
        results: List of result dictionaries
        output_path: Optional path to save figure
        x_param: Parameter on the x axis
        y_param: Parameter on the y axis
    """
    cells = []
    for r in results:
        x = param_value(r, x_param)
        y = param_value(r, y_param)
        if x is not None and y is not None:
            cells.append((x, y, r["mean"] if r["is_valid"] else np.nan))

    if not cells:
        print(f"No results sweep both '{x_param}' and '{y_param}'")
        return

    xs = sorted({c[0] for c in cells})
    ys = sorted({c[1] for c in cells})
    grid = np.full((len(ys), len(xs)), np.nan)
    for x, y, value in cells:
        grid[ys.index(y), xs.index(x)] = value

    fig, ax = plt.subplots(figsize=(10, 8))
    image = ax.imshow(grid, origin="lower", aspect="auto", cmap="viridis_r")
    fig.colorbar(image, ax=ax, label="Mean Tracking Error")

    ax.set_xticks(range(len(xs)))
    ax.set_xticklabels([f"{x:g}" for x in xs])
    ax.set_yticks(range(len(ys)))
    ax.set_yticklabels([f"{y:g}" for y in ys])
    ax.set_xlabel(x_param, fontsize=12, fontweight="bold")
    ax.set_ylabel(y_param, fontsize=12, fontweight="bold")
    ax.set_title(f"Mean Tracking Error over {x_param} × {y_param}", fontsize=14, fontweight="bold")

    fig.tight_layout()
    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        print(f"✓ Heatmap saved to {output_path}")
    else:
        plt.show()
    plt.close(fig)


def visualize_csv(csv_path: Path, output_dir: Optional[Path] = None) -> None:
    """Generate all summary plots for a sweep result CSV.

    Args:
        csv_path: Path to CSV file from a gain sweep
        output_dir: Optional directory to save plots (default: same as CSV)
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"File not found: {csv_path}")

    results = load_sweep_results(csv_path)
    output_dir = output_dir or csv_path.parent
    output_dir.mkdir(parents=True, exist_ok=True)
    base_name = csv_path.stem

    plot_box_comparison(
        results,
        output_path=output_dir / f"{base_name}_comparison.png",
        title=f"Gain Sweep Results: {csv_path.name}",
    )
    plot_gain_heatmap(results, output_path=output_dir / f"{base_name}_heatmap.png")

    print(f"\n✓ All plots saved to {output_dir}")
