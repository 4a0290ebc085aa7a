import math

import pytest

from analysis.cli import main as analysis_main
from analysis.statistics import (
    compute_statistics,
    generate_report,
    load_sweep_results,
    param_value,
    rank_configurations,
)
from analysis.sweep import ConfigResult, GainSweep
from ramsete_control.trajectory import line_trajectory


def short_line():
    return line_trajectory(distance=1.0)


def test_unknown_parameter_raises():
    with pytest.raises(ValueError):
        GainSweep(parameters={"kp": [1.0]})


def test_run_without_configurations_raises():
    with pytest.raises(ValueError):
        GainSweep().run()


def test_grid_covers_every_combination():
    sweep = GainSweep(parameters={"b": [5.0, 15.0], "zeta": [0.5, 0.7, 0.9]})
    configs = sweep.grid_configurations()
    assert len(configs) == 6
    assert configs[0] == ("b=5.0 zeta=0.5", {"b": 5.0, "zeta": 0.5})


def test_sweep_scores_every_run(capsys):
    sweep = GainSweep(
        parameters={"b": [5.0, 15.0], "zeta": [0.7]},
        runs_per_config=3,
        trajectory_factory=short_line,
    )
    results = sweep.run()

    assert len(results) == 2
    for result in results:
        assert result.num_runs == 3
        assert result.num_failures == 0
        assert len(result.scores) == 3
        assert result.is_valid
    assert "Testing: b=5.0 zeta=0.7" in capsys.readouterr().out


def test_same_seeds_give_same_scores():
    def scores():
        sweep = GainSweep(trajectory_factory=short_line, runs_per_config=2, base_seed=9)
        sweep.add_configuration("default", {})
        return sweep.run()[0].scores

    assert scores() == scores()


def test_invalid_configuration_is_reported_not_raised():
    sweep = GainSweep(trajectory_factory=short_line, runs_per_config=2)
    sweep.add_configuration("negative b", {"b": -1.0})
    result = sweep.run()[0]

    assert result.num_failures == 2
    assert not result.is_valid
    assert math.isinf(result.mean)
    assert sweep.ranked() == []


def test_config_result_statistics():
    result = ConfigResult("cfg", {"b": 1.0}, [0.1, 0.2, 0.3, 0.4], num_runs=4, num_failures=0)
    assert result.mean == pytest.approx(0.25)
    assert result.median == pytest.approx(0.25)
    assert result.min_score == 0.1 and result.max_score == 0.4
    assert result.consistency_score() == pytest.approx(result.mean + 2 * result.std_dev)


def test_threshold_marks_configuration_invalid():
    result = ConfigResult("cfg", {}, [0.1, 2.0], num_runs=2, num_failures=0, invalid_threshold=1.0)
    assert not result.is_valid


def test_saved_results_load_back(tmp_path):
    sweep = GainSweep(
        parameters={"b": [5.0, 15.0], "zeta": [0.7]},
        runs_per_config=2,
        trajectory_factory=short_line,
    )
    sweep.run()
    csv_path = sweep.save_results(tmp_path / "sweep.csv")

    loaded = load_sweep_results(csv_path)
    assert [r["config_name"] for r in loaded] == ["b=5.0 zeta=0.7", "b=15.0 zeta=0.7"]
    assert param_value(loaded[1], "b") == 15.0
    assert param_value(loaded[1], "wheel_base") is None
    assert all(len(r["scores"]) == 2 for r in loaded)
    assert len(rank_configurations(loaded, "mean")) == 2

    report = generate_report(csv_path, tmp_path / "report.txt", top_n=1)
    assert "GAIN SWEEP REPORT" in report
    assert "Valid configurations: 2" in report
    assert (tmp_path / "report.txt").exists()


def test_compute_statistics():
    stats = compute_statistics([1.0, 2.0, 3.0, 4.0, float("inf")])
    assert stats.n == 4
    assert stats.mean == pytest.approx(2.5)
    assert stats.median == pytest.approx(2.5)
    assert stats.ci_95_lower < stats.mean < stats.ci_95_upper
    assert compute_statistics([float("nan")]) is None


def test_analysis_cli_sweep_stats_and_visualize(tmp_path):
    csv_path = tmp_path / "cli_sweep.csv"
    argv = [
        "sweep", "--param", "b=5,15", "--param", "zeta=0.7,0.9",
        "--runs", "1", "--path", "line", "--output", str(csv_path),
        "--visualize", "--report",
    ]
    assert analysis_main(argv) == 0
    assert csv_path.exists()
    assert (tmp_path / "cli_sweep.txt").exists()
    assert (tmp_path / "cli_sweep_comparison.png").exists()
    assert (tmp_path / "cli_sweep_heatmap.png").exists()

    assert analysis_main(["stats", str(csv_path)]) == 0
    assert analysis_main(["visualize", str(csv_path), "-o", str(tmp_path / "plots")]) == 0
    assert (tmp_path / "plots" / "cli_sweep_heatmap.png").exists()


def test_analysis_cli_rejects_bad_input(tmp_path):
    assert analysis_main([]) == 1
    assert analysis_main(["sweep"]) == 1
    assert analysis_main(["sweep", "--param", "b"]) == 1
    assert analysis_main(["sweep", "--param", "kp=1,2"]) == 1
    assert analysis_main(["stats", str(tmp_path / "missing.csv")]) == 1


def test_threshold_applies_to_worst_run_not_mean():
    result = ConfigResult("cfg", {}, [0.1, 0.1, 0.1, 1.5], num_runs=4, num_failures=0)
    assert result.mean < result.invalid_threshold
    assert not result.is_valid
