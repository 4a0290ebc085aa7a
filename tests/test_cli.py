import logging
from pathlib import Path

import pytest

from ramsete_control.__main__ import main
from ramsete_control.diagnostic_plots import load_run_data, plot_run_summary
from ramsete_control.plot_results import find_latest_run
from ramsete_control.plot_results import main as plot_main
from ramsete_control.trajectory import line_trajectory, save_trajectory_csv


@pytest.fixture(autouse=True)
def no_run_dir_env(monkeypatch):
    monkeypatch.delenv("RUN_DIR", raising=False)


def test_line_run_without_saving():
    assert main(["--path", "line", "--no-save", "--duration", "1"]) == 0


def test_jittered_exact_arc_run():
    argv = [
        "--path", "arc", "--no-save", "--integration", "exact-arc",
        "--jitter", "0.9", "1.1", "--seed", "5", "--start-offset", "0", "0.2", "0",
    ]
    assert main(argv) == 0


def test_invalid_gain_returns_error():
    assert main(["--path", "line", "--no-save", "--b", "-1"]) == 1


def test_missing_trajectory_csv_returns_error(tmp_path):
    assert main(["--trajectory-csv", str(tmp_path / "missing.csv"), "--no-save"]) == 1


def test_trajectory_csv_run(tmp_path):
    csv_path = save_trajectory_csv(line_trajectory(distance=1.0), tmp_path / "line.csv")
    assert main(["--trajectory-csv", str(csv_path), "--no-save"]) == 0


def test_saved_run_can_be_plotted(tmp_path):
    assert main(["--path", "line", "--duration", "1", "--output-dir", str(tmp_path)]) == 0

    run_dir = find_latest_run(tmp_path / "results")
    data = load_run_data(run_dir)
    assert {"pose", "reference", "command", "tracking"} <= set(data)

    plot_run_summary(run_dir, save_plots=True, show_plots=False)
    for name in ("trajectory.png", "tracking_error.png", "wheel_commands.png"):
        assert (run_dir / name).exists()


def test_plot_results_cli_saves_latest_run(tmp_path):
    main(["--path", "line", "--duration", "1", "--output-dir", str(tmp_path)])
    assert plot_main(["--results-dir", str(tmp_path / "results"), "--save", "--no-show"]) == 0
    assert (find_latest_run(tmp_path / "results") / "trajectory.png").exists()


def test_find_latest_run_without_results(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_latest_run(Path(tmp_path) / "results")


def test_plot_results_reports_missing_run(tmp_path):
    (tmp_path / "results").mkdir()
    assert plot_main(["--results-dir", str(tmp_path / "results"), "--run", "run_x", "--no-show"]) == 1


def test_plot_results_lists_runs_with_summary(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    main(["--path", "line", "--duration", "1", "--output-dir", str(tmp_path)])
    assert plot_main(["--results-dir", str(tmp_path / "results"), "--list"]) == 0
    assert "final error:" in caplog.text


@pytest.mark.parametrize(
    "argv",
    [
        ["--path", "line", "--dt", "0"],
        ["--path", "line", "--dt", "-0.02"],
        ["--path", "arc", "--dt", "0"],
        ["--path", "lemniscate", "--dt", "-0.02"],
        ["--path", "lemniscate", "--duration", "0"],
    ],
)
def test_non_positive_time_step_returns_error(argv):
    assert main(argv + ["--no-save"]) == 1


def test_output_dir_that_is_a_file_returns_error(tmp_path):
    not_a_dir = tmp_path / "results.txt"
    not_a_dir.write_text("x")
    assert main(["--path", "line", "--duration", "1", "--output-dir", str(not_a_dir)]) == 1
