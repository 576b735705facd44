"""
Semantic test: MLflow logging of a finished run.

Invariant:
With MLFLOW_TRACKING_URI set, one run is logged per call carrying the
parameters as strings, one metric point per table row stepped by the
step column, the run status tag and the rendered table as report.csv.
Without it nothing is written.
"""

from __future__ import annotations

from pathlib import Path

import mlflow.artifacts
import pytest
from mlflow.tracking import MlflowClient

from index_effectiveness.simulation.harness.table import CsvTable
from index_effectiveness.simulation.runtime.mlflow_run_logger import MlflowRunLogger

TABLE = CsvTable(
    columns=("epsilon", "opt_avg", "samples"),
    rows=((1, 2.5, 4), (2, 7.0, 3)),
)


def _log(logger: MlflowRunLogger, status: str) -> None:
    logger.log(
        experiment="exit-time-logging",
        params={"distribution": "uniform", "iterations": 7},
        table=TABLE,
        step_column="epsilon",
        duration_seconds=0.25,
        status=status,
    )


def test_run_logged_to_tracking_store(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    uri = (tmp_path / "mlruns").as_uri()
    monkeypatch.setenv("MLFLOW_TRACKING_URI", uri)

    logger = MlflowRunLogger()
    _log(logger, status="cancelled")

    client = MlflowClient(tracking_uri=uri)
    experiment = client.get_experiment_by_name("exit-time-logging")
    assert experiment is not None
    runs = client.search_runs([experiment.experiment_id])
    assert len(runs) == 1
    run = runs[0]

    assert logger.is_enabled()
    assert run.data.params == {"distribution": "uniform", "iterations": "7"}
    assert run.data.tags["status"] == "cancelled"
    assert run.data.metrics["duration_seconds"] == 0.25

    history = client.get_metric_history(run.info.run_id, "opt_avg")
    assert sorted((m.step, m.value) for m in history) == [(1, 2.5), (2, 7.0)]
    history = client.get_metric_history(run.info.run_id, "samples")
    assert sorted((m.step, m.value) for m in history) == [(1, 4.0), (2, 3.0)]
    assert client.get_metric_history(run.info.run_id, "epsilon") == []

    report = mlflow.artifacts.load_text(f"{run.info.artifact_uri}/report.csv")
    assert report == TABLE.render()


def test_disabled_without_tracking_uri(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("MLFLOW_TRACKING_URI", raising=False)
    monkeypatch.chdir(tmp_path)

    logger = MlflowRunLogger()
    _log(logger, status="success")

    assert not logger.is_enabled()
    assert list(tmp_path.iterdir()) == []
