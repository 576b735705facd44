from __future__ import annotations

import logging
import os
from typing import Any

import mlflow

from index_effectiveness.simulation.harness.table import CsvTable

LOGGER = logging.getLogger(__name__)


class MlflowRunLogger:
    """Logs experiment parameters and the final per-bucket table to MLflow.

    Enabled only when MLFLOW_TRACKING_URI is set. Best-effort: callers catch
    exceptions and continue.
    """

    def __init__(self) -> None:
        self._tracking_uri = os.environ.get("MLFLOW_TRACKING_URI")
        if self._tracking_uri:
            mlflow.set_tracking_uri(self._tracking_uri)

    def is_enabled(self) -> bool:
        return bool(self._tracking_uri)

    def log(
        self,
        *,
        experiment: str,
        params: dict[str, Any],
        table: CsvTable,
        step_column: str,
        duration_seconds: float,
        status: str,
    ) -> None:
        if not self.is_enabled():
            return

        mlflow.set_experiment(experiment)
        with mlflow.start_run():
            mlflow.log_params({k: str(v) for k, v in params.items()})
            mlflow.log_metric("duration_seconds", duration_seconds)

            step_index = table.columns.index(step_column)
            for row in table.rows:
                step = int(row[step_index])
                for name, value in zip(table.columns, row):
                    if name == step_column or isinstance(value, str):
                        continue
                    mlflow.log_metric(name, float(value), step=step)

            mlflow.set_tag("status", status)
            mlflow.log_text(table.render(), "report.csv")

        LOGGER.info(
            "MLflow run logged",
            extra={"experiment": experiment, "rows": len(table.rows), "status": status},
        )
