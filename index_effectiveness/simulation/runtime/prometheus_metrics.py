from __future__ import annotations

import json
import logging
import os

from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

LOGGER = logging.getLogger(__name__)


class PrometheusMetricsClient:
    """Pushgateway client for finished experiment runs.

    Expected environment:
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway.

    Optional:
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object of string pairs
      used as grouping key, e.g. {"host": "node-3"}.

    Delivery is best-effort: callers log failures and carry on.
    """

    def __init__(self) -> None:
        self._pushgateway_url = os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self._registry = CollectorRegistry()
        self._gauges: dict[str, Gauge] = {}

    def is_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning("Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring")
            return {}

        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}

    def set_gauge(self, *, name: str, value: float, labels: dict[str, str]) -> None:
        """Record a gauge value; one Gauge per metric name is reused."""
        gauge = self._gauges.get(name)
        if gauge is None:
            gauge = Gauge(
                name,
                documentation=name,
                labelnames=sorted(labels),
                registry=self._registry,
            )
            self._gauges[name] = gauge
        gauge.labels(**labels).set(value)

    def record_run(
        self,
        *,
        experiment: str,
        duration_seconds: float,
        completed: int,
        censored: int,
        cancelled: bool,
    ) -> None:
        labels = {"experiment": experiment}
        self.set_gauge(name="index_effectiveness_run_duration_seconds", value=duration_seconds, labels=labels)
        self.set_gauge(name="index_effectiveness_trajectories_completed", value=completed, labels=labels)
        self.set_gauge(name="index_effectiveness_trajectories_censored", value=censored, labels=labels)
        self.set_gauge(name="index_effectiveness_run_cancelled", value=float(cancelled), labels=labels)

    def push_all(self, *, job: str) -> None:
        if not self._pushgateway_url:
            return

        push_to_gateway(
            gateway=self._pushgateway_url,
            job=job,
            registry=self._registry,
            grouping_key=self._grouping_key,
        )
        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": job, "grouping_key": self._grouping_key},
        )
