"""
Latency reporting for rematerializer queries.

``report_latency`` is fire-and-forget: a failing sink logs a warning and
never raises into the fetch path.
"""

import logging
import threading
import time
from typing import Protocol

from prometheus_client import CollectorRegistry, Histogram

_log = logging.getLogger(__name__)

# Milliseconds; metric names end in _ms
_LATENCY_BUCKETS_MS = (1, 2, 5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000)


def now_ms() -> int:
    """Wall-clock time in milliseconds."""
    return int(time.time() * 1000)


class LatencyReporter(Protocol):
    def report_latency(
        self, metric_name: str, start_ms: int, tag: str = "", sample_percent: int = 100
    ) -> None: ...


class NullLatencyReporter:
    """Discards every report."""

    def report_latency(
        self, metric_name: str, start_ms: int, tag: str = "", sample_percent: int = 100
    ) -> None:
        return None


class PrometheusLatencyReporter:
    """
    Records latency into one Histogram per metric name, labelled by ``tag``.

    Sampling is deterministic: with ``sample_percent=25`` exactly one call in
    four is recorded, per metric name.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()
        self._histograms: dict[str, Histogram] = {}
        self._credit: dict[str, int] = {}
        self._lock = threading.Lock()

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def report_latency(
        self, metric_name: str, start_ms: int, tag: str = "", sample_percent: int = 100
    ) -> None:
        try:
            if not self._sampled(metric_name, sample_percent):
                return
            elapsed = max(0, now_ms() - start_ms)
            self._histogram(metric_name).labels(tag=tag).observe(elapsed)
        except Exception:
            _log.warning("Failed to report latency for %s", metric_name, exc_info=True)

    def _sampled(self, metric_name: str, sample_percent: int) -> bool:
        pct = min(100, max(0, int(sample_percent)))
        with self._lock:
            credit = self._credit.get(metric_name, 0) + pct
            if credit >= 100:
                self._credit[metric_name] = credit - 100
                return True
            self._credit[metric_name] = credit
            return False

    def _histogram(self, metric_name: str) -> Histogram:
        with self._lock:
            metric = self._histograms.get(metric_name)
            if metric is None:
                metric = Histogram(
                    metric_name,
                    f"Rematerializer latency in milliseconds ({metric_name})",
                    labelnames=("tag",),
                    buckets=_LATENCY_BUCKETS_MS,
                    registry=self._registry,
                )
                self._histograms[metric_name] = metric
            return metric
