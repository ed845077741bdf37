"""Unit tests for core.metrics (latency reporting)."""

from unittest.mock import patch

from prometheus_client import CollectorRegistry

from rematerializer.core import metrics
from rematerializer.core.metrics import NullLatencyReporter, PrometheusLatencyReporter


def _count(reporter: PrometheusLatencyReporter, name: str, tag: str = "") -> float | None:
    return reporter.registry.get_sample_value(f"{name}_count", {"tag": tag})


def test_every_call_recorded_at_100_percent() -> None:
    reporter = PrometheusLatencyReporter(CollectorRegistry())
    for _ in range(5):
        reporter.report_latency("postgres_query_ms", metrics.now_ms(), "", 100)
    assert _count(reporter, "postgres_query_ms") == 5


def test_sampling_is_deterministic() -> None:
    reporter = PrometheusLatencyReporter(CollectorRegistry())
    for _ in range(8):
        reporter.report_latency("mysql_query_ms", metrics.now_ms(), "", 25)
    assert _count(reporter, "mysql_query_ms") == 2


def test_elapsed_time_observed_in_milliseconds() -> None:
    reporter = PrometheusLatencyReporter(CollectorRegistry())
    with patch.object(metrics, "now_ms", return_value=10_250):
        reporter.report_latency("q_ms", 10_000, "hot", 100)
    assert reporter.registry.get_sample_value("q_ms_sum", {"tag": "hot"}) == 250
    assert reporter.registry.get_sample_value("q_ms_bucket", {"tag": "hot", "le": "250.0"}) == 1


def test_invalid_metric_name_is_swallowed() -> None:
    reporter = PrometheusLatencyReporter(CollectorRegistry())
    reporter.report_latency("not a valid name", metrics.now_ms(), "", 100)


def test_null_reporter() -> None:
    assert NullLatencyReporter().report_latency("x", 0) is None
