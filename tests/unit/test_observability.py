"""Unit tests for in-process latency aggregates."""

from __future__ import annotations

import pytest

from ecargraph.observability import latency_metrics_snapshot
from ecargraph.observability import record_latency
from ecargraph.observability import reset_latency_metrics
from ecargraph.observability import timed


class TestObservabilityLatency:
    def setup_method(self):
        reset_latency_metrics()

    def teardown_method(self):
        reset_latency_metrics()

    def test_records_latency_aggregates(self):
        record_latency(operation="ingest.convert", duration_ms=10.0, ok=True)
        record_latency(operation="ingest.convert", duration_ms=30.0, ok=False)

        metrics = latency_metrics_snapshot()["ingest.convert"]
        assert metrics["count"] == 2
        assert metrics["error_count"] == 1
        assert metrics["total_ms"] == 40.0
        assert metrics["avg_ms"] == 20.0
        assert metrics["min_ms"] == 10.0
        assert metrics["max_ms"] == 30.0
        assert metrics["last_ms"] == 30.0

    def test_negative_duration_clamped(self):
        record_latency(operation="loader.live", duration_ms=-5.0)
        assert latency_metrics_snapshot()["loader.live"]["min_ms"] == 0.0

    def test_timed_counts_exceptions_as_errors(self):
        with timed("graph.setup"):
            pass
        with pytest.raises(ValueError):
            with timed("graph.setup"):
                raise ValueError("boom")

        metrics = latency_metrics_snapshot()["graph.setup"]
        assert metrics["count"] == 2
        assert metrics["error_count"] == 1

    def test_reset_clears_all_metrics(self):
        record_latency(operation="graph.drop_all", duration_ms=12.0)
        assert "graph.drop_all" in latency_metrics_snapshot()
        reset_latency_metrics()
        assert latency_metrics_snapshot() == {}
