from __future__ import annotations

from collections.abc import Mapping

import pytest

from batchloader import (
    BatchingDataLoader,
    BatchResultError,
    NoOpLoaderMetrics,
    PrometheusLoaderMetrics,
)


class _RecordingMetrics:
    def __init__(self) -> None:
        self.counts: dict[str, int] = {}
        self.tags: list[Mapping[str, str] | None] = []

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        self.counts[name] = self.counts.get(name, 0) + value
        self.tags.append(tags)


def test_loader_reports_dispatch_counters():
    metrics = _RecordingMetrics()
    loader = BatchingDataLoader(
        lambda keys: [{"id": key} for key in keys if key != 3],
        batch_size=2,
        metrics=metrics,
        name="users",
    )

    loader.batch([1, 2, 3]).load(1)

    assert metrics.counts == {
        "batchloader_dispatch_total": 2,
        "batchloader_keys_dispatched_total": 3,
        "batchloader_entities_loaded_total": 2,
    }
    assert all(tags == {"loader": "users"} for tags in metrics.tags)


def test_loader_reports_batch_errors():
    metrics = _RecordingMetrics()
    loader = BatchingDataLoader(lambda keys: None, metrics=metrics)

    with pytest.raises(BatchResultError):
        loader.batch(1).load(1)

    assert metrics.counts["batchloader_batch_errors_total"] == 1


def test_noop_metrics_accepts_calls():
    NoOpLoaderMetrics().incr("anything", 3, tags={"a": "b"})


def test_prometheus_metrics_counts_with_labels():
    prometheus_client = pytest.importorskip("prometheus_client")
    registry = prometheus_client.CollectorRegistry()
    metrics = PrometheusLoaderMetrics(registry=registry)
    loader = BatchingDataLoader(
        lambda keys: [{"id": key} for key in keys],
        batch_size=1,
        metrics=metrics,
        name="teams",
    )

    loader.batch(["a", "b"]).load("a")

    assert registry.get_sample_value(
        "batchloader_dispatch_total", {"loader": "teams"}
    ) == 2.0
    assert registry.get_sample_value(
        "batchloader_keys_dispatched_total", {"loader": "teams"}
    ) == 2.0


def test_prometheus_metrics_reject_unknown_names_and_default_the_label():
    prometheus_client = pytest.importorskip("prometheus_client")
    registry = prometheus_client.CollectorRegistry()
    metrics = PrometheusLoaderMetrics(namespace="app", registry=registry)

    metrics.incr("batchloader_batch_errors_total", 2)

    assert registry.get_sample_value(
        "app_batchloader_batch_errors_total", {"loader": "default"}
    ) == 2.0
    with pytest.raises(KeyError, match="Unknown loader metric"):
        metrics.incr("batchloader_typo_total")
