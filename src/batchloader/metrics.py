"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Metrics adapters for batch loader observability.

Loaders emit four counters, each tagged with ``{"loader": <name>}``:

- ``batchloader_dispatch_total``: batch function invocations.
- ``batchloader_keys_dispatched_total``: keys handed to the batch function.
- ``batchloader_entities_loaded_total``: entities merged into request caches.
- ``batchloader_batch_errors_total``: batch results rejected as non-iterable.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

DISPATCH_TOTAL = "batchloader_dispatch_total"
KEYS_DISPATCHED_TOTAL = "batchloader_keys_dispatched_total"
ENTITIES_LOADED_TOTAL = "batchloader_entities_loaded_total"
BATCH_ERRORS_TOTAL = "batchloader_batch_errors_total"

LOADER_COUNTERS: dict[str, str] = {
    DISPATCH_TOTAL: "Batch function invocations per loader.",
    KEYS_DISPATCHED_TOTAL: "Keys handed to the batch function per loader.",
    ENTITIES_LOADED_TOTAL: "Entities merged into the request cache per loader.",
    BATCH_ERRORS_TOTAL: "Batch results rejected as non-iterable per loader.",
}
LOADER_LABEL = "loader"


class LoaderMetrics(Protocol):
    """Counter sink a loader reports dispatch activity to."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        """Add ``value`` to counter ``name`` for the loader named in ``tags``."""


class NoOpLoaderMetrics:
    """Discards every counter update; used when a loader gets no metrics sink."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        return None


class PrometheusLoaderMetrics:
    """
    Prometheus counters for the loader catalogue above.

    Every counter carries a single ``loader`` label; updates without a
    ``loader`` tag are recorded under ``"default"``. Names outside the
    catalogue raise ``KeyError`` so typos do not create stray series.

    Requires `prometheus_client` package. Pass a dedicated ``registry`` when
    several adapters live in one process (tests, multiple apps).
    """

    def __init__(self, *, namespace: str = "", registry: Any = None) -> None:
        try:
            from prometheus_client import REGISTRY, Counter
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "PrometheusLoaderMetrics requires `prometheus_client` to be installed."
            ) from exc

        target = registry if registry is not None else REGISTRY
        self._counters = {
            name: Counter(
                name=name,
                documentation=documentation,
                namespace=namespace,
                labelnames=(LOADER_LABEL,),
                registry=target,
            )
            for name, documentation in LOADER_COUNTERS.items()
        }

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        counter = self._counters.get(name)
        if counter is None:
            raise KeyError(f"Unknown loader metric '{name}'")
        loader_name = (tags or {}).get(LOADER_LABEL, "default")
        counter.labels(loader_name).inc(value)
