"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Request scope holding one loader instance per registered name.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from .errors import LoaderNotRegisteredError, LoaderRegistrationError
from .loader import AsyncBatchingDataLoader, BatchingDataLoader

logger = logging.getLogger("batchloader.scope")

AnyLoader = BatchingDataLoader | AsyncBatchingDataLoader
LoaderFactory = Callable[[], AnyLoader]


class RequestScope:
    """
    Per-request container of named loaders.

    Factories are registered once; each scope builds its own loader for a name
    on first ``get``, so caches are never shared between requests. Leaving the
    ``with`` block flushes and drops every loader the scope built.

    Example::

        with RequestScope({"users": lambda: BatchingDataLoader(fetch_users)}) as scope:
            scope.get("users").batch([1, 2])
            user = scope.get("users").load(1)
    """

    def __init__(self, factories: Mapping[str, LoaderFactory] | None = None) -> None:
        self._factories: dict[str, LoaderFactory] = {}
        self._loaders: dict[str, AnyLoader] = {}
        for name, factory in (factories or {}).items():
            self.register(name, factory)

    def register(
        self,
        name: str,
        factory: LoaderFactory,
        *,
        overwrite: bool = False,
    ) -> None:
        """Register one loader factory under ``name``."""
        key = name.strip()
        if not key:
            raise LoaderRegistrationError("Loader name must be non-empty")
        if key in self._factories and not overwrite:
            raise LoaderRegistrationError(f"Loader already registered: {key}")
        self._factories[key] = factory
        self._loaders.pop(key, None)

    def get(self, name: str) -> AnyLoader:
        """Return this scope's loader for ``name``, building it on first use."""
        key = name.strip()
        loader = self._loaders.get(key)
        if loader is not None:
            return loader
        factory = self._factories.get(key)
        if factory is None:
            raise LoaderNotRegisteredError(f"Unknown loader '{name}'")
        loader = factory()
        self._loaders[key] = loader
        logger.debug("Scope built loader %s", key)
        return loader

    def __getitem__(self, name: str) -> AnyLoader:
        return self.get(name)

    def names(self) -> list[str]:
        """List registered loader names."""
        return sorted(self._factories.keys())

    def active(self) -> list[str]:
        """List names whose loader has been built in this scope."""
        return sorted(self._loaders.keys())

    def flush_all(self) -> None:
        """Clear the cache of every loader built so far."""
        for loader in self._loaders.values():
            loader.flush()

    def close(self) -> None:
        """Flush and drop all built loaders. Factories stay registered."""
        self.flush_all()
        self._loaders.clear()

    def __enter__(self) -> RequestScope:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
