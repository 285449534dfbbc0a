"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Batching data loaders.

A loader collects keys through ``batch``/``buffer`` and resolves them lazily:
the first read after new keys were buffered diffs the buffer against the
request cache and hands the outstanding keys to the batch function in chunks
of at most ``batch_size``. Reads are then answered from the cache.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator, Mapping
from typing import Any, Literal, TypeAlias

from .buffer import KeyBuffer
from .cache import RequestCache
from .errors import BatchResultError, DuplicateKeyError
from .keys import CacheKey, RawKey, denormalize, normalize, normalize_many
from .metrics import (
    BATCH_ERRORS_TOTAL,
    DISPATCH_TOTAL,
    ENTITIES_LOADED_TOTAL,
    KEYS_DISPATCHED_TOTAL,
    LoaderMetrics,
    NoOpLoaderMetrics,
)
from .settings import LoaderSettings

logger = logging.getLogger("batchloader.loader")

BatchFunction: TypeAlias = Callable[[list[RawKey]], Iterable[Any]]
AsyncBatchFunction: TypeAlias = Callable[
    [list[RawKey]], Awaitable[Iterable[Any]] | Iterable[Any]
]
CacheKeyFunction: TypeAlias = Callable[[Any, Any], Any]
LoaderState = Literal["idle", "reconciling", "settled"]


def default_cache_key(entity: Any, index: Any) -> Any:
    """
    Return ``entity.id``, then ``entity["id"]``, then the positional index.

    ``index`` is ``None`` when priming a single entity, so entities without an
    ``id`` must be primed through a loader with an explicit key function.
    """
    key = getattr(entity, "id", None)
    if key is None and isinstance(entity, Mapping):
        key = entity.get("id")
    return index if key is None else key


def _indexed(entities: Any) -> Iterator[tuple[Any, Any]]:
    """Yield ``(index, entity)`` pairs; mappings yield their own keys."""
    if isinstance(entities, Mapping):
        yield from entities.items()
        return
    yield from enumerate(entities)


class _LoaderCore:
    """State and cache bookkeeping shared by the sync and async loaders."""

    def __init__(
        self,
        batch_fn: Callable[..., Any],
        cache_key_fn: CacheKeyFunction | None = None,
        *,
        settings: LoaderSettings | None = None,
        batch_size: int | None = None,
        metrics: LoaderMetrics | None = None,
        name: str = "default",
    ) -> None:
        if not callable(batch_fn):
            raise TypeError("batch_fn must be callable")
        self._batch_fn = batch_fn
        self._cache_key_fn = cache_key_fn or default_cache_key
        self._settings = (settings or LoaderSettings()).with_overrides(
            batch_size=batch_size
        )
        self._metrics: LoaderMetrics = metrics or NoOpLoaderMetrics()
        self._name = name
        self._buffer = KeyBuffer()
        self._cache = RequestCache()
        self._state: LoaderState = "idle"
        self._dispatch_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def batch_size(self) -> int:
        return self._settings.batch_size

    @property
    def settings(self) -> LoaderSettings:
        return self._settings

    @property
    def pending(self) -> KeyBuffer:
        """Keys buffered since the last completed read."""
        return self._buffer

    @property
    def cache(self) -> RequestCache:
        return self._cache

    @property
    def state(self) -> LoaderState:
        return self._state

    @property
    def dispatch_count(self) -> int:
        """Number of batch function invocations over the loader's lifetime."""
        return self._dispatch_count

    def batch(self, keys: Any):
        """Buffer one key or an iterable of keys for the next read."""
        self._buffer.batch(keys)
        self._state = "idle"
        return self

    def buffer(self, key: Any):
        """Buffer a single key for the next read."""
        self._buffer.enqueue(key)
        self._state = "idle"
        return self

    def prime(self, entity: Any, overwrite: bool = False):
        """
        Write one entity straight into the cache.

        Raises:
            DuplicateKeyError: When the entity's key is cached and ``overwrite``
                is false. The cached value is left unchanged.
        """
        key = self._entity_key(entity, None)
        if not overwrite and self._cache.has(key):
            raise DuplicateKeyError(f"Key {key} is already cached")
        self._cache.put(key, entity)
        return self

    def prime_many(self, entities: Iterable[Any], overwrite: bool = False):
        """
        Prime several entities, keyed with their positional index as fallback.

        A bare ``str`` or ``bytes`` is primed as one entity, not per character.
        """
        if isinstance(entities, (str, bytes, bytearray)):
            entities = [entities]
        rows: dict[CacheKey, Any] = {}
        for index, entity in _indexed(entities):
            key = self._entity_key(entity, index)
            if not overwrite and (key in rows or self._cache.has(key)):
                raise DuplicateKeyError(f"Key {key} is already cached")
            rows[key] = entity
        self._cache.merge(rows)
        return self

    def forget(self, key: Any):
        """Drop one cached entry. Buffered keys are left alone."""
        self._cache.forget(normalize(key))
        return self

    def flush(self):
        """Drop every cached entry. Buffered keys are left alone."""
        self._cache.flush()
        return self

    def _entity_key(self, entity: Any, index: Any) -> CacheKey:
        return normalize(self._cache_key_fn(entity, index))

    def _outstanding(self) -> KeyBuffer:
        return self._buffer.deduplicate().diff(self._cache.keys())

    def _enqueue_missing(self, keys: list[CacheKey]) -> None:
        seen: set[CacheKey] = set()
        missing: list[CacheKey] = []
        for key in keys:
            if key in seen or key in self._cache or key in self._buffer:
                continue
            seen.add(key)
            missing.append(key)
        self._buffer.batch(missing)

    def _start_dispatch(self, chunk: list[CacheKey], chunk_index: int) -> list[RawKey]:
        self._dispatch_count += 1
        tags = {"loader": self._name}
        self._metrics.incr(DISPATCH_TOTAL, tags=tags)
        self._metrics.incr(KEYS_DISPATCHED_TOTAL, len(chunk), tags=tags)
        logger.debug(
            "Loader %s dispatching chunk %d with %d keys",
            self._name,
            chunk_index,
            len(chunk),
        )
        return [denormalize(key) for key in chunk]

    def _reject(self, message: str) -> BatchResultError:
        self._metrics.incr(BATCH_ERRORS_TOTAL, tags={"loader": self._name})
        logger.warning("Loader %s: %s", self._name, message)
        return BatchResultError(message)

    def _absorb(self, loaded: Any) -> int:
        """
        Key every entity of one batch result and merge them into the cache.

        The whole result is keyed before anything is written, so a failing key
        function leaves the cache as it was.
        """
        if isinstance(loaded, (str, bytes, bytearray)) or not isinstance(
            loaded, Iterable
        ):
            raise self._reject(
                "Batch function must return an iterable of entities, "
                f"{type(loaded).__name__} found instead."
            )
        rows = {
            self._entity_key(entity, index): entity
            for index, entity in _indexed(loaded)
        }
        self._cache.merge(rows)
        self._metrics.incr(
            ENTITIES_LOADED_TOTAL, len(rows), tags={"loader": self._name}
        )
        return len(rows)

    def _settle(self) -> None:
        self._buffer.flush()
        self._state = "settled"

    def _read_many(self, keys: list[CacheKey]) -> dict[RawKey, Any]:
        return {denormalize(key): value for key, value in self._cache.mget(keys).items()}


class BatchingDataLoader(_LoaderCore):
    """
    Synchronous batching loader with a per-request cache.

    Example::

        users = BatchingDataLoader(fetch_users, batch_size=100)
        users.batch([1, 2, 3])
        first = users.load(1)  # one fetch_users([1, 2, 3]) call
        rest = users.load_many([2, 3])  # served from cache
    """

    def __init__(
        self,
        batch_fn: BatchFunction,
        cache_key_fn: CacheKeyFunction | None = None,
        *,
        settings: LoaderSettings | None = None,
        batch_size: int | None = None,
        metrics: LoaderMetrics | None = None,
        name: str = "default",
    ) -> None:
        super().__init__(
            batch_fn,
            cache_key_fn,
            settings=settings,
            batch_size=batch_size,
            metrics=metrics,
            name=name,
        )

    def reconcile(self) -> RequestCache:
        """
        Resolve every buffered key that is not cached yet.

        On failure the buffer is kept, so keys of the failing chunk and of the
        chunks after it are dispatched again on the next read.
        """
        pending = self._outstanding()
        self._state = "reconciling"
        chunk_index = 0
        try:
            while pending:
                chunk = pending.dequeue(self.batch_size)
                raw_keys = self._start_dispatch(chunk, chunk_index)
                loaded = self._batch_fn(raw_keys)
                if inspect.isawaitable(loaded):
                    if inspect.iscoroutine(loaded):
                        loaded.close()
                    raise self._reject(
                        "Batch function returned an awaitable; "
                        "use AsyncBatchingDataLoader for async batch functions."
                    )
                self._absorb(loaded)
                chunk_index += 1
        except BaseException:
            self._state = "idle"
            raise
        self._settle()
        return self._cache

    def load(self, key: Any) -> Any:
        """Return the entity for ``key``, or ``None`` when it was never resolved."""
        normalized = normalize(key)
        return self.reconcile().get(normalized)

    def load_many(self, keys: Iterable[Any]) -> dict[RawKey, Any]:
        """Return resolved entities for ``keys``; unresolved keys are omitted."""
        normalized = normalize_many(keys)
        self.reconcile()
        return self._read_many(normalized)

    def load_now(self, key: Any) -> Any:
        """Like ``load`` but buffers ``key`` first when it is neither buffered nor cached."""
        normalized = normalize(key)
        self._enqueue_missing([normalized])
        return self.load(normalized)

    def load_many_now(self, keys: Iterable[Any]) -> dict[RawKey, Any]:
        normalized = normalize_many(keys)
        self._enqueue_missing(normalized)
        return self.load_many(normalized)


class AsyncBatchingDataLoader(_LoaderCore):
    """
    Async batching loader. The batch function may be sync or async.

    Chunks are awaited one after another; a loader must not be shared between
    concurrently running tasks.
    """

    def __init__(
        self,
        batch_fn: AsyncBatchFunction,
        cache_key_fn: CacheKeyFunction | None = None,
        *,
        settings: LoaderSettings | None = None,
        batch_size: int | None = None,
        metrics: LoaderMetrics | None = None,
        name: str = "default",
    ) -> None:
        super().__init__(
            batch_fn,
            cache_key_fn,
            settings=settings,
            batch_size=batch_size,
            metrics=metrics,
            name=name,
        )

    async def reconcile(self) -> RequestCache:
        """Async counterpart of ``BatchingDataLoader.reconcile``."""
        pending = self._outstanding()
        self._state = "reconciling"
        chunk_index = 0
        try:
            while pending:
                chunk = pending.dequeue(self.batch_size)
                raw_keys = self._start_dispatch(chunk, chunk_index)
                loaded = self._batch_fn(raw_keys)
                if inspect.isawaitable(loaded):
                    loaded = await loaded
                self._absorb(loaded)
                chunk_index += 1
        except BaseException:
            self._state = "idle"
            raise
        self._settle()
        return self._cache

    async def load(self, key: Any) -> Any:
        normalized = normalize(key)
        cache = await self.reconcile()
        return cache.get(normalized)

    async def load_many(self, keys: Iterable[Any]) -> dict[RawKey, Any]:
        normalized = normalize_many(keys)
        await self.reconcile()
        return self._read_many(normalized)

    async def load_now(self, key: Any) -> Any:
        normalized = normalize(key)
        self._enqueue_missing([normalized])
        return await self.load(normalized)

    async def load_many_now(self, keys: Iterable[Any]) -> dict[RawKey, Any]:
        normalized = normalize_many(keys)
        self._enqueue_missing(normalized)
        return await self.load_many(normalized)
