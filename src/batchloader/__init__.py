"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Per-request batching and memoization for N+1 fetch patterns.

Buffer the keys you will need, then read: every outstanding key is resolved
through as few batch function calls as ``batch_size`` allows, and later reads
are served from the loader's request cache.

Quick start::

    from batchloader import BatchingDataLoader

    def fetch_users(ids):
        return db.users.where(id__in=ids)

    users = BatchingDataLoader(fetch_users, batch_size=500)
    users.batch([1, 2, 3])
    user = users.load(2)
"""

from .buffer import KeyBuffer
from .cache import RequestCache
from .errors import (
    BatchResultError,
    DataLoaderError,
    DuplicateKeyError,
    InvalidKeyError,
    LoaderNotRegisteredError,
    LoaderRegistrationError,
)
from .keys import CacheKey, RawKey, denormalize, normalize, normalize_many
from .loader import (
    AsyncBatchFunction,
    AsyncBatchingDataLoader,
    BatchFunction,
    BatchingDataLoader,
    CacheKeyFunction,
    LoaderState,
    default_cache_key,
)
from .metrics import LoaderMetrics, NoOpLoaderMetrics, PrometheusLoaderMetrics
from .scope import RequestScope
from .settings import DEFAULT_BATCH_SIZE, LoaderSettings

__all__ = [
    "BatchingDataLoader",
    "AsyncBatchingDataLoader",
    "BatchFunction",
    "AsyncBatchFunction",
    "CacheKeyFunction",
    "LoaderState",
    "default_cache_key",
    "KeyBuffer",
    "RequestCache",
    "CacheKey",
    "RawKey",
    "normalize",
    "denormalize",
    "normalize_many",
    "LoaderSettings",
    "DEFAULT_BATCH_SIZE",
    "LoaderMetrics",
    "NoOpLoaderMetrics",
    "PrometheusLoaderMetrics",
    "RequestScope",
    "DataLoaderError",
    "InvalidKeyError",
    "BatchResultError",
    "DuplicateKeyError",
    "LoaderNotRegisteredError",
    "LoaderRegistrationError",
]
