"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Request-scoped memoization store.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from .keys import CacheKey, normalize, normalize_many


class RequestCache:
    """
    Key to entity mapping that lives as long as its owning loader.

    A stored ``None`` means the key was resolved and nothing was found, which
    is why presence is checked with ``has`` rather than by value. Entries never
    expire; they leave only through ``forget`` or ``flush``.
    """

    def __init__(self, items: Mapping[Any, Any] | None = None) -> None:
        self._rows: dict[CacheKey, Any] = {}
        if items:
            self.merge(items)

    def has(self, key: Any) -> bool:
        return normalize(key) in self._rows

    def get(self, key: Any, default: Any = None) -> Any:
        return self._rows.get(normalize(key), default)

    def mget(self, keys: Iterable[Any]) -> dict[CacheKey, Any]:
        """Return cached entries for ``keys``; missing keys are omitted."""
        found: dict[CacheKey, Any] = {}
        for key in normalize_many(keys):
            if key in self._rows:
                found[key] = self._rows[key]
        return found

    def put(self, key: Any, value: Any = None) -> RequestCache:
        self._rows[normalize(key)] = value
        return self

    def merge(self, items: Mapping[Any, Any]) -> RequestCache:
        """Write every entry of ``items``, replacing existing values."""
        normalized = {normalize(key): value for key, value in items.items()}
        self._rows.update(normalized)
        return self

    def forget(self, keys: Any) -> RequestCache:
        for key in normalize_many(keys):
            self._rows.pop(key, None)
        return self

    def flush(self) -> RequestCache:
        self._rows.clear()
        return self

    def keys(self) -> list[CacheKey]:
        return list(self._rows)

    def all(self) -> dict[CacheKey, Any]:
        return dict(self._rows)

    def count(self) -> int:
        return len(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: object) -> bool:
        try:
            return self.has(key)
        except TypeError:
            return False

    def __iter__(self) -> Iterator[CacheKey]:
        return iter(list(self._rows))
