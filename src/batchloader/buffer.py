"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Pending-key buffer used by batch loaders.
"""

from __future__ import annotations

from collections import Counter, deque
from collections.abc import Iterable, Iterator
from typing import Any

from .keys import CacheKey, RawKey, denormalize, normalize, normalize_many


class KeyBuffer:
    """
    Ordered multiset of keys waiting to be resolved.

    Membership checks go through a per-key count, so they do not scan the
    queue. Enqueueing never deduplicates; ``deduplicate`` and ``diff`` return new
    buffers and leave this one untouched. ``dequeue`` and ``flush`` are the only
    operations that remove keys.
    """

    def __init__(self, keys: Iterable[Any] = ()) -> None:
        self._keys: deque[CacheKey] = deque(normalize_many(keys))
        self._counts: Counter[CacheKey] = Counter(self._keys)

    def enqueue(self, key: Any) -> KeyBuffer:
        """Append one key."""
        normalized = normalize(key)
        self._keys.append(normalized)
        self._counts[normalized] += 1
        return self

    def batch(self, keys: Any) -> KeyBuffer:
        """Append a single key or every key of an iterable."""
        normalized = normalize_many(keys)
        self._keys.extend(normalized)
        self._counts.update(normalized)
        return self

    def deduplicate(self) -> KeyBuffer:
        """Return a buffer without repeated keys, keeping first-seen order."""
        return KeyBuffer(dict.fromkeys(self._keys))

    def diff(self, exclude_keys: Iterable[Any]) -> KeyBuffer:
        """Return a buffer holding only keys absent from ``exclude_keys``."""
        excluded = set(normalize_many(exclude_keys))
        return KeyBuffer(key for key in self._keys if key not in excluded)

    def dequeue(self, limit: int) -> list[CacheKey]:
        """Remove and return up to ``limit`` keys from the front."""
        if limit < 1:
            raise ValueError("limit must be >= 1")
        taken: list[CacheKey] = []
        while self._keys and len(taken) < limit:
            key = self._keys.popleft()
            taken.append(key)
            self._counts[key] -= 1
            if not self._counts[key]:
                del self._counts[key]
        return taken

    def flush(self) -> KeyBuffer:
        """Remove every key."""
        self._keys.clear()
        self._counts.clear()
        return self

    def count(self) -> int:
        return len(self._keys)

    def last(self) -> CacheKey | None:
        """Most recently enqueued key, or ``None`` when empty."""
        return self._keys[-1] if self._keys else None

    def dump(self) -> list[RawKey]:
        """Caller-visible keys in buffer order."""
        return [denormalize(key) for key in self._keys]

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __iter__(self) -> Iterator[CacheKey]:
        return iter(list(self._keys))

    def __contains__(self, key: object) -> bool:
        try:
            return normalize(key) in self._counts
        except TypeError:
            return False

    def __repr__(self) -> str:
        return f"KeyBuffer({self.dump()!r})"
