"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Key normalization for buffers and request caches.

Callers hand loaders plain ``int`` and ``str`` keys. Internally every key is
wrapped in a ``CacheKey`` tagged with its kind so that ``1`` and ``"1"`` never
collide and keys of mixed kinds still sort deterministically.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from .errors import InvalidKeyError

RawKey: TypeAlias = int | str
KeyKind = Literal["int", "str"]


@dataclass(frozen=True, slots=True, order=True)
class CacheKey:
    """Tagged, hashable and totally ordered key used by buffers and caches."""

    kind: KeyKind
    value: RawKey

    def __str__(self) -> str:
        return f"{self.kind}:{self.value}"


def _type_name(raw: Any) -> str:
    return "None" if raw is None else type(raw).__name__


def normalize(raw: Any) -> CacheKey:
    """
    Convert a caller-visible key into its ``CacheKey`` form.

    Raises:
        InvalidKeyError: When ``raw`` is not an ``int`` or ``str``. ``bool`` is
            rejected even though it subclasses ``int``.
    """
    if isinstance(raw, CacheKey):
        return raw
    if isinstance(raw, bool):
        raise InvalidKeyError("Key must be an integer or string, bool found instead.")
    if isinstance(raw, int):
        return CacheKey("int", raw)
    if isinstance(raw, str):
        return CacheKey("str", raw)
    raise InvalidKeyError(
        f"Key must be an integer or string, {_type_name(raw)} found instead."
    )


def denormalize(key: CacheKey) -> RawKey:
    """Return the caller-visible value of a normalized key."""
    return key.value


def normalize_many(raw_keys: Any) -> list[CacheKey]:
    """
    Normalize one key or an iterable of keys.

    A bare ``str`` is a single key. Every element is validated before the
    result is returned, so a bad element fails the whole call.
    """
    if isinstance(raw_keys, (str, int, CacheKey)):
        return [normalize(raw_keys)]
    if isinstance(raw_keys, Iterable) and not isinstance(raw_keys, (bytes, bytearray)):
        return [normalize(raw) for raw in raw_keys]
    raise InvalidKeyError(
        f"Key must be an integer or string, {_type_name(raw_keys)} found instead."
    )
