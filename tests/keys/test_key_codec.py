from __future__ import annotations

import pytest

from batchloader import (
    CacheKey,
    InvalidKeyError,
    denormalize,
    normalize,
    normalize_many,
)


def test_normalize_tags_int_and_str_keys_separately():
    assert normalize(1) == CacheKey("int", 1)
    assert normalize("1") == CacheKey("str", "1")
    assert normalize(1) != normalize("1")
    assert len({normalize(1), normalize("1"), normalize(1)}) == 2


def test_denormalize_is_loss_free():
    for raw in (0, -7, 10**20, "", "abc", "42", ":1"):
        restored = denormalize(normalize(raw))
        assert restored == raw
        assert type(restored) is type(raw)


def test_normalize_passes_cache_keys_through():
    key = normalize("abc")
    assert normalize(key) is key


@pytest.mark.parametrize("raw", [3.14, None, True, [1], {"id": 1}, (1,), b"1"])
def test_normalize_rejects_unsupported_types(raw):
    with pytest.raises(InvalidKeyError, match="integer or string"):
        normalize(raw)


def test_invalid_key_error_is_a_type_error():
    with pytest.raises(TypeError):
        normalize(1.0)


def test_mixed_kinds_sort_deterministically():
    keys = [normalize("b"), normalize(2), normalize("a"), normalize(1)]
    assert [denormalize(k) for k in sorted(keys)] == [1, 2, "a", "b"]


def test_normalize_many_accepts_single_keys_and_iterables():
    assert normalize_many("abc") == [CacheKey("str", "abc")]
    assert normalize_many(5) == [CacheKey("int", 5)]
    assert normalize_many([1, "x"]) == [CacheKey("int", 1), CacheKey("str", "x")]
    assert normalize_many(k for k in (3, 4)) == [CacheKey("int", 3), CacheKey("int", 4)]


def test_normalize_many_fails_on_any_bad_element():
    with pytest.raises(InvalidKeyError):
        normalize_many([1, 2, 3.5])
    with pytest.raises(InvalidKeyError):
        normalize_many(None)


def test_cache_key_renders_for_logs():
    assert str(normalize(5)) == "int:5"
    assert str(normalize("abc")) == "str:abc"
