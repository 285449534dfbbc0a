from __future__ import annotations

import pytest

from batchloader import (
    BatchingDataLoader,
    LoaderNotRegisteredError,
    LoaderRegistrationError,
    RequestScope,
)


def _users_factory(calls: list[list]):
    def fetch(keys):
        calls.append(list(keys))
        return [{"id": key} for key in keys]

    return lambda: BatchingDataLoader(fetch)


def test_scope_builds_one_loader_per_name():
    calls: list[list] = []
    scope = RequestScope({"users": _users_factory(calls)})

    first = scope.get("users")
    assert scope["users"] is first
    assert scope.names() == ["users"]
    assert scope.active() == ["users"]

    first.batch([1, 2]).load(1)
    assert scope.get("users").load(2) == {"id": 2}
    assert calls == [[1, 2]]


def test_scopes_do_not_share_caches():
    calls: list[list] = []
    factory = _users_factory(calls)

    with RequestScope({"users": factory}) as first:
        first.get("users").batch(1).load(1)
    with RequestScope({"users": factory}) as second:
        second.get("users").batch(1).load(1)

    assert calls == [[1], [1]]


def test_exit_flushes_and_drops_loaders():
    calls: list[list] = []
    scope = RequestScope({"users": _users_factory(calls)})
    loader = scope.get("users")
    loader.batch(1).load(1)

    with scope:
        pass

    assert loader.cache.count() == 0
    assert scope.active() == []
    assert scope.get("users") is not loader


def test_flush_all_keeps_instances():
    scope = RequestScope({"users": _users_factory([])})
    loader = scope.get("users")
    loader.batch(1).load(1)

    scope.flush_all()

    assert loader.cache.count() == 0
    assert scope.get("users") is loader


def test_registration_errors():
    scope = RequestScope()
    scope.register("users", _users_factory([]))

    with pytest.raises(LoaderRegistrationError, match="already registered"):
        scope.register("users", _users_factory([]))
    with pytest.raises(LoaderRegistrationError, match="non-empty"):
        scope.register("  ", _users_factory([]))
    with pytest.raises(LoaderNotRegisteredError):
        scope.get("teams")

    scope.register("users", _users_factory([]), overwrite=True)
    assert scope.names() == ["users"]
