from __future__ import annotations

import asyncio

import pytest

from batchloader import AsyncBatchingDataLoader, BatchResultError, DuplicateKeyError


def run_async(coro):
    return asyncio.run(coro)


class _AsyncTable:
    def __init__(self, rows: dict) -> None:
        self.rows = rows
        self.calls: list[list] = []

    async def __call__(self, keys):
        self.calls.append(list(keys))
        await asyncio.sleep(0)
        return [{"id": key, "value": self.rows[key]} for key in keys if key in self.rows]


def test_async_round_trip_with_two_chunks():
    async def scenario() -> None:
        table = _AsyncTable({1: "foo", 2: "bar", 3: "baz"})
        loader = AsyncBatchingDataLoader(table, batch_size=2)

        loaded = await loader.batch([1, 2, 3]).load_many([1, 2, 3])

        assert {key: row["value"] for key, row in loaded.items()} == {
            1: "foo",
            2: "bar",
            3: "baz",
        }
        assert table.calls == [[1, 2], [3]]
        assert loader.state == "settled"

    run_async(scenario())


def test_async_loader_accepts_sync_batch_function():
    async def scenario() -> None:
        loader = AsyncBatchingDataLoader(lambda keys: [{"id": key} for key in keys])
        assert await loader.batch("a").load("a") == {"id": "a"}

    run_async(scenario())


def test_async_not_found_resolves_once():
    async def scenario() -> None:
        table = _AsyncTable({})
        loader = AsyncBatchingDataLoader(table)

        assert await loader.batch(99).load(99) is None
        assert await loader.load(99) is None
        assert table.calls == [[99]]

    run_async(scenario())


def test_async_non_iterable_result_raises():
    async def scenario() -> None:
        async def fetch(keys):
            return 7

        loader = AsyncBatchingDataLoader(fetch)
        loader.batch([1])
        with pytest.raises(BatchResultError, match="int"):
            await loader.load(1)
        assert loader.pending.dump() == [1]

    run_async(scenario())


def test_async_load_now_and_prime():
    async def scenario() -> None:
        table = _AsyncTable({5: "five"})
        loader = AsyncBatchingDataLoader(table)
        loader.prime({"id": 6, "value": "six"})

        assert (await loader.load_now(5))["value"] == "five"
        assert (await loader.load_many_now([5, 6])) == {
            5: {"id": 5, "value": "five"},
            6: {"id": 6, "value": "six"},
        }
        assert table.calls == [[5]]

        with pytest.raises(DuplicateKeyError):
            loader.prime({"id": 6, "value": "other"})

    run_async(scenario())
