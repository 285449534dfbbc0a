#!/usr/bin/env python3
"""
Loader benchmark utility for buffer/cache reconciliation overhead.

Usage examples:
  PYTHONPATH=src python scripts/loader_benchmark.py
  PYTHONPATH=src python scripts/loader_benchmark.py --mode async --num-keys 50000 --batch-size 500
"""

from __future__ import annotations

import argparse
import asyncio
import random
import statistics
import time
import uuid

from batchloader import AsyncBatchingDataLoader, BatchingDataLoader


def make_rows(num_keys: int) -> dict[str, dict[str, str]]:
    rows: dict[str, dict[str, str]] = {}
    for _ in range(num_keys):
        key = uuid.uuid4().hex
        rows[key] = {"id": key, "payload": random.randbytes(256).hex()}
    return rows


def run_sync(rows: dict[str, dict[str, str]], *, batch_size: int, reads: int) -> tuple[float, list[float], int]:
    call_durations: list[float] = []

    def fetch(keys: list[str]) -> list[dict[str, str]]:
        started = time.perf_counter()
        found = [rows[key] for key in keys if key in rows]
        call_durations.append(time.perf_counter() - started)
        return found

    loader = BatchingDataLoader(fetch, batch_size=batch_size)
    keys = list(rows)
    started = time.perf_counter()
    loader.batch(keys)
    for key in random.sample(keys, min(reads, len(keys))):
        loader.load(key)
    return time.perf_counter() - started, call_durations, loader.dispatch_count


async def run_async(rows: dict[str, dict[str, str]], *, batch_size: int, reads: int) -> tuple[float, list[float], int]:
    call_durations: list[float] = []

    async def fetch(keys: list[str]) -> list[dict[str, str]]:
        started = time.perf_counter()
        await asyncio.sleep(0)
        found = [rows[key] for key in keys if key in rows]
        call_durations.append(time.perf_counter() - started)
        return found

    loader = AsyncBatchingDataLoader(fetch, batch_size=batch_size)
    keys = list(rows)
    started = time.perf_counter()
    loader.batch(keys)
    for key in random.sample(keys, min(reads, len(keys))):
        await loader.load(key)
    return time.perf_counter() - started, call_durations, loader.dispatch_count


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Loader benchmark utility")
    parser.add_argument("--mode", choices=("sync", "async"), default="sync")
    parser.add_argument("--num-keys", type=int, default=10000)
    parser.add_argument("--batch-size", type=int, default=1000)
    parser.add_argument("--reads", type=int, default=1000)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    rows = make_rows(args.num_keys)
    if args.mode == "async":
        elapsed, durations, calls = asyncio.run(
            run_async(rows, batch_size=args.batch_size, reads=args.reads)
        )
    else:
        elapsed, durations, calls = run_sync(
            rows, batch_size=args.batch_size, reads=args.reads
        )

    p50 = statistics.median(durations) if durations else 0.0
    print(f"mode={args.mode}")
    print(f"keys={args.num_keys}")
    print(f"batch_size={args.batch_size}")
    print(f"reads={args.reads}")
    print(f"batch_calls={calls}")
    print(f"elapsed_s={elapsed:.4f}")
    print(f"batch_call_p50_ms={p50 * 1000:.3f}")


if __name__ == "__main__":
    main()
