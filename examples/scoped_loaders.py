"""
scoped_loaders.py - Request-scoped async loaders.

Each simulated request gets its own RequestScope, so caches never leak between
requests.

Usage:
    PYTHONPATH=src python examples/scoped_loaders.py
"""

from batchloader import AsyncBatchingDataLoader, RequestScope

TEAMS = {"core": "Core Platform", "web": "Web"}


async def fetch_teams(slugs):
    print(f"fetch_teams({slugs})")
    return {slug: TEAMS[slug] for slug in slugs if slug in TEAMS}


async def handle_request(slugs: list[str]) -> None:
    with RequestScope({"teams": lambda: AsyncBatchingDataLoader(fetch_teams)}) as scope:
        teams = scope.get("teams")
        teams.batch(slugs)
        print(await teams.load_many(slugs))


async def main() -> None:
    await handle_request(["core", "web", "missing"])
    await handle_request(["core"])


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
