"""
basic_loader.py - Minimal batching loader example.

Demonstrates resolving the authors of many posts with one batch call instead
of one lookup per post.

Usage:
    PYTHONPATH=src python examples/basic_loader.py
"""

import logging

from batchloader import BatchingDataLoader

USERS = {1: "ada", 2: "grace", 3: "linus"}
POSTS = [(10, 1), (11, 2), (12, 1), (13, 3), (14, 4)]


def fetch_users(ids):
    print(f"fetch_users({ids})")
    return [{"id": user_id, "name": USERS[user_id]} for user_id in ids if user_id in USERS]


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)
    users = BatchingDataLoader(fetch_users, batch_size=2)

    for _, author_id in POSTS:
        users.batch(author_id)

    for post_id, author_id in POSTS:
        author = users.load(author_id)
        print(post_id, author["name"] if author else "<deleted>")


if __name__ == "__main__":
    main()
