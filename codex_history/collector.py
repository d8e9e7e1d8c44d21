"""Bounded-concurrency summary collection over many session files."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from codex_history import config
from codex_history.models import SessionSummary
from codex_history.parsers.sessions import parse_session_file

logger = logging.getLogger("codex_history.collector")


async def parse_all(
    paths: list[str],
    concurrency: int = config.CONCURRENCY,
    parse: Callable[[str], SessionSummary] | None = None,
) -> list[SessionSummary]:
    """Parse *paths* with a pull-based pool of at most *concurrency* workers.

    Workers share one cursor and claim the next unparsed path until the list
    is exhausted. Files that fail to parse are dropped. Results arrive in
    completion order, not input order.
    """
    parse_one = parse or parse_session_file
    results: list[SessionSummary] = []
    cursor = 0

    async def worker() -> None:
        nonlocal cursor
        while cursor < len(paths):
            # Claim and advance in one step; no await between them.
            path = paths[cursor]
            cursor += 1
            try:
                summary = await asyncio.to_thread(parse_one, path)
            except Exception as exc:
                logger.debug("Dropping %s: %s", path, exc)
                continue
            results.append(summary)

    worker_count = min(max(1, concurrency), len(paths) or 1)
    await asyncio.gather(*(worker() for _ in range(worker_count)))
    logger.debug("Parsed %d of %d session files", len(results), len(paths))
    return results
