"""Cleanup — removes stored files that no record points at.

Metadata lives in memory, so anything on disk at startup is left over
from a previous run, and a failed deletion leaves bytes nobody can reach.
Runs once at startup; run standalone with: python cleanup.py
"""

import asyncio
import logging

from context import RelayContext
from logging_config import setup_logging

logger = logging.getLogger(__name__)


async def run_cleanup(context: RelayContext) -> int:
    """Delete orphaned stored files. Returns the number removed."""
    count = 0

    for file_id in context.storage.list_ids():
        if file_id in context.registry or file_id in context.sessions:
            continue
        if await context.storage.delete(file_id):
            count += 1

    if count:
        logger.info("Removed %d orphaned file%s", count, "" if count == 1 else "s")
    return count


if __name__ == "__main__":
    setup_logging()
    asyncio.run(run_cleanup(RelayContext()))
