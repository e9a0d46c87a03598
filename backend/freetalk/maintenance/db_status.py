"""Print document counts for the main FreeTalk collections.

Usage: freetalk-db-status
"""

from __future__ import annotations

import sys
from typing import Dict, Optional, TextIO

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from freetalk.infra.exceptions import QueryError
from freetalk.infra.mongo import ClientFactory, StoreConfig, StoreSession
from freetalk.maintenance.reporting import write_counts
from freetalk.maintenance.runner import run_cli, run_tool
from freetalk.obs.logging import get_logger

LOGGER = get_logger(__name__)

TOOL_NAME = "db-status"
STATUS_COLLECTIONS = ("users", "posts", "videos", "messages", "clubs")


async def collect_status(session: StoreSession) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for name in STATUS_COLLECTIONS:
        try:
            counts[name] = await session.collection(name).count_documents({})
        except PyMongoError as exc:
            raise QueryError(f"count of {name} failed: {exc}") from exc
    LOGGER.info("collection counts collected", extra={"counts": counts})
    return counts


async def main_async(
    config: Optional[StoreConfig] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    client_factory: ClientFactory = AsyncMongoClient,
) -> int:
    stream = out or sys.stdout

    async def _body(session: StoreSession) -> None:
        write_counts(stream, "Database Status", await collect_status(session))

    return await run_tool(TOOL_NAME, _body, config=config, err=err, client_factory=client_factory)


def main() -> None:
    run_cli(main_async)


if __name__ == "__main__":
    main()
