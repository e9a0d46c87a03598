"""Shared lifecycle for one-shot store tools: session, error mapping, exit code."""

from __future__ import annotations

import asyncio
import sys
import uuid
from typing import Awaitable, Callable, Optional, TextIO

from pymongo import AsyncMongoClient

from freetalk import obs
from freetalk.infra.exceptions import StoreError
from freetalk.infra.mongo import ClientFactory, StoreConfig, StoreSession, open_session
from freetalk.maintenance.reporting import failure
from freetalk.obs.logging import bind_context, get_logger, reset_context

LOGGER = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

ToolBody = Callable[[StoreSession], Awaitable[object]]


async def run_tool(
    tool: str,
    body: ToolBody,
    *,
    config: Optional[StoreConfig] = None,
    err: Optional[TextIO] = None,
    client_factory: ClientFactory = AsyncMongoClient,
) -> int:
    """Run ``body`` inside a store session and map the outcome to an exit code."""
    err = err or sys.stderr
    tokens = bind_context(tool=tool, run_id=uuid.uuid4().hex)
    try:
        async with open_session(config or StoreConfig.from_settings(), client_factory=client_factory) as session:
            await body(session)
    except StoreError as exc:
        LOGGER.error("tool failed", extra={"error": exc.detail})
        failure(err, tool, exc)
        return EXIT_FAILURE
    except Exception as exc:
        LOGGER.exception("tool failed unexpectedly")
        failure(err, tool, exc)
        return EXIT_FAILURE
    finally:
        reset_context(tokens)
    LOGGER.info("tool finished")
    return EXIT_OK


def run_cli(main_async: Callable[[], Awaitable[int]]) -> None:
    obs.init()
    try:
        code = asyncio.run(main_async())
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        code = EXIT_FAILURE
    sys.exit(code)
