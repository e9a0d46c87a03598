"""Audit clubs for users listed more than once in a member list.

Usage: freetalk-audit-clubs

Reads STORE_ENDPOINT (or MONGODB_URI) from the environment or .env, prints
one block per club with duplicated members followed by a summary, and exits
non-zero when the store cannot be configured, reached or queried.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from pymongo import AsyncMongoClient

from freetalk.domain.clubs.duplicates import detect, summarize
from freetalk.domain.clubs.models import Finding, Summary
from freetalk.domain.clubs.reader import ClubReader
from freetalk.infra.mongo import ClientFactory, StoreConfig, StoreSession
from freetalk.maintenance.reporting import AuditReporter
from freetalk.maintenance.runner import run_cli, run_tool
from freetalk.obs.logging import get_logger

LOGGER = get_logger(__name__)

TOOL_NAME = "club-audit"


@dataclass
class AuditResult:
    summary: Summary
    findings: List[Finding] = field(default_factory=list)


async def run_audit(session: StoreSession, reporter: AuditReporter) -> AuditResult:
    clubs = await ClubReader(session).list_clubs_with_members()
    reporter.clubs_found(len(clubs))

    findings: List[Finding] = []
    skipped = 0
    for club in clubs:
        skipped += club.skipped_memberships
        finding = detect(club)
        if finding is None:
            continue
        findings.append(finding)
        reporter.finding(finding)

    if skipped:
        LOGGER.debug("memberships without a user skipped", extra={"skipped": skipped})
    summary = summarize(len(clubs), findings)
    reporter.summary(summary)
    LOGGER.info(
        "club audit complete",
        extra={
            "total_clubs": summary.total_clubs,
            "clubs_with_duplicates": summary.clubs_with_duplicates,
            "extra_memberships": summary.extra_memberships,
        },
    )
    return AuditResult(summary=summary, findings=findings)


async def main_async(
    config: Optional[StoreConfig] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    client_factory: ClientFactory = AsyncMongoClient,
) -> int:
    reporter = AuditReporter(out or sys.stdout)

    async def _body(session: StoreSession) -> None:
        await run_audit(session, reporter)

    return await run_tool(TOOL_NAME, _body, config=config, err=err, client_factory=client_factory)


def main() -> None:
    run_cli(main_async)


if __name__ == "__main__":
    main()
