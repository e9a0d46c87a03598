"""Detect users listed more than once in a club's member list."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, Optional

from freetalk.domain.clubs.models import Club, DuplicateEntry, Finding, Summary


def detect(club: Club) -> Optional[Finding]:
    """Return a finding for ``club`` when a user id appears more than once.

    Members without a user reference, or whose user has no id, are skipped.
    Duplicates keep the order in which their id first occurs.
    """
    ids = [member.user_key for member in club.members if member.user_key is not None]
    total = len(ids)
    unique = len(set(ids))
    if total == unique:
        return None

    counts = Counter(ids)
    duplicates: Dict[str, DuplicateEntry] = {}
    for user_id, count in counts.items():
        if count < 2:
            continue
        duplicates[user_id] = DuplicateEntry(count=count, display_name=_display_name(club, user_id))

    return Finding(
        club_id=club.id,
        club_name=club.name,
        total_members=total,
        unique_members=unique,
        duplicates=duplicates,
    )


def _display_name(club: Club, user_id: str) -> str:
    for member in club.members:
        if member.user_key == user_id:
            return member.user.name or user_id  # type: ignore[union-attr]
    return user_id


def summarize(total_clubs: int, findings: Iterable[Finding]) -> Summary:
    findings = list(findings)
    return Summary(
        total_clubs=total_clubs,
        clubs_with_duplicates=len(findings),
        extra_memberships=sum(finding.extra_memberships for finding in findings),
    )
