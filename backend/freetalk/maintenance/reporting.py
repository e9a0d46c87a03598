"""Plain-text reports printed by the maintenance tools."""

from __future__ import annotations

from typing import Iterable, Mapping, TextIO

from freetalk.domain.clubs.models import Finding, Summary

RULE = "=" * 40
REPAIR_TOOL = "fix-duplicate-clubs"


class AuditReporter:
    """Writes the duplicate membership report to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def _line(self, text: str = "") -> None:
        print(text, file=self._stream)

    def clubs_found(self, count: int) -> None:
        self._line(f"Found {count} clubs in the database")

    def finding(self, finding: Finding) -> None:
        self._line()
        self._line("DUPLICATE MEMBERSHIP FOUND:")
        self._line(f"   Club: {finding.club_name} ({finding.club_id})")
        self._line(f"   Total members: {finding.total_members}")
        self._line(f"   Unique members: {finding.unique_members}")
        for entry in finding.duplicates.values():
            self._line(f"   Duplicated user: {entry.display_name} appears {entry.count} times")

    def summary(self, summary: Summary) -> None:
        self._line()
        self._line(RULE)
        self._line("SUMMARY:")
        self._line(f"   Total clubs: {summary.total_clubs}")
        self._line(f"   Clubs with duplicate memberships: {summary.clubs_with_duplicates}")
        self._line(f"   Total extra memberships: {summary.extra_memberships}")
        self._line()
        if summary.has_duplicates:
            self._line("Duplicates found! Remove the duplicate entries before they spread.")
            self._line(f"   Run the {REPAIR_TOOL} tool to clean them up.")
        else:
            self._line("No duplicate memberships found!")
        self._line(RULE)


def write_counts(stream: TextIO, title: str, counts: Mapping[str, int]) -> None:
    print(f"\n{title}:", file=stream)
    print(RULE, file=stream)
    width = max((len(label) for label in counts), default=0)
    for label, value in counts.items():
        print(f"{label.capitalize() + ':':<{width + 2}}{value}", file=stream)
    print(RULE, file=stream)


def write_lines(stream: TextIO, lines: Iterable[str]) -> None:
    for line in lines:
        print(line, file=stream)


def failure(stream: TextIO, tool: str, exc: BaseException) -> None:
    print(f"{tool} failed: {exc}", file=stream)
