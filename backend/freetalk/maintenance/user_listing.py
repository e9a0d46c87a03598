"""List admin accounts and recently registered users.

Usage:
    freetalk-list-admins
    freetalk-list-users [--limit N]
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, TextIO

from pymongo import DESCENDING, AsyncMongoClient
from pymongo.errors import PyMongoError

from freetalk.infra.exceptions import QueryError
from freetalk.infra.mongo import ClientFactory, StoreConfig, StoreSession
from freetalk.maintenance.reporting import RULE, write_lines
from freetalk.maintenance.runner import run_cli, run_tool

USERS_COLLECTION = "users"
USER_PROJECTION = {"name": 1, "email": 1, "isAdmin": 1, "createdAt": 1}
DEFAULT_RECENT_LIMIT = 10


@dataclass(frozen=True)
class UserRecord:
    id: Any
    name: str
    email: Optional[str]
    is_admin: bool
    created_at: Optional[datetime]

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "UserRecord":
        created_at = doc.get("createdAt")
        return cls(
            id=doc.get("_id"),
            name=doc.get("name") or "(unnamed)",
            email=doc.get("email"),
            is_admin=bool(doc.get("isAdmin", False)),
            created_at=created_at if isinstance(created_at, datetime) else None,
        )

    @property
    def joined(self) -> str:
        return self.created_at.date().isoformat() if self.created_at else "unknown"


async def _find_users(session: StoreSession, query: Mapping[str, Any], limit: Optional[int] = None) -> List[UserRecord]:
    try:
        cursor = session.collection(USERS_COLLECTION).find(query, USER_PROJECTION).sort("createdAt", DESCENDING)
        if limit is not None:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=None)
    except PyMongoError as exc:
        raise QueryError(f"user query failed: {exc}") from exc
    return [UserRecord.from_document(doc) for doc in docs]


async def list_admins(session: StoreSession) -> List[UserRecord]:
    return await _find_users(session, {"isAdmin": True})


async def list_recent_users(session: StoreSession, limit: int = DEFAULT_RECENT_LIMIT) -> List[UserRecord]:
    return await _find_users(session, {}, limit=limit)


def format_admins(admins: Sequence[UserRecord]) -> List[str]:
    if not admins:
        return ["No admin users found!"]
    lines = [f"Found {len(admins)} admin user{'s' if len(admins) != 1 else ''}:", RULE]
    for index, admin in enumerate(admins, start=1):
        lines.extend(
            [
                "",
                f"{index}. {admin.name}",
                f"   Email: {admin.email or '(no email)'}",
                f"   ID: {admin.id}",
                f"   Joined: {admin.joined}",
            ]
        )
    lines.extend(["", RULE, f"Total admin users: {len(admins)}"])
    return lines


def format_recent_users(users: Sequence[UserRecord], limit: int) -> List[str]:
    if not users:
        return ["No users found in database!"]
    lines = [f"Found {len(users)} recent user{'s' if len(users) != 1 else ''} (showing max {limit}):", RULE]
    for index, user in enumerate(users, start=1):
        lines.extend(
            [
                "",
                f"{index}. {user.name}",
                f"   Email: {user.email or '(no email)'}",
                f"   Admin: {'Yes' if user.is_admin else 'No'}",
                f"   Joined: {user.joined}",
            ]
        )
    lines.extend(["", RULE, f"Total users shown: {len(users)}"])
    return lines


async def admins_main_async(
    config: Optional[StoreConfig] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    client_factory: ClientFactory = AsyncMongoClient,
) -> int:
    stream = out or sys.stdout

    async def _body(session: StoreSession) -> None:
        write_lines(stream, format_admins(await list_admins(session)))

    return await run_tool("list-admins", _body, config=config, err=err, client_factory=client_factory)


async def users_main_async(
    limit: int = DEFAULT_RECENT_LIMIT,
    config: Optional[StoreConfig] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    client_factory: ClientFactory = AsyncMongoClient,
) -> int:
    stream = out or sys.stdout

    async def _body(session: StoreSession) -> None:
        write_lines(stream, format_recent_users(await list_recent_users(session, limit), limit))

    return await run_tool("list-users", _body, config=config, err=err, client_factory=client_factory)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("limit must be at least 1")
    return number


def admins_main() -> None:
    run_cli(admins_main_async)


def users_main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="List the most recently registered users")
    parser.add_argument("--limit", type=_positive_int, default=DEFAULT_RECENT_LIMIT, help="number of users to show")
    args = parser.parse_args(argv)
    run_cli(lambda: users_main_async(limit=args.limit))


if __name__ == "__main__":
    users_main()
