"""Read clubs with their member users resolved."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any, Dict, List, Mapping

from pymongo.errors import PyMongoError

from freetalk.domain.clubs.models import Club
from freetalk.infra.exceptions import QueryError
from freetalk.infra.mongo import StoreSession
from freetalk.obs.logging import get_logger

LOGGER = get_logger(__name__)

CLUBS_COLLECTION = "clubs"
USERS_COLLECTION = "users"
CLUB_PROJECTION = {"name": 1, "members": 1}
USER_PROJECTION = {"name": 1, "email": 1}


class ClubReader:
    def __init__(self, session: StoreSession) -> None:
        self._session = session

    async def list_clubs_with_members(self) -> List[Club]:
        """Return every club with ``members[].user`` populated as ``{_id, name, email}``.

        A reference to a user that no longer exists resolves to ``None``.
        """
        try:
            raw_clubs = await self._session.collection(CLUBS_COLLECTION).find({}, CLUB_PROJECTION).to_list(length=None)
            users = await self._load_users(_referenced_user_ids(raw_clubs))
        except PyMongoError as exc:
            raise QueryError(f"club query failed: {exc}") from exc

        LOGGER.info("clubs loaded", extra={"clubs": len(raw_clubs), "users": len(users)})
        return [Club.from_document(_populate_members(raw, users)) for raw in raw_clubs]

    async def _load_users(self, user_ids: List[Any]) -> Dict[Any, Mapping[str, Any]]:
        if not user_ids:
            return {}
        cursor = self._session.collection(USERS_COLLECTION).find({"_id": {"$in": user_ids}}, USER_PROJECTION)
        docs = await cursor.to_list(length=None)
        return {doc["_id"]: doc for doc in docs}


def _is_reference(value: Any) -> bool:
    return value is not None and not isinstance(value, Mapping)


def _resolve(value: Any, users: Mapping[Any, Mapping[str, Any]]) -> Any:
    return users.get(value) if isinstance(value, Hashable) else None


def _referenced_user_ids(raw_clubs: List[Mapping[str, Any]]) -> List[Any]:
    seen = set()
    ordered: List[Any] = []
    for raw in raw_clubs:
        for member in raw.get("members") or []:
            if not isinstance(member, Mapping):
                continue
            user = member.get("user")
            if _is_reference(user) and isinstance(user, Hashable) and user not in seen:
                seen.add(user)
                ordered.append(user)
    return ordered


def _populate_members(raw: Mapping[str, Any], users: Mapping[Any, Mapping[str, Any]]) -> Dict[str, Any]:
    populated = dict(raw)
    members = []
    for member in raw.get("members") or []:
        if isinstance(member, Mapping) and _is_reference(member.get("user")):
            member = {**member, "user": _resolve(member["user"], users)}
        members.append(member)
    populated["members"] = members
    return populated
