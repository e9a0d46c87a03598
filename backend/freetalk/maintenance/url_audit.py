"""Find stored media URLs whose scheme lost its colon (``https//host/...``).

Usage: freetalk-url-audit

Checks user avatars, post images and video/thumbnail URLs. Read-only; the
offending documents are listed so they can be repaired by hand.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, TextIO

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from freetalk.infra.exceptions import QueryError
from freetalk.infra.mongo import ClientFactory, StoreConfig, StoreSession
from freetalk.maintenance.reporting import RULE, write_lines
from freetalk.maintenance.runner import run_cli, run_tool
from freetalk.obs.logging import get_logger

LOGGER = get_logger(__name__)

TOOL_NAME = "url-audit"
MALFORMED_PATTERN = r"https?//"
MALFORMED_URL = re.compile(MALFORMED_PATTERN)
UNKNOWN_AUTHOR = "Unknown"


@dataclass(frozen=True)
class MalformedUrl:
    document_id: Any
    owner: str
    field: str
    url: str


@dataclass
class UrlAuditReport:
    avatars: List[MalformedUrl] = field(default_factory=list)
    post_images: List[MalformedUrl] = field(default_factory=list)
    videos: List[MalformedUrl] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.avatars) + len(self.post_images) + len(self.videos)


def is_malformed(url: Any) -> bool:
    return isinstance(url, str) and MALFORMED_URL.search(url) is not None


def _values(value: Any) -> Iterable[Any]:
    if isinstance(value, (list, tuple)):
        return value
    return [value]


def _regex(field_name: str) -> Dict[str, Any]:
    return {field_name: {"$regex": MALFORMED_PATTERN}}


async def _fetch(session: StoreSession, name: str, query: Mapping[str, Any], projection: Mapping[str, int]) -> List[Dict[str, Any]]:
    try:
        return await session.collection(name).find(query, projection).to_list(length=None)
    except PyMongoError as exc:
        raise QueryError(f"{name} query failed: {exc}") from exc


async def _author_names(session: StoreSession, author_ids: List[Any]) -> Dict[Any, str]:
    if not author_ids:
        return {}
    docs = await _fetch(session, "users", {"_id": {"$in": author_ids}}, {"name": 1})
    return {doc["_id"]: doc.get("name") or UNKNOWN_AUTHOR for doc in docs}


async def find_malformed_urls(session: StoreSession) -> UrlAuditReport:
    report = UrlAuditReport()

    for user in await _fetch(session, "users", _regex("avatar"), {"name": 1, "avatar": 1}):
        if is_malformed(user.get("avatar")):
            report.avatars.append(MalformedUrl(user["_id"], user.get("name") or UNKNOWN_AUTHOR, "avatar", user["avatar"]))

    posts = await _fetch(session, "posts", _regex("images"), {"author": 1, "images": 1})
    author_ids = list(dict.fromkeys(post["author"] for post in posts if post.get("author") is not None))
    authors = await _author_names(session, author_ids)
    for post in posts:
        owner = authors.get(post.get("author"), UNKNOWN_AUTHOR)
        for image in _values(post.get("images")):
            if is_malformed(image):
                report.post_images.append(MalformedUrl(post["_id"], owner, "images", image))

    video_query = {"$or": [_regex("videoUrl"), _regex("thumbnailUrl")]}
    for video in await _fetch(session, "videos", video_query, {"title": 1, "videoUrl": 1, "thumbnailUrl": 1}):
        title = video.get("title") or str(video["_id"])
        for field_name in ("videoUrl", "thumbnailUrl"):
            if is_malformed(video.get(field_name)):
                report.videos.append(MalformedUrl(video["_id"], title, field_name, video[field_name]))

    LOGGER.info(
        "url audit complete",
        extra={
            "avatars": len(report.avatars),
            "post_images": len(report.post_images),
            "videos": len(report.videos),
        },
    )
    return report


def format_report(report: UrlAuditReport) -> List[str]:
    lines = [f"Users with malformed avatars: {len(report.avatars)}"]
    lines.extend(f"   {item.owner}: {item.url}" for item in report.avatars)
    lines.append(f"Post images with malformed URLs: {len(report.post_images)}")
    lines.extend(f"   Post {item.document_id} by {item.owner}: {item.url}" for item in report.post_images)
    lines.append(f"Video URLs that are malformed: {len(report.videos)}")
    lines.extend(f"   {item.owner} ({item.field}): {item.url}" for item in report.videos)
    lines.append(RULE)
    if report.total:
        lines.append(f"Found {report.total} malformed URLs.")
    else:
        lines.append("No malformed URLs found!")
    return lines


async def main_async(
    config: Optional[StoreConfig] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    client_factory: ClientFactory = AsyncMongoClient,
) -> int:
    stream = out or sys.stdout

    async def _body(session: StoreSession) -> None:
        write_lines(stream, format_report(await find_malformed_urls(session)))

    return await run_tool(TOOL_NAME, _body, config=config, err=err, client_factory=client_factory)


def main() -> None:
    run_cli(main_async)


if __name__ == "__main__":
    main()
