"""Feed 下载与最新条目提取."""

import logging
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any

import feedparser
import httpx
from pydantic import BaseModel

from rssnotifier.core.errors import (
    EmptyFeedError,
    FeedFetchError,
    FeedParseError,
    FetchTimeoutError,
    MissingFieldError,
)

logger = logging.getLogger(__name__)

USER_AGENT = "rss-notifier/0.1"


class FetchedItem(BaseModel):
    """Feed 中最新的一条条目."""

    title: str
    link: str
    description: str = ""
    published_at: datetime


def parse_latest_item(
    content: bytes | str,
    response_headers: dict[str, str] | None = None,
) -> FetchedItem:
    """
    解析 Feed 文档，取第一条（视为最新）条目.

    Args:
        content: Feed 文档内容
        response_headers: HTTP 响应头，用于判断编码

    Returns:
        FetchedItem: 最新条目

    Raises:
        FeedParseError: 文档无法解析或发布时间格式错误
        EmptyFeedError: 文档中没有条目
        MissingFieldError: 条目缺少发布时间、链接或标题
    """
    parsed = feedparser.parse(content, response_headers=response_headers)

    if not parsed.entries:
        if parsed.bozo:
            msg = f"Feed 解析失败: {parsed.get('bozo_exception')}"
            raise FeedParseError(msg)
        msg = "Feed 中没有条目"
        raise EmptyFeedError(msg)

    entry: Any = parsed.entries[0]

    raw_date = entry.get("published")
    if not raw_date:
        msg = "最新条目缺少发布时间"
        raise MissingFieldError(msg)
    try:
        published_at = parsedate_to_datetime(raw_date)
    except (TypeError, ValueError) as e:
        msg = f"发布时间不是 RFC 2822 格式: {raw_date!r}"
        raise FeedParseError(msg) from e

    link = entry.get("link")
    if not link:
        msg = "最新条目缺少链接"
        raise MissingFieldError(msg)

    title = entry.get("title")
    if not title:
        msg = "最新条目缺少标题"
        raise MissingFieldError(msg)

    return FetchedItem(
        title=title,
        link=link,
        description=entry.get("summary") or "",
        published_at=published_at,
    )


class FeedFetcher:
    """下载 Feed 并提取最新条目."""

    def __init__(
        self,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def fetch_latest(self, url: str) -> FetchedItem:
        """下载 Feed 并返回最新条目."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            msg = f"下载 Feed 超时: {url}"
            raise FetchTimeoutError(msg) from e
        except httpx.HTTPError as e:
            msg = f"下载 Feed 失败: {url} - {e}"
            raise FeedFetchError(msg) from e

        logger.debug(f"已下载 {url} ({len(response.content)} 字节)")
        return parse_latest_item(response.content, dict(response.headers))
