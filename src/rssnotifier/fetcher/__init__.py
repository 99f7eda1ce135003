"""Feed 抓取模块."""

from rssnotifier.fetcher.feed import FeedFetcher, FetchedItem, parse_latest_item

__all__ = [
    "FeedFetcher",
    "FetchedItem",
    "parse_latest_item",
]
