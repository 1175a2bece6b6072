"""Source adapters for fetching stories and article text."""

from hn_digest.adapters.sources.article_fetcher import HTMLArticleFetcher
from hn_digest.adapters.sources.hn_source import HackerNewsSource

__all__ = ["HTMLArticleFetcher", "HackerNewsSource"]
