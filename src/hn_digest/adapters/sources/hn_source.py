"""Hacker News front page via the Algolia HN API."""

from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from bs4 import BeautifulSoup

from hn_digest.core import CandidateItem, Comment, ItemSource


class HackerNewsSource(ItemSource):
    """Fetch front-page stories and their comment trees."""
    
    def __init__(
        self,
        base_url: str = "https://hn.algolia.com/api/v1",
        comment_depth: int = 2,
        max_replies: int = 2,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.comment_depth = comment_depth
        self.max_replies = max_replies
        self.timeout = timeout
    
    async def fetch_items(self, limit: int) -> list[CandidateItem]:
        """Fetch current front-page stories in the API's ranking order."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self.base_url}/search",
                params={"tags": "front_page", "hitsPerPage": limit},
            )
            response.raise_for_status()
            hits = response.json().get("hits", [])
        
        items: list[CandidateItem] = []
        for hit in hits:
            item = self._parse_hit(hit)
            if item is not None:
                items.append(item)
        return items
    
    async def fetch_comments(self, item_id: str, max_comments: int) -> list[Comment]:
        """Fetch the top comment threads of a story."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(f"{self.base_url}/items/{item_id}")
            response.raise_for_status()
            story = response.json()
        
        return self._extract_comments(story.get("children") or [], max_comments, depth=0)
    
    def _parse_hit(self, hit: dict[str, Any]) -> Optional[CandidateItem]:
        """Convert a search hit; hits without id or title are skipped."""
        try:
            return CandidateItem(
                id=str(hit.get("objectID") or ""),
                title=(hit.get("title") or "").strip(),
                url=hit.get("url") or None,
                score=int(hit.get("points") or 0),
                comment_count=int(hit.get("num_comments") or 0),
                created_at=self._parse_created_at(hit),
            )
        except (TypeError, ValueError) as e:
            print(f"  └─ Skipping malformed hit {hit.get('objectID')!r}: {e}")
            return None
    
    @staticmethod
    def _parse_created_at(hit: dict[str, Any]) -> datetime:
        if hit.get("created_at_i") is not None:
            return datetime.fromtimestamp(int(hit["created_at_i"]), tz=timezone.utc)
        if hit.get("created_at"):
            return datetime.fromisoformat(hit["created_at"].replace("Z", "+00:00"))
        return datetime.now(timezone.utc)
    
    def _extract_comments(
        self, nodes: list[dict[str, Any]], limit: int, depth: int
    ) -> list[Comment]:
        """Walk the comment tree, skipping deleted nodes."""
        comments: list[Comment] = []
        for node in nodes:
            if len(comments) >= limit:
                break
            if node.get("type", "comment") != "comment" or not node.get("text"):
                continue
            
            replies: list[Comment] = []
            if depth + 1 < self.comment_depth:
                replies = self._extract_comments(
                    node.get("children") or [], self.max_replies, depth + 1
                )
            
            comments.append(Comment(
                author=node.get("author") or "[unknown]",
                text=html_to_text(node["text"]),
                score=node.get("points"),
                replies=replies,
            ))
        return comments


def html_to_text(html: str) -> str:
    """Flatten comment HTML to plain text."""
    soup = BeautifulSoup(html, "html.parser")
    return soup.get_text(" ", strip=True)
