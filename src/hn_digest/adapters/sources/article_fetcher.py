"""Best-effort article text extraction."""

import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from hn_digest.core import ArticleFetcher

_WHITESPACE = re.compile(r"\s+")


class HTMLArticleFetcher(ArticleFetcher):
    """Download a page and keep its readable text."""
    
    def __init__(
        self,
        timeout: float = 10.0,
        max_chars: int = 5000,
        user_agent: str = "Mozilla/5.0 (compatible; HN-Digest/1.0)",
    ) -> None:
        self.timeout = timeout
        self.max_chars = max_chars
        self.user_agent = user_agent
    
    async def fetch(self, url: str) -> Optional[str]:
        """Return cleaned text, or None on any failure."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url, headers={"User-Agent": self.user_agent})
                response.raise_for_status()
                html = response.text
            text = self.extract_text(html)
        except Exception as e:
            print(f"  └─ ⚠️  Could not fetch article from {url}: {e}")
            return None
        
        return text or None
    
    def extract_text(self, html: str) -> str:
        """Strip non-content markup, prefer article/main, collapse whitespace."""
        soup = BeautifulSoup(html, "html.parser")
        
        for tag in soup(["script", "style", "nav", "header", "footer", "noscript"]):
            tag.decompose()
        
        text = ""
        for selector in ("article", "main", "body"):
            node = soup.find(selector)
            if node is not None:
                text = node.get_text(" ")
                if text.strip():
                    break
        if not text.strip():
            text = soup.get_text(" ")
        
        return _WHITESPACE.sub(" ", text).strip()[: self.max_chars]
