"""Tests for article text extraction."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from hn_digest.adapters.sources import HTMLArticleFetcher

PAGE = """<html>
<head><title>Post</title><style>body { color: red; }</style></head>
<body>
  <nav>Home | About</nav>
  <header>Site header</header>
  <article>
    <h1>Building a compiler</h1>
    <p>Parsing   is the
       first step.</p>
    <script>track()</script>
  </article>
  <footer>Copyright</footer>
</body>
</html>"""


def test_extract_text_prefers_article() -> None:
    fetcher = HTMLArticleFetcher()
    
    text = fetcher.extract_text(PAGE)
    
    assert text == "Building a compiler Parsing is the first step."


def test_extract_text_falls_back_to_body() -> None:
    fetcher = HTMLArticleFetcher()
    
    text = fetcher.extract_text("<html><body><div>Plain body text</div><footer>x</footer></body></html>")
    
    assert text == "Plain body text"


def test_extract_text_truncates() -> None:
    fetcher = HTMLArticleFetcher(max_chars=10)
    
    assert fetcher.extract_text("<main>" + "word " * 20 + "</main>") == "word word "


@pytest.mark.asyncio
async def test_fetch_returns_text() -> None:
    fetcher = HTMLArticleFetcher()
    
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_response = MagicMock()
        mock_response.text = PAGE
        
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        mock_client.get.return_value = mock_response
        mock_client_class.return_value = mock_client
        
        text = await fetcher.fetch("https://example.com/post")
        
        assert text.startswith("Building a compiler")
        headers = mock_client.get.call_args.kwargs["headers"]
        assert "HN-Digest" in headers["User-Agent"]


@pytest.mark.asyncio
async def test_fetch_failure_returns_none() -> None:
    fetcher = HTMLArticleFetcher()
    
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        mock_client.get.side_effect = httpx.ConnectTimeout("timed out")
        mock_client_class.return_value = mock_client
        
        assert await fetcher.fetch("https://example.com/slow") is None
