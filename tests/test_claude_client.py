"""Tests for Claude client."""

import time
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from hn_digest.adapters.llm import ClaudeClient
from hn_digest.config import Settings


@pytest.fixture
def mock_settings() -> Settings:
    """Create mock settings."""
    settings = Settings(anthropic_api_key="test-key")
    # Set values directly in claude config object
    settings.claude.max_retries = 3
    settings.claude.initial_retry_delay = 0.1  # Faster for tests
    settings.claude.request_delay = 0.05
    return settings


def ok_response(text: str) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {"content": [{"type": "text", "text": text}]}
    return response


def mock_http(mock_client_class: MagicMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    mock_client_class.return_value = mock_client
    return mock_client


@pytest.mark.asyncio
async def test_complete_success(mock_settings: Settings) -> None:
    """Test a successful completion returns the text and sends the system prompt."""
    client = ClaudeClient(mock_settings)
    
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class)
        mock_client.post.return_value = ok_response("YES - relevant")
        
        answer = await client.complete("Is this relevant?", system="Be decisive.")
        
        assert answer == "YES - relevant"
        payload = mock_client.post.call_args.kwargs["json"]
        assert payload["system"] == "Be decisive."
        assert payload["messages"] == [{"role": "user", "content": "Is this relevant?"}]
        assert mock_client.post.call_args.kwargs["headers"]["x-api-key"] == "test-key"


@pytest.mark.asyncio
async def test_complete_without_system_prompt(mock_settings: Settings) -> None:
    client = ClaudeClient(mock_settings)
    
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class)
        mock_client.post.return_value = ok_response("A summary")
        
        await client.complete("Summarize")
        
        assert "system" not in mock_client.post.call_args.kwargs["json"]


@pytest.mark.asyncio
async def test_complete_retry_on_429(mock_settings: Settings) -> None:
    """Test retry logic on 429 error."""
    client = ClaudeClient(mock_settings)
    
    with patch("httpx.AsyncClient") as mock_client_class:
        # First call returns 429, second succeeds
        mock_response_429 = MagicMock()
        mock_response_429.status_code = 429
        mock_response_429.headers = {}
        
        mock_client = mock_http(mock_client_class)
        mock_client.post.side_effect = [
            mock_response_429,
            ok_response("NO - after retry"),
        ]
        
        answer = await client.complete("test")
        
        assert answer == "NO - after retry"
        assert mock_client.post.call_count == 2


@pytest.mark.asyncio
async def test_complete_retry_on_server_error(mock_settings: Settings) -> None:
    client = ClaudeClient(mock_settings)
    
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_response_503 = MagicMock()
        mock_response_503.status_code = 503
        
        mock_client = mock_http(mock_client_class)
        mock_client.post.side_effect = [mock_response_503, ok_response("done")]
        
        assert await client.complete("test") == "done"
        assert mock_client.post.call_count == 2


@pytest.mark.asyncio
async def test_complete_network_error_exhausts_retries(mock_settings: Settings) -> None:
    client = ClaudeClient(mock_settings)
    
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class)
        mock_client.post.side_effect = httpx.ConnectError("connection refused")
        
        with pytest.raises(httpx.ConnectError):
            await client.complete("test")
        
        assert mock_client.post.call_count == mock_settings.claude_max_retries


@pytest.mark.asyncio
async def test_complete_client_error_not_retried(mock_settings: Settings) -> None:
    client = ClaudeClient(mock_settings)
    
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_response_400 = MagicMock()
        mock_response_400.status_code = 400
        mock_response_400.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Bad Request", request=MagicMock(), response=mock_response_400
        )
        
        mock_client = mock_http(mock_client_class)
        mock_client.post.return_value = mock_response_400
        
        with pytest.raises(httpx.HTTPStatusError):
            await client.complete("test")
        
        assert mock_client.post.call_count == 1


@pytest.mark.asyncio
async def test_rate_limiting(mock_settings: Settings) -> None:
    """Test that requests are rate limited."""
    client = ClaudeClient(mock_settings)
    
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class)
        mock_client.post.return_value = ok_response("test response")
        
        start = time.time()
        
        # Make two quick requests
        await client.complete("test")
        await client.complete("test")
        
        elapsed = time.time() - start
        
        # Should take at least request_delay seconds due to rate limiting
        assert elapsed >= mock_settings.claude_request_delay
