"""Claude API client used as the text-completion oracle."""

import asyncio

import httpx

from hn_digest.config import Settings
from hn_digest.core import LLMClient


class ClaudeClient(LLMClient):
    """Claude Messages API client implementation."""
    
    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.anthropic_api_key
        self.model = settings.claude_model
        self.max_tokens = settings.claude.max_tokens
        self.temperature = settings.claude.temperature
        self.timeout = settings.claude.timeout
        self.base_url = "https://api.anthropic.com/v1"
        self.max_retries = settings.claude_max_retries
        self.initial_retry_delay = settings.claude_initial_retry_delay
        self.request_delay = settings.claude_request_delay
        self._last_request_time = 0.0
        self._lock = asyncio.Lock()
    
    async def complete(self, prompt: str, system: str = "") -> str:
        """Complete a single-turn prompt."""
        return await self._call_api(prompt=prompt, system=system)
    
    async def _wait_for_slot(self) -> None:
        """Keep at least request_delay seconds between request starts."""
        async with self._lock:
            loop = asyncio.get_running_loop()
            time_since_last_request = loop.time() - self._last_request_time
            if time_since_last_request < self.request_delay:
                await asyncio.sleep(self.request_delay - time_since_last_request)
            self._last_request_time = loop.time()
    
    async def _call_api(self, prompt: str, system: str) -> str:
        """Call Claude API with retry logic and rate limiting."""
        last_exception = None
        
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [
                {"role": "user", "content": prompt}
            ],
        }
        if system:
            payload["system"] = system
        
        for attempt in range(self.max_retries):
            await self._wait_for_slot()
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        f"{self.base_url}/messages",
                        headers={
                            "x-api-key": self.api_key,
                            "anthropic-version": "2023-06-01",
                            "content-type": "application/json",
                        },
                        json=payload,
                    )
                    
                    if response.status_code == 200:
                        data = response.json()
                        return "".join(
                            block.get("text", "")
                            for block in data.get("content", [])
                            if block.get("type", "text") == "text"
                        )
                    
                    # Rate limit - retry with backoff
                    if response.status_code == 429:
                        retry_after = self._get_retry_delay(response, attempt)
                        print(f"⏳ Rate limit hit, retrying after {retry_after:.1f}s (attempt {attempt + 1}/{self.max_retries})")
                        await asyncio.sleep(retry_after)
                        continue
                    
                    # Server errors - retry with backoff
                    if response.status_code >= 500:
                        retry_delay = self.initial_retry_delay * (2 ** attempt)
                        print(f"⚠️  Server error {response.status_code}, retrying after {retry_delay:.1f}s")
                        await asyncio.sleep(retry_delay)
                        continue
                    
                    # Other errors - raise immediately
                    response.raise_for_status()
            
            except httpx.RequestError as e:
                last_exception = e
                if attempt < self.max_retries - 1:
                    retry_delay = self.initial_retry_delay * (2 ** attempt)
                    print(f"⚠️  Network error, retrying after {retry_delay:.1f}s")
                    await asyncio.sleep(retry_delay)
                    continue
                raise
        
        if last_exception:
            raise last_exception
        raise RuntimeError("Failed to call API after all retries")
    
    def _get_retry_delay(self, response: httpx.Response, attempt: int) -> float:
        """Calculate retry delay from response headers or use exponential backoff."""
        retry_after = response.headers.get("retry-after")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass
        
        return self.initial_retry_delay * (2 ** attempt)
