"""LLM adapters."""

from hn_digest.adapters.llm.claude_client import ClaudeClient

__all__ = ["ClaudeClient"]
