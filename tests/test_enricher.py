"""Tests for story enrichment."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from hn_digest.core import CandidateItem, KeyTerm, LLMClient, StoryEnricher
from hn_digest.core.enricher import parse_key_terms, parse_topics


@pytest.fixture
def item() -> CandidateItem:
    return CandidateItem(
        id="77",
        title="Show HN: A tiny Rust database",
        url="https://example.com/db",
        score=321,
        comment_count=40,
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


class RoutingLLM(LLMClient):
    """Answers by prompt kind and records how many calls overlapped."""
    
    def __init__(self, fail_on: str = "") -> None:
        self.fail_on = fail_on
        self.in_flight = 0
        self.max_in_flight = 0
    
    async def complete(self, prompt: str, system: str = "") -> str:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            if prompt.startswith("Summarize"):
                kind = "summary"
            elif "technical terms" in prompt:
                kind = "terms"
            else:
                kind = "topics"
            if kind == self.fail_on:
                raise RuntimeError(f"{kind} failed")
            return {
                "summary": "  A small embedded database.  ",
                "terms": "**B-tree**: A balanced search tree.\n**WAL**: Write-ahead log.",
                "topics": "Rust, databases, storage",
            }[kind]
        finally:
            self.in_flight -= 1


def test_parse_key_terms_formats() -> None:
    text = """Here are the key terms:

**Borrow checker**: Enforces Rust's ownership rules.
1. **LSM tree** - A write-optimised index structure.
- MVCC: Multi-version concurrency control.
**Write-ahead log:** Changes are logged before they are applied.
**CRDT**:Conflict-free replicated data type.
Some trailing remark without a definition"""
    
    terms = parse_key_terms(text)
    
    assert terms == [
        KeyTerm(term="Borrow checker", explanation="Enforces Rust's ownership rules."),
        KeyTerm(term="LSM tree", explanation="A write-optimised index structure."),
        KeyTerm(term="MVCC", explanation="Multi-version concurrency control."),
        KeyTerm(term="Write-ahead log", explanation="Changes are logged before they are applied."),
        KeyTerm(term="CRDT", explanation="Conflict-free replicated data type."),
    ]


def test_parse_key_terms_empty() -> None:
    assert parse_key_terms("") == []


def test_parse_topics() -> None:
    assert parse_topics("Topics: Rust, databases, rust, \"storage\".") == ["Rust", "databases", "storage"]
    assert parse_topics("- AI\n- Compilers\n") == ["AI", "Compilers"]
    assert parse_topics("a, b, c, d, e, f, g") == ["a", "b", "c", "d", "e"]


@pytest.mark.asyncio
async def test_enrich_runs_summary_and_key_terms_concurrently(item: CandidateItem) -> None:
    llm = RoutingLLM()
    enricher = StoryEnricher(llm)
    
    enrichment = await enricher.enrich(item, "article body", [])
    
    assert enrichment.summary == "A small embedded database."
    assert enrichment.key_terms.startswith("**B-tree**")
    assert enrichment.topics == ["Rust", "databases", "storage"]
    assert llm.max_in_flight == 2


@pytest.mark.asyncio
async def test_enrich_summary_failure_propagates(item: CandidateItem) -> None:
    enricher = StoryEnricher(RoutingLLM(fail_on="summary"))
    
    with pytest.raises(RuntimeError, match="summary failed"):
        await enricher.enrich(item, None, [])


@pytest.mark.asyncio
async def test_enrich_topic_failure_gives_empty_topics(item: CandidateItem) -> None:
    enricher = StoryEnricher(RoutingLLM(fail_on="topics"))
    
    enrichment = await enricher.enrich(item, None, [])
    
    assert enrichment.summary == "A small embedded database."
    assert enrichment.topics == []


@pytest.mark.asyncio
async def test_extract_topics_uses_oracle_answer(item: CandidateItem) -> None:
    mock_llm = AsyncMock()
    mock_llm.complete.return_value = "databases, Rust"
    
    topics = await StoryEnricher(mock_llm).extract_topics(item, None)
    
    assert topics == ["databases", "Rust"]
    assert "Show HN: A tiny Rust database" in mock_llm.complete.call_args.args[0]


@pytest.mark.asyncio
async def test_enrich_waits_for_both_calls_before_raising(item: CandidateItem) -> None:
    """Test a failing summary does not leave the key-terms call running."""
    finished = []
    
    class SlowTermsLLM(LLMClient):
        async def complete(self, prompt: str, system: str = "") -> str:
            if prompt.startswith("Summarize"):
                raise RuntimeError("summary failed")
            await asyncio.sleep(0.05)
            finished.append("terms")
            return "**WAL**: Write-ahead log."
    
    with pytest.raises(RuntimeError, match="summary failed"):
        await StoryEnricher(SlowTermsLLM()).enrich(item, None, [])
    
    assert finished == ["terms"]
    pending = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    assert pending == []
