"""Summary, key-term and topic enrichment for accepted stories."""

import asyncio
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from hn_digest.core.entities import CandidateItem, Comment, KeyTerm
from hn_digest.core.interfaces import LLMClient
from hn_digest.core.prompts import (
    build_key_terms_prompt,
    build_summary_prompt,
    build_topics_prompt,
)

MAX_TOPICS = 5

# "**Term**: text", "**Term:** text", "1. **Term** - text", "* Term:text"
_KEY_TERM_LINE = re.compile(
    r"^\s*(?:[-*•]|\d+[.)])?\s*(?:\*\*|__)?(?P<term>[^*_:\n][^*:\n]*?)"
    r"(?:(?:\*\*|__)\s*:|:\s*(?:\*\*|__)|:|(?:\*\*|__)?\s+[-–—])\s*(?P<explanation>\S.*)$"
)
_TOPICS_LABEL = re.compile(r"^\s*(?:topics?|tags?)\s*:\s*", re.IGNORECASE)


@dataclass
class Enrichment:
    summary: str
    key_terms: str
    topics: list[str] = field(default_factory=list)


def parse_key_terms(text: str) -> list[KeyTerm]:
    """Parse the key-terms explainer into terms.
    
    Lines that do not look like a term definition are skipped.
    """
    terms = []
    for line in text.splitlines():
        match = _KEY_TERM_LINE.match(line)
        if not match:
            continue
        term = match.group("term").strip().strip("*_ ")
        explanation = match.group("explanation").strip()
        if term and explanation:
            terms.append(KeyTerm(term=term, explanation=explanation))
    return terms


def parse_topics(text: str, limit: int = MAX_TOPICS) -> list[str]:
    """Parse a comma or newline separated topic list."""
    topics: dict[str, None] = {}
    for line in text.splitlines():
        line = _TOPICS_LABEL.sub("", line)
        for raw in line.split(","):
            topic = raw.strip().strip("-*•#.\"'` ").strip()
            if topic and topic.lower() not in {t.lower() for t in topics}:
                topics[topic] = None
    return list(topics)[:limit]


class StoryEnricher:
    """Generate the digest text for an accepted story."""
    
    def __init__(self, llm_client: LLMClient) -> None:
        self.llm_client = llm_client
    
    async def enrich(
        self,
        item: CandidateItem,
        article_text: Optional[str],
        comments: Sequence[Comment] = (),
    ) -> Enrichment:
        """Run summary and key terms concurrently, then extract topics.
        
        Raises:
            Exception from the oracle if the summary or key terms fail
        """
        results = await asyncio.gather(
            self.llm_client.complete(build_summary_prompt(item, article_text, comments)),
            self.llm_client.complete(build_key_terms_prompt(item, article_text, comments)),
            return_exceptions=True,
        )
        # Both calls have finished; surface the first failure only now
        for result in results:
            if isinstance(result, BaseException):
                raise result
        summary, key_terms = results
        
        return Enrichment(
            summary=summary.strip(),
            key_terms=key_terms.strip(),
            topics=await self.extract_topics(item, article_text),
        )
    
    async def extract_topics(self, item: CandidateItem, article_text: Optional[str]) -> list[str]:
        """Topic tags for the story; empty if the oracle call fails."""
        try:
            answer = await self.llm_client.complete(build_topics_prompt(item, article_text))
        except Exception as e:
            print(f"  ⚠️  Topic extraction failed: {e}")
            return []
        return parse_topics(answer)
