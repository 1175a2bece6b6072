"""Relevance classifier backed by a text-completion oracle."""

import re
from collections.abc import Sequence
from typing import Optional

from hn_digest.core.entities import (
    CandidateItem,
    ClassificationResult,
    Comment,
    Feedback,
    InterestProfile,
)
from hn_digest.core.interfaces import LLMClient
from hn_digest.core.prompts import RELEVANCE_SYSTEM, build_relevance_prompt

_LEADING_NOISE = re.compile(r"^[\s\W_]+")
_FIRST_TOKEN = re.compile(r"[A-Za-z]+")


def parse_verdict(answer: str) -> bool:
    """True iff the first word of the answer is YES, ignoring case.
    
    Leading markdown and punctuation ("**Yes**", "- YES.") are tolerated.
    Anything else, including an empty answer, counts as NO.
    """
    stripped = _LEADING_NOISE.sub("", answer)
    match = _FIRST_TOKEN.match(stripped)
    return bool(match) and match.group(0).upper() == "YES"


class RelevanceClassifier:
    """Decide per story whether it matches the reader's interests."""
    
    def __init__(self, llm_client: LLMClient) -> None:
        self.llm_client = llm_client
    
    async def classify(
        self,
        item: CandidateItem,
        article_text: Optional[str],
        profile: InterestProfile,
        feedback: Feedback,
        comments: Sequence[Comment] = (),
    ) -> ClassificationResult:
        """Ask the oracle once; no retry on an ambiguous answer."""
        prompt = build_relevance_prompt(item, article_text, profile, feedback, comments)
        answer = (await self.llm_client.complete(prompt, system=RELEVANCE_SYSTEM)).strip()
        
        return ClassificationResult(
            item=item,
            accepted=parse_verdict(answer),
            reason=answer,
        )
