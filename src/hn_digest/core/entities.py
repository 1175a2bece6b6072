"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Rating(str, Enum):
    """User judgment recorded from a digest."""
    
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class CandidateItem:
    """One story from the content source, not yet judged."""
    
    id: str
    title: str
    url: Optional[str]
    score: int
    comment_count: int
    created_at: datetime
    
    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ID cannot be empty")
        if not self.title:
            raise ValueError("Title cannot be empty")
    
    @property
    def discussion_url(self) -> str:
        return f"https://news.ycombinator.com/item?id={self.id}"


@dataclass
class Comment:
    """Node of a story's discussion tree."""
    
    author: str
    text: str
    score: Optional[int] = None
    replies: list["Comment"] = field(default_factory=list)


@dataclass
class FeedbackRecord:
    """One user judgment, used as a classification exemplar."""
    
    item_id: str
    title: str
    url: str
    rating: Rating
    created_at: datetime


@dataclass
class Feedback:
    """Feedback records split by rating, each ordered oldest first."""
    
    positive: list[FeedbackRecord] = field(default_factory=list)
    negative: list[FeedbackRecord] = field(default_factory=list)
    
    def recent(self, rating: Rating, limit: int) -> list[FeedbackRecord]:
        """Most recent `limit` records for a rating, still oldest first."""
        records = self.positive if rating is Rating.POSITIVE else self.negative
        if limit <= 0:
            return []
        return records[-limit:]


@dataclass
class InterestProfile:
    """Positive interest terms and excluded terms."""
    
    interests: list[str] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)


@dataclass
class ClassificationResult:
    """Verdict of the relevance classifier."""
    
    item: CandidateItem
    accepted: bool
    reason: str


@dataclass
class KeyTerm:
    """A term from the key-terms explainer."""
    
    term: str
    explanation: str


@dataclass
class DigestEntry:
    """Entry in the digest, alive for one run only."""
    
    item: CandidateItem
    accepted: bool
    reason: str
    summary: Optional[str] = None
    key_terms: Optional[str] = None
    topics: list[str] = field(default_factory=list)


def normalize_terms(terms: list[str]) -> list[str]:
    """Strip, drop empty entries and dedupe while keeping first-seen order."""
    seen: dict[str, None] = {}
    for term in terms:
        cleaned = term.strip()
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return list(seen)
