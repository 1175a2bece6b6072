"""Core domain layer."""

from hn_digest.core.classifier import RelevanceClassifier
from hn_digest.core.dedup import filter_unseen
from hn_digest.core.enricher import StoryEnricher
from hn_digest.core.entities import (
    CandidateItem,
    ClassificationResult,
    Comment,
    DigestEntry,
    Feedback,
    FeedbackRecord,
    InterestProfile,
    KeyTerm,
    Rating,
)
from hn_digest.core.errors import ConfigurationError, DeliveryError, DigestError, ValidationError
from hn_digest.core.filters import is_hiring_post
from hn_digest.core.interfaces import (
    ArticleFetcher,
    DigestGenerator,
    ItemSource,
    ItemStore,
    LLMClient,
    NotificationService,
)

__all__ = [
    "CandidateItem",
    "ClassificationResult",
    "Comment",
    "DigestEntry",
    "Feedback",
    "FeedbackRecord",
    "InterestProfile",
    "KeyTerm",
    "Rating",
    "DigestError",
    "ConfigurationError",
    "ValidationError",
    "DeliveryError",
    "ItemSource",
    "ArticleFetcher",
    "LLMClient",
    "DigestGenerator",
    "NotificationService",
    "ItemStore",
    "RelevanceClassifier",
    "StoryEnricher",
    "filter_unseen",
    "is_hiring_post",
]
