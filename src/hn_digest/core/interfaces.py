"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional

from hn_digest.core.entities import (
    CandidateItem,
    Comment,
    DigestEntry,
    Feedback,
    InterestProfile,
    Rating,
)


class ItemSource(ABC):
    """Interface for fetching candidate stories and their discussions."""
    
    @abstractmethod
    async def fetch_items(self, limit: int) -> list[CandidateItem]:
        """Fetch ranked candidate stories."""
        pass
    
    @abstractmethod
    async def fetch_comments(self, item_id: str, max_comments: int) -> list[Comment]:
        """Fetch top-level comments of a story with nested replies."""
        pass


class ArticleFetcher(ABC):
    """Interface for best-effort article text extraction."""
    
    @abstractmethod
    async def fetch(self, url: str) -> Optional[str]:
        """Return plain article text, or None on any failure."""
        pass


class LLMClient(ABC):
    """Interface for text completion."""
    
    @abstractmethod
    async def complete(self, prompt: str, system: str = "") -> str:
        """Complete a prompt and return the answer text."""
        pass


class DigestGenerator(ABC):
    """Interface for rendering digests."""
    
    @abstractmethod
    async def generate(self, entries: list[DigestEntry], digest_date: date) -> str:
        """Render digest from entries."""
        pass


class NotificationService(ABC):
    """Interface for delivering a rendered digest."""
    
    @abstractmethod
    async def send(
        self,
        html_body: str,
        subject: str,
        to: str,
        sender: str,
        digest_date: Optional[date] = None,
    ) -> None:
        """Deliver the digest for digest_date (today if omitted).
        
        Raises DeliveryError on failure.
        """
        pass


class ItemStore(ABC):
    """Durable processed markers, feedback records and interest terms.
    
    Shared by the batch run and the feedback server, which are separate
    processes. Writes are atomic per call; replace-all is all-or-nothing.
    """
    
    @abstractmethod
    def initialize(self) -> None:
        """Create the backing schema if missing."""
        pass
    
    @abstractmethod
    def processed_markers(self) -> dict[str, datetime]:
        """Map of story id to the time it was processed."""
        pass
    
    @abstractmethod
    def mark_processed(self, item_id: str) -> None:
        """Record a marker; a second call for the same id is a no-op."""
        pass
    
    @abstractmethod
    def purge_expired(self, window_days: int) -> int:
        """Delete markers older than the window and return how many went."""
        pass
    
    @abstractmethod
    def append_feedback(self, item_id: str, title: str, url: str, rating: Rating) -> None:
        pass
    
    @abstractmethod
    def load_feedback(self) -> Feedback:
        pass
    
    @abstractmethod
    def load_interests(self) -> list[str]:
        pass
    
    @abstractmethod
    def replace_interests(self, terms: list[str]) -> None:
        pass
    
    @abstractmethod
    def add_interest(self, term: str) -> None:
        pass
    
    @abstractmethod
    def remove_interest(self, term: str) -> None:
        pass
    
    @abstractmethod
    def load_excluded(self) -> list[str]:
        pass
    
    @abstractmethod
    def replace_excluded(self, terms: list[str]) -> None:
        pass
    
    @abstractmethod
    def add_excluded(self, term: str) -> None:
        pass
    
    @abstractmethod
    def remove_excluded(self, term: str) -> None:
        pass
    
    def load_profile(self) -> InterestProfile:
        """Load both term sets at once."""
        return InterestProfile(
            interests=self.load_interests(),
            excluded=self.load_excluded(),
        )
    
    def seed_interests(self, terms: list[str]) -> bool:
        """Fill interests from config when none are stored yet.
        
        Returns:
            True if the store was seeded
        """
        if not terms or self.load_interests():
            return False
        self.replace_interests(terms)
        return True
