"""Business logic use cases."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date
from typing import Optional

from hn_digest.core import (
    ArticleFetcher,
    CandidateItem,
    Comment,
    ConfigurationError,
    DeliveryError,
    DigestEntry,
    DigestGenerator,
    Feedback,
    InterestProfile,
    ItemSource,
    ItemStore,
    NotificationService,
    Rating,
    RelevanceClassifier,
    StoryEnricher,
    ValidationError,
    filter_unseen,
    is_hiring_post,
)
from hn_digest.core.entities import normalize_terms


def digest_subject(entries: list[DigestEntry], digest_date: date) -> str:
    return f"HN Digest - {len(entries)} relevant stories from {digest_date.isoformat()}"


class DigestService:
    """Build and deliver one digest run.
    
    The service is the only writer of processed markers: every story that
    gets a verdict is marked, accepted or not. Stories left over once the
    quota is met are not touched and stay eligible for the next run.
    """
    
    def __init__(
        self,
        store: ItemStore,
        source: ItemSource,
        article_fetcher: ArticleFetcher,
        classifier: RelevanceClassifier,
        enricher: StoryEnricher,
        digest_generator: DigestGenerator,
        notification_service: NotificationService,
        quota: int = 10,
        item_delay: float = 1.0,
        history_expiry_days: int = 7,
        max_candidates: int = 30,
        max_comments: int = 5,
        email_to: str = "",
        email_from: str = "",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.store = store
        self.source = source
        self.article_fetcher = article_fetcher
        self.classifier = classifier
        self.enricher = enricher
        self.digest_generator = digest_generator
        self.notification_service = notification_service
        self.quota = quota
        self.item_delay = item_delay
        self.history_expiry_days = history_expiry_days
        self.max_candidates = max_candidates
        self.max_comments = max_comments
        self.email_to = email_to
        self.email_from = email_from
        self._sleep = sleep
    
    async def generate_and_deliver(
        self, quota: Optional[int] = None, digest_date: Optional[date] = None
    ) -> list[DigestEntry]:
        """Full batch run: purge, load, fetch, filter, enrich, deliver.
        
        Raises:
            ConfigurationError: if no interest terms are stored
            DeliveryError: if the rendered digest could not be sent
        """
        digest_date = digest_date or date.today()
        
        removed = self.store.purge_expired(self.history_expiry_days)
        if removed:
            print(f"🧹 Cleaned up {removed} expired processed markers")
        
        profile = self.store.load_profile()
        if not profile.interests:
            raise ConfigurationError("No interests configured; add some via POST /interests or config.yaml")
        feedback = self.store.load_feedback()
        
        print(f"\n📥 Fetching up to {self.max_candidates} front-page stories...")
        candidates = await self.source.fetch_items(self.max_candidates)
        print(f"✓ Found {len(candidates)} stories")
        
        entries = await self.run(profile, feedback, candidates, quota)
        
        if not entries:
            print("\n❌ No relevant stories found, nothing to deliver")
            return entries
        
        print(f"\n📨 Delivering digest with {len(entries)} stories...")
        html = await self.digest_generator.generate(entries, digest_date)
        try:
            await self.notification_service.send(
                html,
                digest_subject(entries, digest_date),
                self.email_to,
                self.email_from,
                digest_date=digest_date,
            )
        except DeliveryError:
            raise
        except Exception as e:
            raise DeliveryError(f"Delivery failed: {e}") from e
        
        return entries
    
    async def run(
        self,
        profile: InterestProfile,
        feedback: Feedback,
        candidates: list[CandidateItem],
        quota: Optional[int] = None,
    ) -> list[DigestEntry]:
        """Dedupe, drop hiring posts, rank and classify until the quota is met."""
        quota = self.quota if quota is None else quota
        
        unseen = filter_unseen(candidates, self.store.processed_markers())
        skipped = len(candidates) - len(unseen)
        if skipped:
            print(f"✓ Skipped {skipped} already-processed stories")
        
        eligible = []
        for item in unseen:
            if is_hiring_post(item.title):
                print(f"  ✗ Hiring post dropped: {item.title[:70]}")
                continue
            eligible.append(item)
        
        # sorted() is stable, so equal scores keep the source's order
        ranked = sorted(eligible, key=lambda item: item.score, reverse=True)
        print(f"\n🔍 Checking up to {len(ranked)} stories (quota {quota})...")
        
        entries: list[DigestEntry] = []
        for i, item in enumerate(ranked):
            if len(entries) >= quota:
                break
            if i > 0 and self.item_delay > 0:
                await self._sleep(self.item_delay)
            
            print(f"\n  [{i + 1}/{len(ranked)}] {item.title[:70]}")
            entry = await self._process_item(item, profile, feedback)
            if entry is not None:
                entries.append(entry)
        
        print(f"\n✓ Accepted {len(entries)} stories")
        return entries
    
    async def _process_item(
        self, item: CandidateItem, profile: InterestProfile, feedback: Feedback
    ) -> Optional[DigestEntry]:
        comments = await self._fetch_comments(item)
        article_text = await self._fetch_article(item)
        
        try:
            result = await self.classifier.classify(item, article_text, profile, feedback, comments)
        except Exception as e:
            # Left unmarked so the next run reconsiders it
            print(f"  ⚠️  Classification failed: {e}")
            return None
        
        entry = None
        if result.accepted:
            print(f"  ✓ Relevant: {result.reason}")
            try:
                enrichment = await self.enricher.enrich(item, article_text, comments)
                entry = DigestEntry(
                    item=item,
                    accepted=True,
                    reason=result.reason,
                    summary=enrichment.summary,
                    key_terms=enrichment.key_terms,
                    topics=enrichment.topics,
                )
            except Exception as e:
                print(f"  ⚠️  Enrichment failed, dropping story: {e}")
        else:
            print(f"  ✗ Not relevant: {result.reason}")
        
        self.store.mark_processed(item.id)
        return entry
    
    async def _fetch_comments(self, item: CandidateItem) -> list[Comment]:
        if self.max_comments <= 0 or item.comment_count == 0:
            return []
        try:
            return await self.source.fetch_comments(item.id, self.max_comments)
        except Exception as e:
            print(f"  └─ ⚠️  Could not fetch comments: {e}")
            return []
    
    async def _fetch_article(self, item: CandidateItem) -> Optional[str]:
        if not item.url:
            return None
        try:
            return await self.article_fetcher.fetch(item.url)
        except Exception as e:
            print(f"  └─ ⚠️  Could not fetch article: {e}")
            return None


@dataclass
class FeedbackAck:
    item_id: str
    rating: Rating


class FeedbackService:
    """Feedback recording and interest profile management."""
    
    def __init__(self, store: ItemStore) -> None:
        self.store = store
    
    def submit_feedback(
        self,
        item_id: Optional[str],
        rating: Optional[str],
        title: Optional[str] = None,
        url: Optional[str] = None,
    ) -> FeedbackAck:
        """Validate and append one feedback record.
        
        Raises:
            ValidationError: before any write, if item_id or rating is
                missing or rating is not positive/negative
        """
        if not item_id or not rating:
            raise ValidationError("Missing required parameters: story, rating")
        try:
            parsed = Rating(rating)
        except ValueError:
            raise ValidationError('Rating must be "positive" or "negative"') from None
        
        self.store.append_feedback(item_id, title or "Unknown", url or "", parsed)
        return FeedbackAck(item_id=item_id, rating=parsed)
    
    def feedback_counts(self) -> dict[str, int]:
        feedback = self.store.load_feedback()
        return {
            "positive": len(feedback.positive),
            "negative": len(feedback.negative),
        }
    
    def list_interests(self) -> list[str]:
        return self.store.load_interests()
    
    def replace_interests(self, terms: object) -> list[str]:
        cleaned = _validate_terms(terms, "interests")
        self.store.replace_interests(cleaned)
        return cleaned
    
    def add_interest(self, term: object) -> list[str]:
        self.store.add_interest(_validate_term(term, "interest"))
        return self.store.load_interests()
    
    def remove_interest(self, term: str) -> list[str]:
        self.store.remove_interest(term)
        return self.store.load_interests()
    
    def list_excluded(self) -> list[str]:
        return self.store.load_excluded()
    
    def replace_excluded(self, terms: object) -> list[str]:
        cleaned = _validate_terms(terms, "excluded")
        self.store.replace_excluded(cleaned)
        return cleaned
    
    def add_excluded(self, term: object) -> list[str]:
        self.store.add_excluded(_validate_term(term, "term"))
        return self.store.load_excluded()
    
    def remove_excluded(self, term: str) -> list[str]:
        self.store.remove_excluded(term)
        return self.store.load_excluded()


def _validate_terms(terms: object, name: str) -> list[str]:
    if not isinstance(terms, list) or not all(isinstance(t, str) for t in terms):
        raise ValidationError(f"{name} must be an array of strings")
    return normalize_terms(terms)


def _validate_term(term: object, name: str) -> str:
    if not isinstance(term, str) or not term.strip():
        raise ValidationError(f"{name} must be a non-empty string")
    return term.strip()
