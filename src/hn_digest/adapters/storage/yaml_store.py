"""File-backed item store keeping each table as a YAML document."""

import os
import tempfile
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import yaml

from hn_digest.core.entities import Feedback, FeedbackRecord, Rating
from hn_digest.core.interfaces import ItemStore

PROCESSED_FILE = "processed_stories.yaml"
FEEDBACK_FILE = "feedback_history.yaml"
INTERESTS_FILE = "interests.yaml"
EXCLUDED_FILE = "not_interested.yaml"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class YAMLItemStore(ItemStore):
    """Item store as a directory of YAML files.
    
    Every write replaces the whole file atomically (temp file + rename), so
    readers never see a partial document. Read-modify-write cycles are not
    locked: use one writer process at a time, or the SQLite store when the
    feedback server runs alongside the digest.
    """
    
    def __init__(self, storage_dir: Path, now: Callable[[], datetime] = _utcnow) -> None:
        self.storage_dir = storage_dir
        self.now = now
    
    def initialize(self) -> None:
        self.storage_dir.mkdir(parents=True, exist_ok=True)
    
    def _read(self, filename: str, default: Any) -> Any:
        """Load a document; malformed or missing files give the default."""
        path = self.storage_dir / filename
        if not path.exists():
            return default
        
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            print(f"⚠️  Warning: could not read {path}, using empty default: {e}")
            return default
        
        if data is None:
            return default
        if not isinstance(data, type(default)):
            print(f"⚠️  Warning: unexpected content in {path}, using empty default")
            return default
        return data
    
    def _write(self, filename: str, data: Any) -> None:
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.storage_dir, prefix=f".{filename}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
            os.replace(tmp_name, self.storage_dir / filename)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    
    # Processed markers
    
    def processed_markers(self) -> dict[str, datetime]:
        raw = self._read(PROCESSED_FILE, {})
        markers = {}
        for story_id, processed_at in raw.items():
            try:
                markers[str(story_id)] = _parse_time(processed_at)
            except (TypeError, ValueError) as e:
                print(f"⚠️  Warning: skipping malformed marker {story_id!r}: {e}")
        return markers
    
    def mark_processed(self, item_id: str) -> None:
        raw = self._read(PROCESSED_FILE, {})
        if item_id in raw:
            return
        raw[item_id] = self.now().isoformat()
        self._write(PROCESSED_FILE, raw)
    
    def purge_expired(self, window_days: int) -> int:
        cutoff = self.now() - timedelta(days=window_days)
        markers = self.processed_markers()
        kept = {
            story_id: moment.isoformat()
            for story_id, moment in markers.items()
            if moment >= cutoff
        }
        removed = len(markers) - len(kept)
        if removed:
            self._write(PROCESSED_FILE, kept)
        return removed
    
    # Feedback
    
    def append_feedback(self, item_id: str, title: str, url: str, rating: Rating) -> None:
        records = self._read(FEEDBACK_FILE, [])
        records.append({
            "story_id": item_id,
            "title": title,
            "url": url,
            "rating": Rating(rating).value,
            "created_at": self.now().isoformat(),
        })
        self._write(FEEDBACK_FILE, records)
    
    def load_feedback(self) -> Feedback:
        parsed = []
        for row in self._read(FEEDBACK_FILE, []):
            try:
                parsed.append(FeedbackRecord(
                    item_id=str(row["story_id"]),
                    title=row.get("title") or "Unknown",
                    url=row.get("url") or "",
                    rating=Rating(row["rating"]),
                    created_at=_parse_time(row["created_at"]),
                ))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                print(f"⚠️  Warning: skipping malformed feedback record: {e}")
        
        parsed.sort(key=lambda record: record.created_at)
        return Feedback(
            positive=[r for r in parsed if r.rating is Rating.POSITIVE],
            negative=[r for r in parsed if r.rating is Rating.NEGATIVE],
        )
    
    # Interest terms
    
    def _load_terms(self, filename: str) -> list[str]:
        return [str(term) for term in self._read(filename, [])]
    
    def _replace_terms(self, filename: str, terms: list[str]) -> None:
        self._write(filename, list(dict.fromkeys(terms)))
    
    def _add_term(self, filename: str, term: str) -> None:
        terms = self._load_terms(filename)
        if term not in terms:
            terms.append(term)
            self._write(filename, terms)
    
    def _remove_term(self, filename: str, term: str) -> None:
        terms = self._load_terms(filename)
        if term in terms:
            terms.remove(term)
            self._write(filename, terms)
    
    def load_interests(self) -> list[str]:
        return self._load_terms(INTERESTS_FILE)
    
    def replace_interests(self, terms: list[str]) -> None:
        self._replace_terms(INTERESTS_FILE, terms)
    
    def add_interest(self, term: str) -> None:
        self._add_term(INTERESTS_FILE, term)
    
    def remove_interest(self, term: str) -> None:
        self._remove_term(INTERESTS_FILE, term)
    
    def load_excluded(self) -> list[str]:
        return self._load_terms(EXCLUDED_FILE)
    
    def replace_excluded(self, terms: list[str]) -> None:
        self._replace_terms(EXCLUDED_FILE, terms)
    
    def add_excluded(self, term: str) -> None:
        self._add_term(EXCLUDED_FILE, term)
    
    def remove_excluded(self, term: str) -> None:
        self._remove_term(EXCLUDED_FILE, term)


def _parse_time(value: Any) -> datetime:
    """Parse a stored timestamp; naive values are taken as UTC."""
    moment = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment
