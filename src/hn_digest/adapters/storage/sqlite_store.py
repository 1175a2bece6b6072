"""SQLite-backed item store shared by the digest run and the feedback server."""

import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path

from hn_digest.core.entities import Feedback, FeedbackRecord, Rating
from hn_digest.core.interfaces import ItemStore

SCHEMA = """
CREATE TABLE IF NOT EXISTS processed_stories (
    story_id TEXT PRIMARY KEY,
    processed_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS feedback_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    story_id TEXT NOT NULL,
    title TEXT,
    url TEXT,
    rating TEXT NOT NULL,
    created_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_feedback_created ON feedback_history (created_at);

CREATE TABLE IF NOT EXISTS interests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    interest TEXT NOT NULL UNIQUE,
    created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS not_interested (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    term TEXT NOT NULL UNIQUE,
    created_at INTEGER NOT NULL
);
"""

# Term tables share a shape; column names differ for historical reasons.
_TERM_TABLES = {
    "interests": "interest",
    "not_interested": "term",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _from_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class SQLiteItemStore(ItemStore):
    """Item store on a single SQLite file.
    
    Each operation opens its own short-lived connection, so the store is
    safe to share between threads and between processes. Timestamps are
    stored as epoch milliseconds.
    """
    
    def __init__(
        self,
        db_path: Path,
        now: Callable[[], datetime] = _utcnow,
        timeout: float = 30.0,
    ) -> None:
        self.db_path = db_path
        self.now = now
        self.timeout = timeout
    
    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success and rolls back on error."""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        try:
            with conn:
                yield conn
        finally:
            conn.close()
    
    def initialize(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA)
    
    # Processed markers
    
    def processed_markers(self) -> dict[str, datetime]:
        with self._connect() as conn:
            rows = conn.execute("SELECT story_id, processed_at FROM processed_stories").fetchall()
        
        markers = {}
        for story_id, processed_at in rows:
            try:
                markers[story_id] = _from_millis(int(processed_at))
            except (TypeError, ValueError, OverflowError, OSError) as e:
                print(f"⚠️  Warning: skipping malformed marker {story_id!r}: {e}")
        return markers
    
    def mark_processed(self, item_id: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO processed_stories (story_id, processed_at) VALUES (?, ?) "
                "ON CONFLICT (story_id) DO NOTHING",
                (item_id, _to_millis(self.now())),
            )
    
    def purge_expired(self, window_days: int) -> int:
        cutoff = self.now() - timedelta(days=window_days)
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM processed_stories WHERE processed_at < ?",
                (_to_millis(cutoff),),
            )
            return cursor.rowcount
    
    # Feedback
    
    def append_feedback(self, item_id: str, title: str, url: str, rating: Rating) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO feedback_history (story_id, title, url, rating, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (item_id, title, url, Rating(rating).value, _to_millis(self.now())),
            )
    
    def load_feedback(self) -> Feedback:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT story_id, title, url, rating, created_at FROM feedback_history "
                "ORDER BY created_at ASC, id ASC"
            ).fetchall()
        
        feedback = Feedback()
        for story_id, title, url, rating, created_at in rows:
            try:
                record = FeedbackRecord(
                    item_id=story_id,
                    title=title or "Unknown",
                    url=url or "",
                    rating=Rating(rating),
                    created_at=_from_millis(int(created_at)),
                )
            except (TypeError, ValueError, OverflowError, OSError) as e:
                print(f"⚠️  Warning: skipping malformed feedback row for {story_id!r}: {e}")
                continue
            
            if record.rating is Rating.POSITIVE:
                feedback.positive.append(record)
            else:
                feedback.negative.append(record)
        
        return feedback
    
    # Interest terms
    
    def _load_terms(self, table: str) -> list[str]:
        column = _TERM_TABLES[table]
        with self._connect() as conn:
            rows = conn.execute(f"SELECT {column} FROM {table} ORDER BY id ASC").fetchall()
        return [row[0] for row in rows]
    
    def _replace_terms(self, table: str, terms: list[str]) -> None:
        """Delete and re-insert in one transaction; any error rolls back."""
        column = _TERM_TABLES[table]
        created_at = _to_millis(self.now())
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute(f"DELETE FROM {table}")
            for term in dict.fromkeys(terms):
                conn.execute(
                    f"INSERT INTO {table} ({column}, created_at) VALUES (?, ?)",
                    (term, created_at),
                )
    
    def _add_term(self, table: str, term: str) -> None:
        column = _TERM_TABLES[table]
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO {table} ({column}, created_at) VALUES (?, ?) "
                f"ON CONFLICT ({column}) DO NOTHING",
                (term, _to_millis(self.now())),
            )
    
    def _remove_term(self, table: str, term: str) -> None:
        column = _TERM_TABLES[table]
        with self._connect() as conn:
            conn.execute(f"DELETE FROM {table} WHERE {column} = ?", (term,))
    
    def load_interests(self) -> list[str]:
        return self._load_terms("interests")
    
    def replace_interests(self, terms: list[str]) -> None:
        self._replace_terms("interests", terms)
    
    def add_interest(self, term: str) -> None:
        self._add_term("interests", term)
    
    def remove_interest(self, term: str) -> None:
        self._remove_term("interests", term)
    
    def load_excluded(self) -> list[str]:
        return self._load_terms("not_interested")
    
    def replace_excluded(self, terms: list[str]) -> None:
        self._replace_terms("not_interested", terms)
    
    def add_excluded(self, term: str) -> None:
        self._add_term("not_interested", term)
    
    def remove_excluded(self, term: str) -> None:
        self._remove_term("not_interested", term)
