"""Tests for the SQLite item store."""

import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from hn_digest.adapters.storage import SQLiteItemStore
from hn_digest.core import Rating


class FakeClock:
    """Settable clock for timestamp assertions."""
    
    def __init__(self, start: datetime) -> None:
        self.current = start
    
    def __call__(self) -> datetime:
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(tmp_path: Path, clock: FakeClock) -> SQLiteItemStore:
    store = SQLiteItemStore(tmp_path / "data" / "digest.db", now=clock)
    store.initialize()
    return store


def test_initialize_is_idempotent(store: SQLiteItemStore) -> None:
    """Test that the schema can be created twice."""
    store.initialize()
    assert store.processed_markers() == {}


def test_mark_processed_is_idempotent(store: SQLiteItemStore, clock: FakeClock) -> None:
    """Test a second mark leaves one marker with the first timestamp."""
    first_time = clock.current
    store.mark_processed("42")
    
    clock.current = first_time + timedelta(hours=3)
    store.mark_processed("42")
    
    markers = store.processed_markers()
    assert list(markers) == ["42"]
    assert markers["42"] == first_time


def test_purge_expired(store: SQLiteItemStore, clock: FakeClock) -> None:
    """Test an 8-day-old marker is purged and a 6-day-old one retained."""
    now = clock.current
    
    clock.current = now - timedelta(days=8)
    store.mark_processed("old")
    clock.current = now - timedelta(days=6)
    store.mark_processed("recent")
    clock.current = now
    
    removed = store.purge_expired(7)
    
    assert removed == 1
    assert set(store.processed_markers()) == {"recent"}
    assert store.purge_expired(7) == 0


def test_feedback_append_and_load(store: SQLiteItemStore, clock: FakeClock) -> None:
    """Test feedback splits by rating and keeps creation order."""
    start = clock.current
    for i, rating in enumerate([Rating.POSITIVE, Rating.NEGATIVE, Rating.POSITIVE]):
        clock.current = start + timedelta(minutes=i)
        store.append_feedback(str(i), f"Story {i}", f"https://example.com/{i}", rating)
    
    # Same story rated again accumulates instead of overwriting
    clock.current = start + timedelta(minutes=10)
    store.append_feedback("0", "Story 0", "", Rating.NEGATIVE)
    
    feedback = store.load_feedback()
    
    assert [r.item_id for r in feedback.positive] == ["0", "2"]
    assert [r.item_id for r in feedback.negative] == ["1", "0"]
    assert feedback.positive[0].url == "https://example.com/0"
    assert feedback.negative[-1].created_at == start + timedelta(minutes=10)


def test_load_feedback_skips_malformed_rows(store: SQLiteItemStore) -> None:
    """Test an unknown rating in the table is skipped, not fatal."""
    store.append_feedback("1", "Good", "", Rating.POSITIVE)
    with sqlite3.connect(store.db_path) as conn:
        conn.execute(
            "INSERT INTO feedback_history (story_id, title, url, rating, created_at) "
            "VALUES ('2', 'Odd', '', 'maybe', 0)"
        )
    
    feedback = store.load_feedback()
    
    assert [r.item_id for r in feedback.positive] == ["1"]
    assert feedback.negative == []


def test_interest_crud(store: SQLiteItemStore) -> None:
    """Test add, duplicate add, remove and replace of interests."""
    store.add_interest("AI")
    store.add_interest("Rust")
    store.add_interest("AI")
    assert store.load_interests() == ["AI", "Rust"]
    
    store.remove_interest("AI")
    store.remove_interest("not there")
    assert store.load_interests() == ["Rust"]
    
    store.replace_interests(["Go", "Zig", "Go"])
    assert store.load_interests() == ["Go", "Zig"]


def test_excluded_crud(store: SQLiteItemStore) -> None:
    """Test excluded terms are independent of interests."""
    store.add_interest("AI")
    store.add_excluded("crypto")
    store.add_excluded("crypto")
    
    assert store.load_excluded() == ["crypto"]
    assert store.load_profile().interests == ["AI"]
    assert store.load_profile().excluded == ["crypto"]
    
    store.replace_excluded(["politics", "sports"])
    store.remove_excluded("politics")
    assert store.load_excluded() == ["sports"]


def test_replace_interests_is_all_or_nothing(store: SQLiteItemStore) -> None:
    """Test a replace that fails partway leaves the old set intact."""
    store.replace_interests(["AI", "Rust"])
    
    # The second value cannot be bound, so the insert fails mid-transaction
    with pytest.raises(sqlite3.Error):
        store.replace_interests(["Go", object()])
    
    assert store.load_interests() == ["AI", "Rust"]


def test_seed_interests_only_when_empty(store: SQLiteItemStore) -> None:
    """Test seeding fills an empty table and never overwrites."""
    assert store.seed_interests(["AI"]) is True
    assert store.seed_interests(["Gardening"]) is False
    assert store.seed_interests([]) is False
    assert store.load_interests() == ["AI"]


def test_store_shared_between_instances(tmp_path: Path) -> None:
    """Test two store objects on one file see each other's writes."""
    db_path = tmp_path / "shared.db"
    batch = SQLiteItemStore(db_path)
    server = SQLiteItemStore(db_path)
    batch.initialize()
    
    server.append_feedback("7", "Shared", "", Rating.POSITIVE)
    batch.mark_processed("7")
    
    assert [r.item_id for r in batch.load_feedback().positive] == ["7"]
    assert "7" in server.processed_markers()
