"""Deduplication against processed markers."""

from collections.abc import Iterable, Mapping
from datetime import datetime

from hn_digest.core.entities import CandidateItem


def filter_unseen(
    candidates: Iterable[CandidateItem], markers: Mapping[str, datetime]
) -> list[CandidateItem]:
    """Return candidates with no live marker, keeping their order.
    
    Matching is on the raw id only; a story resubmitted under a new id
    passes through.
    """
    return [item for item in candidates if item.id not in markers]
