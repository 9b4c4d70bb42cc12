"""Search and filter pipeline over knowledge entries.

All functions are pure: they never touch storage and never reorder their
input.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from .models import KnowledgeItem, utc_now

_TAG_RE = re.compile(r"<[^>]*>?")


class Recency(Enum):
    """Creation-date windows offered by the dashboard."""

    ALL = ""
    LAST_7_DAYS = "7"
    LAST_30_DAYS = "30"

    @property
    def days(self) -> int | None:
        return int(self.value) if self.value else None

    def cutoff(self, now: datetime | None = None) -> datetime | None:
        if self.days is None:
            return None
        return (now or utc_now()) - timedelta(days=self.days)


@dataclass(frozen=True)
class EntryFilter:
    """Ad-hoc filter inputs; empty values disable their stage."""

    query: str = ""
    category_id: str = ""
    recency: Recency = Recency.ALL

    @property
    def is_empty(self) -> bool:
        return not self.query and not self.category_id and self.recency is Recency.ALL


def strip_tags(markup: str) -> str:
    """Remove anything that looks like a ``<...>`` tag."""
    return _TAG_RE.sub("", markup)


def matches_text(entry: KnowledgeItem, query: str) -> bool:
    needle = query.lower()
    return needle in entry.title.lower() or needle in strip_tags(entry.content).lower()


def search(entries: Iterable[KnowledgeItem], query: str) -> list[KnowledgeItem]:
    if not query:
        return list(entries)
    return [e for e in entries if matches_text(e, query)]


def in_category(entries: Iterable[KnowledgeItem], category_id: str) -> list[KnowledgeItem]:
    if not category_id:
        return list(entries)
    return [e for e in entries if e.category_id == category_id]


def created_since(
    entries: Iterable[KnowledgeItem], recency: Recency, now: datetime | None = None
) -> list[KnowledgeItem]:
    cutoff = recency.cutoff(now)
    if cutoff is None:
        return list(entries)
    return [e for e in entries if e.created_at >= cutoff]


def filter_entries(
    entries: Sequence[KnowledgeItem],
    entry_filter: EntryFilter,
    now: datetime | None = None,
) -> list[KnowledgeItem]:
    """Apply text search, category filter and recency filter, in that order."""
    result = search(entries, entry_filter.query)
    result = in_category(result, entry_filter.category_id)
    return created_since(result, entry_filter.recency, now)
