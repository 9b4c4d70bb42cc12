"""Persistence: backing stores, repositories and the KnowledgeBase service."""

from .backing import BackingStore, InMemoryStore, SQLiteStore
from .knowledge_base import KnowledgeBase
from .repositories import (
    CategoryRepository,
    EntryRepository,
    SettingsRepository,
    UserRepository,
)

__all__ = [
    "BackingStore",
    "CategoryRepository",
    "EntryRepository",
    "InMemoryStore",
    "KnowledgeBase",
    "SQLiteStore",
    "SettingsRepository",
    "UserRepository",
]
