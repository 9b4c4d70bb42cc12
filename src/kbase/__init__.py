"""Knowledge base data store, query layer and AI helpers."""

from .auth import AuthGate, Session
from .models import Category, KnowledgeItem, Role, User
from .query import EntryFilter, Recency, filter_entries
from .store import InMemoryStore, KnowledgeBase, SQLiteStore

__all__ = [
    "AuthGate",
    "Category",
    "EntryFilter",
    "InMemoryStore",
    "KnowledgeBase",
    "KnowledgeItem",
    "Recency",
    "Role",
    "SQLiteStore",
    "Session",
    "User",
    "filter_entries",
]
