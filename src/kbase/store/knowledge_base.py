"""The knowledge base service object handed to every consumer."""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import NotFoundError, ValidationError
from ..models import Category, KnowledgeItem, new_id, utc_now
from .backing import BackingStore, SQLiteStore
from .repositories import (
    CategoryRepository,
    EntryRepository,
    SettingsRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class KnowledgeBase:
    """Aggregates the entity repositories over one backing store.

    Pass an instance to whichever component needs data access; tests inject
    an InMemoryStore instead of SQLite.
    """

    def __init__(self, store: BackingStore) -> None:
        """Initialize the repositories over a store.

        Args:
            store: The backing store shared by all repositories.
        """
        self.store = store
        self.users = UserRepository(store)
        self.entries = EntryRepository(store)
        self.categories = CategoryRepository(store, self.entries)
        self.settings = SettingsRepository(store)

    @classmethod
    def open(cls, db_path: Path) -> "KnowledgeBase":
        """Open (and seed if needed) a SQLite-backed knowledge base."""
        store = SQLiteStore(db_path)
        store.init_db()
        kb = cls(store)
        kb.initialize()
        return kb

    def initialize(self) -> list[str]:
        """Seed every collection that has never been written.

        Existing data is never overwritten.

        Returns:
            Storage keys that were seeded.
        """
        seeded = [
            repo.key
            for repo in (self.categories, self.entries, self.users)
            if repo.initialize()
        ]
        if seeded:
            logger.info("Seeded default data for %s", ", ".join(seeded))
        return seeded

    def create_entry(
        self,
        title: str,
        content: str,
        author_name: str,
        category_id: str | None = None,
        new_category_name: str | None = None,
    ) -> tuple[KnowledgeItem, list[KnowledgeItem]]:
        """Create an entry, optionally creating its category inline.

        Args:
            title: Entry title.
            content: HTML body.
            author_name: Author shown on the entry; "Unknown" if blank.
            category_id: Id of an existing category.
            new_category_name: Name of a category to create for this entry.
                Takes precedence over category_id.

        Returns:
            The new entry and the fresh, newest-first entry collection.

        Raises:
            ValidationError: If a required field is missing.
            NotFoundError: If category_id does not reference a category.
        """
        new_category_name = (new_category_name or "").strip()
        if not title.strip() or not content.strip() or not (category_id or new_category_name):
            raise ValidationError("Please fill all fields")

        if new_category_name:
            category = Category(id=new_id(), name=new_category_name)
            self.categories.add(category)
            final_category_id = category.id
        else:
            assert category_id is not None
            if self.categories.get(category_id) is None:
                raise NotFoundError(f"Category not found: {category_id}")
            final_category_id = str(category_id)

        entry = KnowledgeItem(
            id=new_id(),
            title=title.strip(),
            content=content,
            category_id=final_category_id,
            author_name=author_name.strip() or "Unknown",
            created_at=utc_now(),
            views=0,
        )
        return entry, self.entries.add(entry)

    def delete_category(self, category_id: str) -> list[Category]:
        """Delete an unreferenced category; see CategoryRepository.delete."""
        return self.categories.delete(category_id)

    def authors(self) -> list[str]:
        """Known author names: user display names plus names used on entries."""
        names = {u.name for u in self.users.get_all()}
        names.update(e.author_name for e in self.entries.get_all())
        return sorted(names)

    def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            close()
