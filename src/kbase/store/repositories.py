"""Repositories over the backing store, one per entity collection.

Every operation reads the current persisted collection, applies its change,
writes the whole collection back and returns a freshly decoded copy. There
is no in-memory mirror between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from ..errors import CategoryInUseError, DuplicateKeyError, ValidationError
from ..models import Category, KnowledgeItem, User, utc_now
from .backing import BackingStore
from .seed import (
    CATEGORIES_KEY,
    DEFAULT_HEADER_COLOR,
    ENTRIES_KEY,
    HEADER_COLOR_KEY,
    USERS_KEY,
    seed_categories,
    seed_entries,
    seed_users,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", User, Category, KnowledgeItem)


def _same_id(left: Any, right: Any) -> bool:
    return str(left) == str(right)


class _CollectionRepository(Generic[T]):
    """Shared read/persist plumbing for list-valued keys."""

    key: str
    model: type[T]

    def __init__(self, store: BackingStore) -> None:
        self.store = store

    def seed(self) -> list[T]:
        raise NotImplementedError

    def _load(self, default: list[T]) -> list[T]:
        raw = self.store.read(self.key, None)
        if raw is None:
            return default
        if not isinstance(raw, list):
            logger.warning("Error reading %s from storage: expected a list", self.key)
            return default
        try:
            return [self.model.from_dict(item) for item in raw]
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Error reading %s from storage: %s", self.key, e)
            return default

    def _persist(self, items: Sequence[T]) -> list[T]:
        self.store.write(self.key, [item.to_dict() for item in items])
        return self._load([])

    def get_all(self) -> list[T]:
        """Return the stored collection, or the seed records if never written."""
        return self._load(self.seed())

    def get(self, item_id: Any) -> T | None:
        for item in self.get_all():
            if _same_id(item.id, item_id):
                return item
        return None

    def delete(self, item_id: Any) -> list[T]:
        """Remove every record whose id matches item_id and return the rest."""
        current = self.get_all()
        return self._persist([item for item in current if not _same_id(item.id, item_id)])

    def initialize(self) -> bool:
        """Write the seed records if the key has never been written.

        Returns:
            True if seed data was written.
        """
        if self.store.contains(self.key):
            return False
        self.store.write(self.key, [item.to_dict() for item in self.seed()])
        return True


class UserRepository(_CollectionRepository[User]):
    key = USERS_KEY
    model = User

    def seed(self) -> list[User]:
        return seed_users()

    def find_by_username(self, username: str) -> User | None:
        for user in self.get_all():
            if user.username == username:
                return user
        return None

    def add(self, user: User) -> list[User]:
        """Append a user, enforcing username uniqueness.

        Raises:
            ValidationError: If username or password is empty.
            DuplicateKeyError: If the username is already taken.
        """
        if not user.username or not user.password:
            raise ValidationError("Username and password are required")
        current = self.get_all()
        if any(u.username == user.username for u in current):
            raise DuplicateKeyError("username", user.username)
        return self._persist([*current, user])

    def update(self, user: User) -> list[User]:
        """Replace the user with the same id.

        An empty password keeps the stored one. Unknown ids leave the
        collection unchanged.

        Raises:
            DuplicateKeyError: If another user already has the new username.
        """
        if not user.username:
            raise ValidationError("Username is required")
        current = self.get_all()
        existing = next((u for u in current if _same_id(u.id, user.id)), None)
        if existing is None:
            return self._persist(current)
        if any(
            u.username == user.username and not _same_id(u.id, user.id) for u in current
        ):
            raise DuplicateKeyError("username", user.username)
        if not user.password:
            user = User(
                id=existing.id,
                name=user.name,
                username=user.username,
                password=existing.password,
                role=user.role,
            )
        return self._persist([user if _same_id(u.id, user.id) else u for u in current])

    def authenticate(self, username: str, password: str) -> User | None:
        """Return the first user whose credentials match exactly."""
        for user in self.get_all():
            if user.username == username and user.password == password:
                return user
        return None


class EntryRepository(_CollectionRepository[KnowledgeItem]):
    key = ENTRIES_KEY
    model = KnowledgeItem

    def __init__(self, store: BackingStore) -> None:
        super().__init__(store)
        # Seed timestamps are fixed per repository so repeated reads agree.
        self._seed_time = utc_now()

    def seed(self) -> list[KnowledgeItem]:
        return seed_entries(self._seed_time)

    def add(self, entry: KnowledgeItem) -> list[KnowledgeItem]:
        """Prepend an entry so the collection stays newest-first."""
        if not entry.title.strip():
            raise ValidationError("Title is required")
        return self._persist([entry, *self.get_all()])

    def update(self, entry: KnowledgeItem) -> list[KnowledgeItem]:
        current = self.get_all()
        return self._persist([entry if _same_id(e.id, entry.id) else e for e in current])

    def in_category(self, category_id: Any) -> list[KnowledgeItem]:
        return [e for e in self.get_all() if e.category_id == str(category_id)]


class CategoryRepository(_CollectionRepository[Category]):
    key = CATEGORIES_KEY
    model = Category

    def __init__(self, store: BackingStore, entries: EntryRepository) -> None:
        super().__init__(store)
        self.entries = entries

    def seed(self) -> list[Category]:
        return seed_categories()

    def add(self, category: Category) -> list[Category]:
        if not category.name.strip():
            raise ValidationError("Category name cannot be empty")
        return self._persist([*self.get_all(), category])

    def update(self, category_id: Any, name: str) -> list[Category]:
        """Rename a category; unknown ids leave the collection unchanged."""
        name = name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        current = self.get_all()
        return self._persist(
            [Category(id=c.id, name=name) if _same_id(c.id, category_id) else c for c in current]
        )

    def delete(self, category_id: Any) -> list[Category]:
        """Delete a category that no entry references.

        Raises:
            CategoryInUseError: If any entry still has this category; nothing
                is written in that case.
        """
        in_use = self.entries.in_category(category_id)
        if in_use:
            raise CategoryInUseError(str(category_id), len(in_use))
        return super().delete(category_id)

    def name_of(self, category_id: Any) -> str:
        category = self.get(category_id)
        return category.name if category else "Uncategorized"


class SettingsRepository:
    """Scalar presentation settings."""

    def __init__(self, store: BackingStore) -> None:
        self.store = store

    def get_header_color(self) -> str:
        color = self.store.read(HEADER_COLOR_KEY, None)
        if not isinstance(color, str) or not color:
            return DEFAULT_HEADER_COLOR
        return color

    def set_header_color(self, color: str) -> str:
        color = color.strip()
        if not color:
            raise ValidationError("Header color cannot be empty")
        self.store.write(HEADER_COLOR_KEY, color)
        return self.get_header_color()
