"""Exceptions raised by the knowledge base core."""


class KBaseError(Exception):
    """Base class for reportable knowledge base failures."""


class ValidationError(KBaseError, ValueError):
    """A required field is missing or empty; nothing was persisted."""


class DuplicateKeyError(KBaseError):
    """A unique key (username) is already taken."""

    def __init__(self, key: str, value: str) -> None:
        super().__init__(f"{key.capitalize()} already exists: {value}")
        self.key = key
        self.value = value


class CategoryInUseError(KBaseError):
    """A category cannot be deleted while entries still reference it."""

    def __init__(self, category_id: str, entry_count: int) -> None:
        super().__init__(
            f"Cannot delete category {category_id}: it contains "
            f"{entry_count} knowledge base {'entry' if entry_count == 1 else 'entries'}. "
            "Reassign or delete the entries first."
        )
        self.category_id = category_id
        self.entry_count = entry_count


class NotFoundError(KBaseError, LookupError):
    """A referenced record does not exist."""


class PermissionDeniedError(KBaseError):
    """The current session is not allowed to perform the operation."""


class SelfDeletionError(PermissionDeniedError):
    """A user tried to delete the identity of their own active session."""
