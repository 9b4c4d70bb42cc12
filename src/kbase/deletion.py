"""Two-phase deletion of knowledge entries: request, then confirm or cancel."""

from __future__ import annotations

from .auth import Session
from .errors import NotFoundError
from .models import KnowledgeItem
from .store import KnowledgeBase


class DeleteConfirmation:
    """Tracks one pending entry deletion.

    ``request`` only records the intent; nothing is written until
    ``confirm``.
    """

    def __init__(self, kb: KnowledgeBase, session: Session) -> None:
        self.kb = kb
        self.session = session
        self._pending: KnowledgeItem | None = None

    @property
    def pending(self) -> KnowledgeItem | None:
        return self._pending

    def request(self, entry_id: str) -> KnowledgeItem:
        """Record the intent to delete an entry.

        Raises:
            PermissionDeniedError: If the session is not an administrator.
            NotFoundError: If the entry does not exist.
        """
        self.session.require_admin()
        entry = self.kb.entries.get(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry not found: {entry_id}")
        self._pending = entry
        return entry

    def cancel(self) -> None:
        self._pending = None

    def confirm(self) -> list[KnowledgeItem]:
        """Delete the pending entry and return the fresh entry collection."""
        if self._pending is None:
            raise RuntimeError("No deletion has been requested")
        self.session.require_admin()
        entry_id = self._pending.id
        self._pending = None
        return self.kb.entries.delete(entry_id)
