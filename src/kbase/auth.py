"""Credential checks and the signed-in session.

Passwords are stored and compared in plaintext. This module is not a
security boundary.
"""

from __future__ import annotations

import logging

from .errors import NotFoundError, PermissionDeniedError, SelfDeletionError, ValidationError
from .models import Role, User, new_id
from .store import KnowledgeBase

logger = logging.getLogger(__name__)


class AuthGate:
    """Validates credentials against the users repository."""

    def __init__(self, kb: KnowledgeBase) -> None:
        self.kb = kb

    def authenticate(self, username: str, password: str) -> User | None:
        """Return the user with exactly these credentials, or None.

        Raises:
            ValidationError: If either value is empty.
        """
        if not username or not password:
            raise ValidationError("Please enter both username and password.")
        return self.kb.users.authenticate(username, password)

    def register(
        self, name: str, username: str, password: str, role: Role = Role.USER
    ) -> list[User]:
        """Create an account and return the fresh user collection.

        Raises:
            ValidationError: If any field is empty.
            DuplicateKeyError: If the username is taken.
        """
        if not name.strip() or not username or not password:
            raise ValidationError("Please fill in all fields.")
        user = User(id=new_id(), name=name.strip(), username=username, password=password, role=role)
        return self.kb.users.add(user)


class Session:
    """The identity currently signed in, plus the checks that depend on it."""

    def __init__(self, kb: KnowledgeBase, gate: AuthGate | None = None) -> None:
        self.kb = kb
        self.gate = gate or AuthGate(kb)
        self._user: User | None = None

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def is_admin(self) -> bool:
        return self._user is not None and self._user.is_admin

    def login(self, username: str, password: str) -> User | None:
        """Sign in; on failure the previous identity is kept."""
        user = self.gate.authenticate(username, password)
        if user is None:
            logger.info("Failed login for %s", username)
            return None
        self._user = user
        return user

    def logout(self) -> None:
        self._user = None

    def require_user(self) -> User:
        if self._user is None:
            raise PermissionDeniedError("Please log in first.")
        return self._user

    def require_admin(self) -> User:
        user = self.require_user()
        if not user.is_admin:
            raise PermissionDeniedError("Access denied: only administrators can do this.")
        return user

    def update_user(
        self,
        user_id: str,
        *,
        name: str,
        username: str,
        password: str = "",
        role: Role | None = None,
    ) -> list[User]:
        """Edit a user as the current session.

        Users may edit themselves; administrators may edit anyone. Only
        administrators may change a role. An empty password keeps the
        existing one.
        """
        actor = self.require_user()
        if str(user_id) != actor.id and not actor.is_admin:
            raise PermissionDeniedError("Access denied: you can only edit your own profile.")
        target = self.kb.users.get(user_id)
        if target is None:
            raise NotFoundError(f"User not found: {user_id}")
        if role is not None and role is not target.role and not actor.is_admin:
            raise PermissionDeniedError("Access denied: only administrators can change roles.")
        if not name.strip() or not username:
            raise ValidationError("Name and username are required")

        updated = User(
            id=target.id,
            name=name.strip(),
            username=username,
            password=password,
            role=role or target.role,
        )
        users = self.kb.users.update(updated)
        if target.id == actor.id:
            self._user = self.kb.users.get(actor.id)
        return users

    def delete_user(self, user_id: str) -> list[User]:
        """Delete a user as an administrator, never the session's own account."""
        actor = self.require_admin()
        if str(user_id) == actor.id:
            raise SelfDeletionError("You cannot delete the account you are logged in with.")
        return self.kb.users.delete(user_id)
