"""Data models for users, categories and knowledge entries.

Records are persisted as JSON objects with camelCase keys; ``to_dict`` and
``from_dict`` translate between that layout and the dataclasses below.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def new_id() -> str:
    """Return a fresh opaque record id."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC.

    A trailing ``Z`` (as written by JavaScript's ``toISOString``) is accepted.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require(data: dict[str, Any], *fields: str) -> None:
    missing = [name for name in fields if name not in data]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")


class Role(Enum):
    """Access level of a user."""

    ADMIN = "ADMIN"
    USER = "USER"


@dataclass(frozen=True)
class User:
    """An account allowed to sign in.

    Attributes:
        id: Opaque unique identifier.
        name: Display name.
        username: Unique, case-sensitive login name.
        password: Plaintext credential.
        role: ADMIN can manage content and users, USER is read-only.
    """

    id: str
    name: str
    username: str
    password: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "password": self.password,
            "role": self.role.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        _require(data, "id", "username", "password")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["username"])),
            username=str(data["username"]),
            password=str(data["password"]),
            role=Role(data.get("role", Role.USER.value)),
        )


@dataclass(frozen=True)
class Category:
    """A classification tag for entries."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        _require(data, "id", "name")
        return cls(id=str(data["id"]), name=str(data["name"]))


@dataclass(frozen=True)
class KnowledgeItem:
    """A knowledge base article.

    Attributes:
        id: Opaque unique identifier.
        title: Non-empty title.
        content: HTML markup, stored and rendered as-is.
        category_id: Id of the owning Category.
        author_name: Free-text author, not tied to a User.
        created_at: Creation time, never changed after creation.
        views: Non-negative view counter.
    """

    id: str
    title: str
    content: str
    category_id: str
    author_name: str
    created_at: datetime
    views: int = 0

    def with_views(self, views: int) -> "KnowledgeItem":
        if views < 0:
            raise ValueError("views must not be negative")
        return replace(self, views=views)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "categoryId": self.category_id,
            "authorName": self.author_name,
            "createdAt": self.created_at.isoformat(),
            "views": self.views,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KnowledgeItem":
        _require(data, "id", "title", "content", "categoryId", "createdAt")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            content=str(data["content"]),
            category_id=str(data["categoryId"]),
            author_name=str(data.get("authorName") or "Unknown"),
            created_at=parse_timestamp(str(data["createdAt"])),
            views=max(int(data.get("views", 0)), 0),
        )
