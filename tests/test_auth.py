"""Tests for AuthGate and Session."""

import pytest

from kbase.auth import AuthGate, Session
from kbase.errors import (
    DuplicateKeyError,
    NotFoundError,
    PermissionDeniedError,
    SelfDeletionError,
    ValidationError,
)
from kbase.models import Role
from kbase.store import InMemoryStore, KnowledgeBase


@pytest.fixture
def kb() -> KnowledgeBase:
    kb = KnowledgeBase(InMemoryStore())
    kb.initialize()
    return kb


@pytest.fixture
def gate(kb: KnowledgeBase) -> AuthGate:
    return AuthGate(kb)


@pytest.fixture
def admin_session(kb: KnowledgeBase) -> Session:
    session = Session(kb)
    session.login("admin", "123")
    return session


@pytest.fixture
def user_session(kb: KnowledgeBase) -> Session:
    session = Session(kb)
    session.login("user", "123")
    return session


class TestAuthGate:
    """Tests for credential checks and registration."""

    def test_authenticate_seed_admin(self, gate: AuthGate):
        user = gate.authenticate("admin", "123")
        assert user is not None
        assert user.role is Role.ADMIN
        assert user.id == "admin-1"

    def test_authenticate_wrong_password(self, gate: AuthGate):
        assert gate.authenticate("admin", "wrong") is None

    def test_authenticate_is_case_sensitive(self, gate: AuthGate):
        assert gate.authenticate("Admin", "123") is None

    def test_authenticate_blank_input(self, gate: AuthGate):
        with pytest.raises(ValidationError):
            gate.authenticate("", "123")

    def test_register_then_authenticate(self, gate: AuthGate):
        users = gate.register("Maria Silva", "maria", "s3cret")
        assert users[-1].username == "maria"
        assert users[-1].role is Role.USER
        assert gate.authenticate("maria", "s3cret").name == "Maria Silva"

    def test_register_duplicate(self, gate: AuthGate, kb: KnowledgeBase):
        with pytest.raises(DuplicateKeyError):
            gate.register("Someone", "user", "pw")
        assert len(kb.users.get_all()) == 2

    def test_register_requires_all_fields(self, gate: AuthGate, kb: KnowledgeBase):
        with pytest.raises(ValidationError):
            gate.register(" ", "new", "pw")
        assert len(kb.users.get_all()) == 2


class TestSession:
    """Tests for the signed-in session."""

    def test_login_and_logout(self, kb: KnowledgeBase):
        session = Session(kb)
        assert not session.is_authenticated
        assert session.login("user", "123") is not None
        assert session.is_authenticated
        assert not session.is_admin
        session.logout()
        assert session.user is None

    def test_failed_login_keeps_previous_identity(self, admin_session: Session):
        assert admin_session.login("admin", "nope") is None
        assert admin_session.user.username == "admin"

    def test_require_admin(self, user_session: Session, admin_session: Session):
        with pytest.raises(PermissionDeniedError):
            user_session.require_admin()
        assert admin_session.require_admin().username == "admin"

    def test_require_user_when_logged_out(self, kb: KnowledgeBase):
        with pytest.raises(PermissionDeniedError):
            Session(kb).require_user()

    def test_self_edit_keeps_password_when_empty(self, user_session: Session, kb: KnowledgeBase):
        user_session.update_user("user-1", name="John Q", username="johnq")
        stored = kb.users.get("user-1")
        assert stored.name == "John Q"
        assert stored.password == "123"
        assert user_session.user.username == "johnq"

    def test_user_cannot_edit_others(self, user_session: Session):
        with pytest.raises(PermissionDeniedError):
            user_session.update_user("admin-1", name="X", username="x")

    def test_user_cannot_change_own_role(self, user_session: Session, kb: KnowledgeBase):
        with pytest.raises(PermissionDeniedError):
            user_session.update_user("user-1", name="John", username="user", role=Role.ADMIN)
        assert kb.users.get("user-1").role is Role.USER

    def test_admin_edits_role_and_password(self, admin_session: Session, kb: KnowledgeBase):
        admin_session.update_user(
            "user-1", name="John", username="user", password="456", role=Role.ADMIN
        )
        stored = kb.users.get("user-1")
        assert stored.role is Role.ADMIN
        assert stored.password == "456"

    def test_edit_unknown_user(self, admin_session: Session):
        with pytest.raises(NotFoundError):
            admin_session.update_user("ghost", name="G", username="g")

    def test_admin_deletes_other_user(self, admin_session: Session):
        users = admin_session.delete_user("user-1")
        assert [u.id for u in users] == ["admin-1"]

    def test_admin_cannot_delete_self(self, admin_session: Session, kb: KnowledgeBase):
        with pytest.raises(SelfDeletionError):
            admin_session.delete_user("admin-1")
        assert len(kb.users.get_all()) == 2

    def test_user_cannot_delete(self, user_session: Session):
        with pytest.raises(PermissionDeniedError):
            user_session.delete_user("admin-1")
