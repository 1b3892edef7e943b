# tests/test_identity.py
"""Tests for username reservation, registration and login."""

from unittest.mock import patch

import pytest

from mediafeed.core.errors import (
    ConflictError,
    DataIntegrityError,
    InternalError,
    NotFoundError,
    ValidationFailedError,
)
from mediafeed.repositories.document_store import DocumentStore
from mediafeed.schemas.documents import User
from mediafeed.services.identity import IdentityRegistry, normalize_username


def test_normalize_username() -> None:
    assert normalize_username("  Alice ") == "alice"


def test_register_enforces_unique_normalized_usernames(registry: IdentityRegistry) -> None:
    alice = registry.register("alice")
    with pytest.raises(ConflictError):
        registry.register("Alice ")
    bob = registry.register("bob")

    assert alice.username == "alice"
    assert bob.username == "bob"
    assert alice.user_id != bob.user_id


def test_register_stores_reservation_and_user(
    registry: IdentityRegistry,
    store: DocumentStore,
) -> None:
    user = registry.register("Carol", profile_pic_url="https://cdn.test/carol.png")

    reservation = store.point_read("carol", "unique_username")
    assert reservation["type"] == "username-reservation"

    stored = store.point_read(user.user_id, user.user_id)
    assert stored["type"] == "user"
    assert stored["username"] == "carol"
    assert stored["profilePicUrl"] == "https://cdn.test/carol.png"


def test_conflicting_registration_writes_no_user(
    registry: IdentityRegistry,
    store: DocumentStore,
) -> None:
    registry.register("dave")
    with pytest.raises(ConflictError):
        registry.register("DAVE")
    assert len(store.query("user", filters={"username": "dave"})) == 1


def test_register_rejects_blank_username(registry: IdentityRegistry) -> None:
    with pytest.raises(ValidationFailedError):
        registry.register("   ")


def test_register_rejects_overlong_username(
    registry: IdentityRegistry,
    store: DocumentStore,
) -> None:
    with pytest.raises(ValidationFailedError):
        registry.register("x" * 65)
    assert store.query("username-reservation") == []

    # Surrounding whitespace does not count towards the limit.
    assert registry.register(f"  {'y' * 64}  ").username == "y" * 64


def test_failed_user_write_leaves_reservation(
    registry: IdentityRegistry,
    store: DocumentStore,
) -> None:
    real_create = store.create

    def fail_on_user(body, partition_key):
        if body["type"] == "user":
            raise InternalError("user write failed")
        return real_create(body, partition_key)

    with patch.object(store, "create", side_effect=fail_on_user):
        with pytest.raises(InternalError):
            registry.register("erin")

    assert store.point_read("erin", "unique_username")["username"] == "erin"
    with pytest.raises(NotFoundError):
        registry.login("erin")
    with pytest.raises(ConflictError):
        registry.register("erin")


def test_login_normalizes(registry: IdentityRegistry) -> None:
    user = registry.register("frank")
    assert registry.login("  FRANK ").user_id == user.user_id


def test_login_unknown_user(registry: IdentityRegistry) -> None:
    with pytest.raises(NotFoundError):
        registry.login("nobody")


def test_login_duplicate_users_is_integrity_violation(
    registry: IdentityRegistry,
    store: DocumentStore,
) -> None:
    for _ in range(2):
        user = User(username="grace")
        store.create(user.to_document(), user.partition_key)

    with pytest.raises(DataIntegrityError) as excinfo:
        registry.login("grace")
    assert len(excinfo.value.context["user_ids"]) == 2


def test_update_profile_picture_keeps_username(registry: IdentityRegistry) -> None:
    user = registry.register("heidi")
    updated = registry.update_profile_picture(user.user_id, "https://cdn.test/h.png")
    assert updated.username == "heidi"
    assert registry.get_user(user.user_id).profile_pic_url == "https://cdn.test/h.png"


def test_get_user_missing(registry: IdentityRegistry) -> None:
    with pytest.raises(NotFoundError):
        registry.get_user("missing")
