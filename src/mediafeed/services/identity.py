"""Account registration and lookup with globally unique usernames."""

from __future__ import annotations

import logging

from mediafeed.core.errors import (
    ConflictError,
    DataIntegrityError,
    NotFoundError,
    ValidationFailedError,
)
from mediafeed.repositories.document_store import DocumentStore
from mediafeed.schemas.documents import DOC_TYPE_USER, User, UsernameReservation

__all__ = ["IdentityRegistry", "normalize_username"]

logger = logging.getLogger(__name__)

DEFAULT_USERNAME_PARTITION = "unique_username"

# The normalized username is the reservation document id.
MAX_USERNAME_LENGTH = 64


def normalize_username(username: str) -> str:
    """Return the canonical (trimmed, lowercased) form of a username."""
    return username.strip().lower()


class IdentityRegistry:
    """Registers users behind a username reservation.

    The reservation lives in one shared partition, so two reservations for the
    same name collide on create. The reservation and the user live in different
    partitions and are written one after the other without a transaction: if
    the user write fails, the reservation stays behind and the name is taken.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        username_partition: str = DEFAULT_USERNAME_PARTITION,
    ) -> None:
        self.store = store
        self.username_partition = username_partition

    def register(self, username: str, profile_pic_url: str | None = None) -> User:
        """Create a user after reserving the normalized username.

        Raises:
            ValidationFailedError: If the username is blank or too long.
            ConflictError: If the username is already reserved.
        """
        normalized = normalize_username(username)
        if not normalized:
            raise ValidationFailedError("Username is required")
        if len(normalized) > MAX_USERNAME_LENGTH:
            raise ValidationFailedError(
                f"Username must be at most {MAX_USERNAME_LENGTH} characters",
                username=normalized,
            )

        reservation = UsernameReservation(
            username=normalized,
            reservation_partition=self.username_partition,
        )
        try:
            self.store.create(reservation.to_document(), reservation.partition_key)
        except ConflictError as err:
            logger.info("Registration rejected, username %r already reserved", normalized)
            raise ConflictError(
                f"User with the username {normalized} already exists.",
                username=normalized,
            ) from err

        user = User(username=normalized, profile_pic_url=profile_pic_url)
        self.store.create(user.to_document(), user.partition_key)
        logger.info("Registered user %s as %r", user.user_id, normalized)
        return user

    def login(self, username: str) -> User:
        """Return the single user registered under ``username``.

        Raises:
            NotFoundError: If no user has that username.
            DataIntegrityError: If more than one user has that username.
        """
        normalized = normalize_username(username)
        matches = self.store.query(DOC_TYPE_USER, filters={"username": normalized}, limit=2)
        if not matches:
            raise NotFoundError("User not found", username=normalized)
        if len(matches) > 1:
            user_ids = [doc.get("userId") for doc in matches]
            logger.error(
                "More than one user found for username %r: %s",
                normalized,
                user_ids,
            )
            raise DataIntegrityError(
                f"More than one user found for username '{normalized}'",
                username=normalized,
                user_ids=user_ids,
            )
        return User.model_validate(matches[0])

    def get_user(self, user_id: str) -> User:
        """Return a user by id.

        Raises:
            NotFoundError: If the user does not exist.
        """
        return User.model_validate(self.store.point_read(user_id, user_id))

    def update_profile_picture(self, user_id: str, profile_pic_url: str | None) -> User:
        """Replace the user's profile picture URL. The username never changes."""
        user = self.get_user(user_id)
        user.profile_pic_url = profile_pic_url
        self.store.upsert(user.to_document(), user.partition_key)
        return user
