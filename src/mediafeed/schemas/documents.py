"""Pydantic models for the documents kept in the shared collection.

Documents are serialized with camelCase field names and carry ``id`` and
``type`` so a raw body read back from the store is self-describing.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mediafeed.db.time import utcnow

DOC_TYPE_USER = "user"
DOC_TYPE_USERNAME_RESERVATION = "username-reservation"
DOC_TYPE_POST = "post"
DOC_TYPE_COMMENT = "comment"
DOC_TYPE_LIKE = "like"


def new_id() -> str:
    """Return a fresh random document identifier."""
    return str(uuid.uuid4())


def like_id_for(post_id: str, user_id: str) -> str:
    """Return the identifier every Like by ``user_id`` on ``post_id`` must use.

    Deriving the id from the pair makes a second Like for the same pair collide
    with the first on create, so the store rejects phantom double-likes.
    """
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"mediafeed/like/{post_id}/{user_id}"))


class StoredDocument(BaseModel):
    """Base class for everything persisted in the document collection."""

    doc_type: ClassVar[str]

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def document_id(self) -> str:
        raise NotImplementedError

    @property
    def partition_key(self) -> str:
        raise NotImplementedError

    def to_document(self) -> dict[str, Any]:
        """Return the JSON body stored for this entity."""
        body = self.model_dump(by_alias=True, mode="json")
        body["id"] = self.document_id
        body["type"] = self.doc_type
        return body


class User(StoredDocument):
    """A registered account. Partitioned by its own id."""

    doc_type: ClassVar[str] = DOC_TYPE_USER

    user_id: str = Field(default_factory=new_id)
    username: str
    profile_pic_url: str | None = None
    date_created: datetime = Field(default_factory=utcnow)

    @property
    def document_id(self) -> str:
        return self.user_id

    @property
    def partition_key(self) -> str:
        return self.user_id


class UsernameReservation(StoredDocument):
    """Marker claiming a normalized username.

    Every reservation is written into the same fixed partition, so the
    per-partition id uniqueness doubles as a global username constraint.
    """

    doc_type: ClassVar[str] = DOC_TYPE_USERNAME_RESERVATION

    username: str
    reservation_partition: str = Field(exclude=True)
    date_created: datetime = Field(default_factory=utcnow)

    @property
    def document_id(self) -> str:
        return self.username

    @property
    def partition_key(self) -> str:
        return self.reservation_partition


class Post(StoredDocument):
    """A media post. Its id is also the partition key of its comments and likes."""

    doc_type: ClassVar[str] = DOC_TYPE_POST

    post_id: str = Field(default_factory=new_id)
    title: str | None = None
    # Public URL of the media object, or free text for text-only posts.
    content: str | None = None
    caption: str = ""
    author_id: str
    author_username: str | None = None
    date_created: datetime = Field(default_factory=utcnow)
    like_count: int = Field(default=0, ge=0)
    comment_count: int = Field(default=0, ge=0)
    checksum: str | None = None

    @property
    def document_id(self) -> str:
        return self.post_id

    @property
    def partition_key(self) -> str:
        return self.post_id


class Comment(StoredDocument):
    """A comment, co-located with its post."""

    doc_type: ClassVar[str] = DOC_TYPE_COMMENT

    comment_id: str = Field(default_factory=new_id)
    post_id: str
    content: str
    author_id: str
    author_username: str | None = None
    profile_pic_url: str | None = None
    date_created: datetime = Field(default_factory=utcnow)

    @property
    def document_id(self) -> str:
        return self.comment_id

    @property
    def partition_key(self) -> str:
        return self.post_id


class Like(StoredDocument):
    """A like, co-located with its post. Its existence is the "liked" state."""

    doc_type: ClassVar[str] = DOC_TYPE_LIKE

    like_id: str
    post_id: str
    user_id: str
    username: str | None = None
    profile_pic_url: str | None = None
    date_created: datetime = Field(default_factory=utcnow)

    @property
    def document_id(self) -> str:
        return self.like_id

    @property
    def partition_key(self) -> str:
        return self.post_id


class LikeStatus(str, Enum):
    """Per (post, user) state of the like toggle."""

    NOT_LIKED = "not_liked"
    LIKED = "liked"
