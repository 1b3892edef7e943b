"""Media upload intake and download.

An upload streams the file into the object store through the checksum relay
and then records a post pointing at the object's public URL. Nothing is
cleaned up if the relay is cancelled or fails part-way; every attempt writes
under a freshly generated object name, so a retry never overwrites an orphan.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from mediafeed.core.errors import NotFoundError, ValidationFailedError
from mediafeed.repositories.object_store import ObjectStore
from mediafeed.schemas.post import UploadResult
from mediafeed.services.checksum_relay import DEFAULT_BUFFER_SIZE, AsyncReadable, relay
from mediafeed.services.post_aggregate import PostAggregate
from mediafeed.utils.tokens import object_name_for

__all__ = ["UploadService"]

logger = logging.getLogger(__name__)


class UploadService:
    """Relays uploads into the object store and records the resulting posts."""

    def __init__(
        self,
        objects: ObjectStore,
        posts: PostAggregate,
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        max_bytes: int | None = None,
    ) -> None:
        self.objects = objects
        self.posts = posts
        self.buffer_size = buffer_size
        self.max_bytes = max_bytes

    async def upload(
        self,
        *,
        owner_id: str | None,
        owner_username: str | None,
        file_name: str | None,
        source: AsyncReadable | None,
        caption: str | None = None,
        title: str | None = None,
        is_cancelled: Callable[[], Awaitable[bool]] | None = None,
    ) -> UploadResult:
        """Store the file and create its post.

        Raises:
            ValidationFailedError: If the file, owner id or file name is missing.
            PayloadTooLargeError: If the file exceeds ``max_bytes``.
            UploadCancelledError: If ``is_cancelled`` reports a client abort.
        """
        if source is None or not owner_id or not file_name or not file_name.strip():
            logger.info("Upload rejected: missing required fields")
            raise ValidationFailedError("Missing required fields.")

        object_name = object_name_for(file_name.strip())
        logger.info("Receiving upload %s from user %s", object_name, owner_id)

        try:
            async with self.objects.open_write(object_name) as sink:
                result = await relay(
                    source,
                    sink,
                    buffer_size=self.buffer_size,
                    max_bytes=self.max_bytes,
                    is_cancelled=is_cancelled,
                )
        except asyncio.CancelledError:
            logger.warning("Upload %s cancelled; partial object left in place", object_name)
            raise

        content_url = self.objects.public_url(object_name)
        logger.info(
            "Upload %s complete: %d bytes, CRC32 %s",
            object_name,
            result.size,
            result.checksum,
        )

        post = self.posts.create_post(
            author_id=owner_id,
            author_username=owner_username,
            content=content_url,
            caption=caption,
            title=title,
            checksum=result.checksum,
        )
        return UploadResult(
            post_id=post.post_id,
            checksum=result.checksum,
            size=result.size,
            content_url=content_url,
        )

    async def download(self, object_name: str) -> tuple[AsyncIterator[bytes], str]:
        """Return a chunk stream and content type for ``object_name``.

        Raises:
            ValidationFailedError: If no name is given.
            NotFoundError: If the object does not exist.
        """
        if not object_name:
            raise ValidationFailedError("File name is required.")
        if not await self.objects.exists(object_name):
            raise NotFoundError("File not found.", object_name=object_name)
        return self.objects.open_read(object_name), self.objects.content_type(object_name)
