"""Object store gateway for uploaded media.

Objects are addressed by name inside one container. Writes are streamed
through a sink so callers never hold a whole object in memory.
"""

from __future__ import annotations

import logging
import mimetypes
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from pathlib import Path
from typing import Protocol

import aiofiles
import aiofiles.os

from mediafeed.core.errors import NotFoundError, ValidationFailedError

__all__ = ["LocalObjectStore", "ObjectSink", "ObjectStore"]

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
READ_CHUNK_SIZE = 64 * 1024


class ObjectSink(Protocol):
    """Destination for streamed object bytes."""

    async def write(self, data: bytes) -> int | None: ...


class ObjectStore(ABC):
    """Abstract base class for object stores.

    Implementations:
        - LocalObjectStore (directory tree, development and tests)
    """

    def __init__(self, public_base_url: str) -> None:
        self.public_base_url = public_base_url

    def public_url(self, name: str) -> str:
        """Return the content-delivery URL under which ``name`` is served."""
        return f"{self.public_base_url}{name}"

    def content_type(self, name: str) -> str:
        """Guess the MIME type of an object from its name."""
        guessed, _ = mimetypes.guess_type(name)
        return guessed or DEFAULT_CONTENT_TYPE

    @abstractmethod
    def open_write(self, name: str) -> AbstractAsyncContextManager[ObjectSink]:
        """Open a streaming writer for ``name``, replacing any existing object."""

    @abstractmethod
    def open_read(self, name: str) -> AsyncIterator[bytes]:
        """Yield the object's bytes in chunks.

        Raises:
            NotFoundError: If the object does not exist.
        """

    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Return whether an object called ``name`` exists."""

    async def put(self, name: str, chunks: AsyncIterator[bytes]) -> str:
        """Write every chunk to ``name`` and return its public URL."""
        async with self.open_write(name) as sink:
            async for chunk in chunks:
                await sink.write(chunk)
        return self.public_url(name)


class LocalObjectStore(ObjectStore):
    """Object store backed by a local directory.

    The container directory is created lazily on the first write.
    """

    def __init__(self, root: str | Path, container: str, public_base_url: str) -> None:
        super().__init__(public_base_url)
        self.root = Path(root)
        self.container = container

    @property
    def container_path(self) -> Path:
        return self.root / self.container

    def _path_for(self, name: str) -> Path:
        # Object names are flat; reject anything that would escape the container.
        if not name or name != Path(name).name:
            raise ValidationFailedError("Invalid object name", object_name=name)
        return self.container_path / name

    @asynccontextmanager
    async def open_write(self, name: str) -> AsyncIterator[ObjectSink]:
        path = self._path_for(name)
        await aiofiles.os.makedirs(self.container_path, exist_ok=True)
        async with aiofiles.open(path, "wb") as handle:
            yield handle
        logger.debug("Object written: %s", path)

    async def open_read(self, name: str) -> AsyncIterator[bytes]:
        path = self._path_for(name)
        if not await aiofiles.os.path.isfile(path):
            raise NotFoundError("Object not found", object_name=name)
        async with aiofiles.open(path, "rb") as handle:
            while chunk := await handle.read(READ_CHUNK_SIZE):
                yield chunk

    async def exists(self, name: str) -> bool:
        try:
            path = self._path_for(name)
        except ValidationFailedError:
            return False
        return await aiofiles.os.path.isfile(path)
