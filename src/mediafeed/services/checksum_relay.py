"""Streaming relay that checksums bytes while copying them to a sink.

The relay reads at most one buffer at a time, so arbitrarily large uploads are
handled in constant memory. The checksum is the standard IEEE CRC-32
(reflected polynomial 0xEDB88320), folded incrementally over each chunk with
:func:`zlib.crc32` and reported as eight lowercase hex digits.
"""

from __future__ import annotations

import logging
import zlib
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from mediafeed.core.errors import PayloadTooLargeError, UploadCancelledError
from mediafeed.repositories.object_store import ObjectSink

__all__ = ["DEFAULT_BUFFER_SIZE", "Crc32", "RelayResult", "relay"]

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 4 * 1024 * 1024


class AsyncReadable(Protocol):
    """Anything with an awaitable ``read(size)``, e.g. ``fastapi.UploadFile``."""

    async def read(self, size: int = -1) -> bytes: ...


class Crc32:
    """Incremental CRC-32 accumulator."""

    def __init__(self) -> None:
        self._value = 0

    def update(self, data: bytes) -> None:
        # zlib keeps the pre/post complement internal, so the running value
        # is always the finalized CRC of everything seen so far.
        self._value = zlib.crc32(data, self._value)

    @property
    def value(self) -> int:
        return self._value & 0xFFFFFFFF

    def hexdigest(self) -> str:
        return f"{self.value:08x}"


@dataclass(frozen=True)
class RelayResult:
    """Outcome of a completed relay."""

    checksum: str
    size: int


async def relay(
    source: AsyncReadable,
    sink: ObjectSink,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    max_bytes: int | None = None,
    is_cancelled: Callable[[], Awaitable[bool]] | None = None,
) -> RelayResult:
    """Copy ``source`` into ``sink`` chunk by chunk, checksumming as it goes.

    Args:
        source: Stream to drain.
        sink: Destination receiving each chunk in order.
        buffer_size: Maximum bytes read per chunk.
        max_bytes: Abort once more than this many bytes have been read.
        is_cancelled: Polled before each chunk; a true result aborts the relay.

    Returns:
        The CRC-32 of exactly the bytes written and their count.

    Raises:
        UploadCancelledError: If ``is_cancelled`` reports cancellation.
        PayloadTooLargeError: If ``max_bytes`` is exceeded.

    Notes:
        On any abort the bytes already written stay in the sink. Cleaning them
        up is the caller's decision.
    """
    if buffer_size < 1:
        raise ValueError("buffer_size must be positive")

    crc = Crc32()
    total = 0
    while True:
        if is_cancelled is not None and await is_cancelled():
            logger.info("Relay cancelled by caller after %d bytes", total)
            raise UploadCancelledError("Upload was cancelled by the client", bytes_relayed=total)

        chunk = await source.read(buffer_size)
        if not chunk:
            break

        total += len(chunk)
        if max_bytes is not None and total > max_bytes:
            raise PayloadTooLargeError(
                f"Upload exceeds the {max_bytes} byte limit",
                bytes_relayed=total - len(chunk),
            )

        await sink.write(chunk)
        crc.update(chunk)
        logger.debug("Relayed %d bytes so far", total)

    return RelayResult(checksum=crc.hexdigest(), size=total)
