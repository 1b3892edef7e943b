"""Error taxonomy shared by the gateways, the services and the API layer.

Every failure the core reports is a :class:`MediaFeedError`. The API layer
renders them with ``status_code`` and ``code``; nothing below the API layer
knows about HTTP beyond those two class attributes.
"""

from __future__ import annotations


class MediaFeedError(RuntimeError):
    """Base class for all failures reported by the media feed core."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class ConflictError(MediaFeedError):
    """A uniqueness constraint rejected the write (e.g. username already taken)."""

    status_code = 409
    code = "conflict"


class ConcurrentUpdateError(ConflictError):
    """Another writer changed a document after this batch read it.

    Unlike a uniqueness conflict, re-running the batch on fresh data may succeed.
    """

    code = "concurrent_update"


class NotFoundError(MediaFeedError):
    """The referenced post, comment, like, user or object does not exist."""

    status_code = 404
    code = "not_found"


class ValidationFailedError(MediaFeedError):
    """Required input was missing or malformed."""

    status_code = 400
    code = "validation_failed"


class PayloadTooLargeError(ValidationFailedError):
    """An upload exceeded the configured byte ceiling."""

    status_code = 413
    code = "payload_too_large"


class UploadCancelledError(MediaFeedError):
    """The client aborted an in-flight upload.

    Partially written object content is left behind; a retry must use a fresh
    object name.
    """

    status_code = 499
    code = "cancelled"


class DataIntegrityError(MediaFeedError):
    """An invariant that should be structurally impossible was observed false."""

    status_code = 500
    code = "data_integrity_violation"


class TransientStoreError(MediaFeedError):
    """A store call failed in a way that may succeed if retried."""

    status_code = 503
    code = "transient_store_error"


class InternalError(MediaFeedError):
    """Uncategorized failure, including transient errors once retries are exhausted."""

    status_code = 500
    code = "internal_error"


__all__ = [
    "ConcurrentUpdateError",
    "ConflictError",
    "DataIntegrityError",
    "InternalError",
    "MediaFeedError",
    "NotFoundError",
    "PayloadTooLargeError",
    "TransientStoreError",
    "UploadCancelledError",
    "ValidationFailedError",
]
