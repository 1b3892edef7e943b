"""Timestamps as stored on documents."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current time, timezone-aware, in UTC."""
    return datetime.now(UTC)


def parse_timestamp(raw: object) -> datetime:
    """Read a ``dateCreated`` value back from a JSON body.

    Bodies hold ISO-8601 strings (``Z`` suffix included); naive values are
    taken to be UTC. Anything missing or unreadable falls back to now.
    """
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, str):
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            return utcnow()
    else:
        return utcnow()
    return value if value.tzinfo else value.replace(tzinfo=UTC)
