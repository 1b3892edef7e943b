"""Short random tokens used to name uploaded objects."""

from __future__ import annotations

import base64
import uuid
from pathlib import PurePosixPath, PureWindowsPath


def short_token() -> str:
    """Return a 22 character URL-safe token built from a random UUID."""
    return base64.urlsafe_b64encode(uuid.uuid4().bytes).decode().rstrip("=")


def object_name_for(file_name: str) -> str:
    """Return a fresh object name ``{token}_{basename}`` for an uploaded file.

    Any directory part of ``file_name`` is dropped, whichever separator the
    client used.
    """
    base = PurePosixPath(PureWindowsPath(file_name).name).name
    return f"{short_token()}_{base}"
