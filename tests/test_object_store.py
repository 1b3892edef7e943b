# tests/test_object_store.py
"""Tests for the local object store and object naming."""

import pytest

from mediafeed.core.errors import NotFoundError, ValidationFailedError
from mediafeed.repositories.object_store import LocalObjectStore
from mediafeed.utils.tokens import object_name_for, short_token


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


async def _collect(store: LocalObjectStore, name: str) -> bytes:
    return b"".join([chunk async for chunk in store.open_read(name)])


@pytest.mark.asyncio
async def test_put_then_read(object_store: LocalObjectStore, tmp_path) -> None:
    url = await object_store.put("a_photo.jpg", _chunks(b"abc", b"def"))

    assert url == "https://cdn.test/media/a_photo.jpg"
    assert await object_store.exists("a_photo.jpg")
    assert (tmp_path / "media" / "a_photo.jpg").read_bytes() == b"abcdef"
    assert await _collect(object_store, "a_photo.jpg") == b"abcdef"


@pytest.mark.asyncio
async def test_missing_object(object_store: LocalObjectStore) -> None:
    assert not await object_store.exists("missing.jpg")
    with pytest.raises(NotFoundError):
        await _collect(object_store, "missing.jpg")


@pytest.mark.asyncio
async def test_names_cannot_escape_container(object_store: LocalObjectStore) -> None:
    assert not await object_store.exists("../secret")
    with pytest.raises(ValidationFailedError):
        async with object_store.open_write("../secret"):
            pass


def test_content_type(object_store: LocalObjectStore) -> None:
    assert object_store.content_type("x_clip.mp4") == "video/mp4"
    assert object_store.content_type("x_blob") == "application/octet-stream"


def test_short_token_is_url_safe() -> None:
    token = short_token()
    assert len(token) == 22
    assert "=" not in token and "/" not in token and "+" not in token


@pytest.mark.parametrize(
    ("file_name", "base"),
    [
        ("photo.jpg", "photo.jpg"),
        ("dir/photo.jpg", "photo.jpg"),
        ("C:\\Users\\me\\photo.jpg", "photo.jpg"),
    ],
)
def test_object_name_keeps_only_basename(file_name: str, base: str) -> None:
    name = object_name_for(file_name)
    # Tokens are 22 characters and may themselves contain "_".
    assert name[22] == "_"
    assert name[23:] == base
    assert object_name_for(file_name) != name
