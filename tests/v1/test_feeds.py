# tests/v1/test_feeds.py
"""Tests for upload, feed and download endpoints."""

import zlib
from urllib.parse import quote

from fastapi import status

PAYLOAD = b"\x89PNG fake image bytes " * 1000


def _upload(client, data: bytes = PAYLOAD, **fields):
    form = {"userId": "carol-id", "userName": "carol", "fileName": "photo.png", **fields}
    return client.post(
        "/api/v1/feeds/upload",
        data=form,
        files={"file": ("photo.png", data, "image/png")},
    )


def test_upload_stores_object_and_post(client, tmp_path) -> None:
    response = _upload(client, caption="sunset")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()

    assert body["message"] == "Feed uploaded successfully."
    assert body["checksum"] == format(zlib.crc32(PAYLOAD), "08x")
    assert body["size"] == len(PAYLOAD)
    assert body["contentUrl"].startswith("https://cdn.test/media/")

    object_name = body["contentUrl"].rsplit("/", 1)[-1]
    assert object_name.endswith("_photo.png")
    assert (tmp_path / "media" / object_name).read_bytes() == PAYLOAD

    post = client.get(f"/api/v1/posts/{body['postId']}").json()
    assert post["content"] == body["contentUrl"]
    assert post["caption"] == "sunset"
    assert post["checksum"] == body["checksum"]
    assert post["authorId"] == "carol-id"


def test_upload_same_file_twice_gets_distinct_objects(client) -> None:
    first = _upload(client).json()
    second = _upload(client).json()
    assert first["contentUrl"] != second["contentUrl"]
    assert first["postId"] != second["postId"]
    assert first["checksum"] == second["checksum"]


def test_upload_missing_fields(client) -> None:
    response = client.post(
        "/api/v1/feeds/upload",
        data={"userId": "carol-id"},
        files={"file": ("photo.png", b"abc", "image/png")},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Missing required fields."


def test_upload_without_file(client) -> None:
    response = client.post(
        "/api/v1/feeds/upload",
        data={"userId": "carol-id", "fileName": "photo.png"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_download_round_trip(client) -> None:
    content_url = _upload(client).json()["contentUrl"]
    object_name = content_url.rsplit("/", 1)[-1]

    response = client.get("/api/v1/feeds/download", params={"fileName": object_name})
    assert response.status_code == status.HTTP_200_OK
    assert response.content == PAYLOAD
    assert response.headers["content-type"] == "image/png"
    assert object_name in response.headers["content-disposition"]


def test_download_escapes_awkward_file_names(client) -> None:
    content_url = _upload(client, fileName='say "hi".png').json()["contentUrl"]
    object_name = content_url.rsplit("/", 1)[-1]
    assert '"' in object_name

    response = client.get("/api/v1/feeds/download", params={"fileName": object_name})
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-disposition"] == (
        f"attachment; filename*=utf-8''{quote(object_name)}"
    )


def test_download_missing_object(client) -> None:
    response = client.get("/api/v1/feeds/download", params={"fileName": "nope.png"})
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "File not found."


def test_download_requires_name(client) -> None:
    response = client.get("/api/v1/feeds/download")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_feed_pages(client) -> None:
    for _ in range(5):
        assert _upload(client).status_code == status.HTTP_200_OK

    seen = []
    for page_number in (1, 2, 3):
        page = client.get(
            "/api/v1/feeds/",
            params={"pageNumber": page_number, "pageSize": 2},
        ).json()
        assert page["pageNumber"] == page_number
        seen.extend(post["postId"] for post in page["posts"])
    assert len(seen) == 5
    assert len(set(seen)) == 5


def test_feed_default_page_size(client) -> None:
    for _ in range(3):
        _upload(client)
    page = client.get("/api/v1/feeds/").json()
    assert page["pageSize"] == 2
    assert len(page["posts"]) == 2


def test_feed_rejects_bad_paging(client) -> None:
    assert client.get("/api/v1/feeds/", params={"pageNumber": 0}).status_code == 422
    assert client.get("/api/v1/feeds/", params={"pageSize": 500}).status_code == 400


def test_end_to_end(client) -> None:
    carol = client.post("/api/v1/account/register", json={"username": "carol"}).json()
    upload = _upload(client, userId=carol["userId"], caption="hello").json()
    post_id = upload["postId"]

    client.post(
        f"/api/v1/posts/{post_id}/comments",
        json={"content": "nice!", "authorId": "dave", "authorUsername": "dave"},
    )
    client.post(f"/api/v1/posts/{post_id}/like", json={"userId": "dave"})

    page = client.get("/api/v1/feeds/", params={"userId": "dave"}).json()
    (post,) = page["posts"]
    assert post["postId"] == post_id
    assert post["commentCount"] == 1
    assert post["likeCount"] == 1
    assert post["likedByViewer"] is True

    client.post(f"/api/v1/posts/{post_id}/like", json={"userId": "dave"})
    page = client.get("/api/v1/feeds/", params={"userId": "dave"}).json()
    assert page["posts"][0]["likeCount"] == 0
    assert page["posts"][0]["likedByViewer"] is False
