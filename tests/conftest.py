# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("MEDIAFEED_DATABASE_URL", "sqlite://")
os.environ.setdefault("MEDIAFEED_AUTO_CREATE_TABLES", "false")

from mediafeed.api.v1.dependencies import get_object_store
from mediafeed.db.session import create_tables, drop_tables, make_engine
from mediafeed.db.session import get_db as app_get_session
from mediafeed.main import app as fastapi_app
from mediafeed.repositories.document_store import DocumentStore
from mediafeed.repositories.object_store import LocalObjectStore
from mediafeed.schemas.documents import Post
from mediafeed.services.feed import FeedAssembler
from mediafeed.services.identity import IdentityRegistry
from mediafeed.services.post_aggregate import PostAggregate

TEST_DB_URL = "sqlite://"
TEST_CDN_BASE_URL = "https://cdn.test/media/"
BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = make_engine(TEST_DB_URL)
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store(db_session: Session) -> DocumentStore:
    return DocumentStore(db_session, retry_backoff_seconds=0)


@pytest.fixture()
def object_store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path, "media", TEST_CDN_BASE_URL)


@pytest.fixture()
def registry(store: DocumentStore) -> IdentityRegistry:
    return IdentityRegistry(store, username_partition="unique_username")


@pytest.fixture()
def posts(store: DocumentStore) -> PostAggregate:
    return PostAggregate(store)


@pytest.fixture()
def feed(store: DocumentStore, posts: PostAggregate) -> FeedAssembler:
    return FeedAssembler(store, posts, max_page_size=50)


@pytest.fixture()
def make_post(store: DocumentStore) -> Callable[..., Post]:
    """Persist a post directly, with a controllable creation time and counters."""

    def _make_post(
        minutes: int = 0,
        *,
        like_count: int = 0,
        comment_count: int = 0,
        author_id: str = "author-1",
        title: str | None = None,
    ) -> Post:
        post = Post(
            title=title,
            content=f"{TEST_CDN_BASE_URL}object-{minutes}",
            author_id=author_id,
            author_username="author",
            date_created=BASE_TIME + timedelta(minutes=minutes),
            like_count=like_count,
            comment_count=comment_count,
        )
        store.create(post.to_document(), post.partition_key)
        return post

    return _make_post


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    object_store: LocalObjectStore,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_object_store] = lambda: object_store
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_object_store, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
