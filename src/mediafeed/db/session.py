"""Engine and session wiring for the document collection."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mediafeed.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the document table."""


# The Document model must be registered on Base.metadata before create_all.
import mediafeed.models  # noqa: E402,F401


def make_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``url``.

    SQLite connections may be used from a thread other than the one that
    opened them (sessions are created in the threadpool and used from the
    event loop). An in-memory SQLite database is pinned to one connection,
    otherwise every checkout would see a fresh, empty database.
    """
    kwargs: dict[str, Any] = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in {"sqlite://", "sqlite:///:memory:"}:
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    return create_engine(url, **kwargs)


engine = make_engine(settings.database_url, echo=settings.sql_debug)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """Yield one session per request and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine | None = None) -> None:
    """Create the document table if it does not exist."""
    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind: Engine | None = None) -> None:
    """Drop the document table."""
    Base.metadata.drop_all(bind=bind or engine)
