"""Row model backing the partitioned document collection."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mediafeed.db.session import Base
from mediafeed.db.time import utcnow


class Document(Base):
    """One JSON document in the shared collection.

    Users, username reservations, posts, comments and likes all live here,
    told apart by ``doc_type``. A document is addressed by ``(id, partition_key)``;
    the composite primary key is what makes a second create of the same id in
    the same partition a conflict.

    ``version`` is bumped on every ORM update or delete, and the write is
    conditioned on the version that was read. A batch working from a stale
    read therefore fails with ``StaleDataError`` instead of overwriting a
    concurrent change. This holds on SQLite, which has no row locks.
    """

    __tablename__ = "document"
    __table_args__ = (
        Index("ix_document_type_date_created", "doc_type", "date_created"),
        Index("ix_document_partition_type", "partition_key", "doc_type"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    partition_key: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Promoted from the body so queries can filter and order without JSON paths.
    doc_type: Mapped[str] = mapped_column(String(32), nullable=False)
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    body: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}
