"""Gateway to the partitioned document collection.

The store offers point reads by ``(id, partition_key)``, conflict-checked
creates, upserts, deletes and partition-scoped queries. The only multi-document
atomicity it provides is :meth:`DocumentStore.batch`, which is bound to a
single partition key.

Batches are optimistic: every row carries a version, and an update or delete
of a row that changed since the batch read it fails the whole batch with
:class:`ConcurrentUpdateError`. :meth:`DocumentStore.run_batch` re-runs the
batch on fresh data when that happens.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from mediafeed.core.errors import (
    ConcurrentUpdateError,
    ConflictError,
    InternalError,
    NotFoundError,
    TransientStoreError,
    ValidationFailedError,
)
from mediafeed.db.time import parse_timestamp
from mediafeed.models.document import Document

__all__ = ["DocumentStore", "PartitionBatch"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

DocumentBody = dict[str, Any]


def _values_for(body: Mapping[str, Any], partition_key: str) -> dict[str, Any]:
    doc_id = body.get("id")
    doc_type = body.get("type")
    if not doc_id or not doc_type:
        raise ValidationFailedError("Documents require both 'id' and 'type'")
    return {
        "id": str(doc_id),
        "partition_key": partition_key,
        "doc_type": str(doc_type),
        "date_created": parse_timestamp(body.get("dateCreated")),
        "body": dict(body),
    }


def _write_row(session: Session, values: Mapping[str, Any], *, refresh: bool) -> Document:
    """Stage an insert or an in-place update of one row.

    With ``refresh`` false an already loaded row keeps the version it was read
    at, so the flush only succeeds if nobody changed it since.
    """
    row = session.get(
        Document,
        (values["id"], values["partition_key"]),
        populate_existing=refresh,
    )
    if row is None:
        row = Document(**values)
        session.add(row)
    else:
        row.doc_type = values["doc_type"]
        row.date_created = values["date_created"]
        row.body = values["body"]
    return row


def _select_documents(
    doc_type: str,
    *,
    partition_key: str | None = None,
    filters: Mapping[str, str] | None = None,
    descending: bool = True,
    offset: int = 0,
    limit: int | None = None,
):
    stmt = select(Document).where(Document.doc_type == doc_type)
    if partition_key is not None:
        stmt = stmt.where(Document.partition_key == partition_key)
    for field, value in (filters or {}).items():
        stmt = stmt.where(Document.body[field].as_string() == value)

    if descending:
        stmt = stmt.order_by(Document.date_created.desc(), Document.id.desc())
    else:
        stmt = stmt.order_by(Document.date_created.asc(), Document.id.asc())

    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


class DocumentStore:
    """Thin wrapper around a SQLAlchemy session exposing document semantics.

    Each single-document call is its own unit of work and is committed before
    it returns. Transient failures (``OperationalError``) are retried up to
    ``max_attempts`` times; after that they surface as :class:`InternalError`.
    """

    def __init__(
        self,
        session: Session,
        *,
        max_attempts: int = 3,
        retry_backoff_seconds: float = 0.05,
    ) -> None:
        self.session = session
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff_seconds = retry_backoff_seconds

    def _with_retry(self, operation: Callable[[], T], context: str) -> T:
        last_error: TransientStoreError | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except OperationalError as exc:
                self.session.rollback()
                last_error = TransientStoreError(f"{context} failed: {exc}", attempt=attempt)
                logger.warning(
                    "Transient store error during %s (attempt %d/%d): %s",
                    context,
                    attempt,
                    self.max_attempts,
                    exc,
                )
                if attempt < self.max_attempts and self.retry_backoff_seconds:
                    time.sleep(self.retry_backoff_seconds * attempt)
        raise InternalError(f"{context} failed after {self.max_attempts} attempts") from last_error

    def point_read(self, doc_id: str, partition_key: str) -> DocumentBody:
        """Return the document body stored under ``(doc_id, partition_key)``.

        Raises:
            NotFoundError: If no such document exists.
        """

        def _read() -> Document | None:
            return self.session.get(Document, (doc_id, partition_key))

        row = self._with_retry(_read, f"point read {doc_id}/{partition_key}")
        if row is None:
            raise NotFoundError(
                "Document not found",
                doc_id=doc_id,
                partition_key=partition_key,
            )
        return dict(row.body)

    def create(self, body: Mapping[str, Any], partition_key: str) -> DocumentBody:
        """Insert a new document.

        Raises:
            ConflictError: If a document with the same id already exists in the partition.
        """
        values = _values_for(body, partition_key)

        def _create() -> DocumentBody:
            try:
                self.session.execute(insert(Document).values(**values))
                self.session.commit()
            except IntegrityError as err:
                self.session.rollback()
                raise ConflictError(
                    "Document already exists",
                    doc_id=values["id"],
                    partition_key=partition_key,
                ) from err
            return dict(values["body"])

        return self._with_retry(_create, f"create {body.get('id')}/{partition_key}")

    def upsert(self, body: Mapping[str, Any], partition_key: str) -> DocumentBody:
        """Insert or replace a document. Last writer wins."""

        values = _values_for(body, partition_key)

        def _upsert() -> DocumentBody:
            try:
                _write_row(self.session, values, refresh=True)
                self.session.commit()
            except StaleDataError as err:
                self.session.rollback()
                raise ConcurrentUpdateError(
                    "Document changed during upsert",
                    doc_id=values["id"],
                    partition_key=partition_key,
                ) from err
            return dict(values["body"])

        return self._with_retry(_upsert, f"upsert {body.get('id')}/{partition_key}")

    def delete(self, doc_id: str, partition_key: str) -> None:
        """Delete a document.

        Raises:
            NotFoundError: If no such document exists.
        """

        def _delete() -> bool:
            row = self.session.get(Document, (doc_id, partition_key), populate_existing=True)
            if row is None:
                return False
            try:
                self.session.delete(row)
                self.session.commit()
            except StaleDataError as err:
                self.session.rollback()
                raise ConcurrentUpdateError(
                    "Document changed during delete",
                    doc_id=doc_id,
                    partition_key=partition_key,
                ) from err
            return True

        if not self._with_retry(_delete, f"delete {doc_id}/{partition_key}"):
            raise NotFoundError("Document not found", doc_id=doc_id, partition_key=partition_key)

    def query(
        self,
        doc_type: str,
        *,
        partition_key: str | None = None,
        filters: Mapping[str, str] | None = None,
        descending: bool = True,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[DocumentBody]:
        """Return documents of ``doc_type`` ordered by creation time.

        Args:
            doc_type: Discriminant ``type`` value to match.
            partition_key: Restrict the query to one logical partition.
            filters: Exact-match conditions on top-level string fields of the body.
            descending: Newest first when true.
            offset: Number of matching documents to skip.
            limit: Maximum number of documents to return.
        """
        stmt = _select_documents(
            doc_type,
            partition_key=partition_key,
            filters=filters,
            descending=descending,
            offset=offset,
            limit=limit,
        )

        def _query() -> list[DocumentBody]:
            return [dict(row.body) for row in self.session.scalars(stmt)]

        return self._with_retry(_query, f"query {doc_type}")

    @contextmanager
    def batch(self, partition_key: str) -> Iterator[PartitionBatch]:
        """Group reads and writes against one partition into a single transaction.

        Everything staged on the yielded batch commits together when the block
        exits normally and is rolled back if it raises.
        """
        batch = PartitionBatch(self.session, partition_key)
        try:
            yield batch
            self.session.commit()
        except StaleDataError as err:
            self.session.rollback()
            raise ConcurrentUpdateError(
                "Partition changed since the batch read it",
                partition_key=partition_key,
            ) from err
        except IntegrityError as err:
            self.session.rollback()
            raise ConflictError(
                "Batch rejected by a uniqueness constraint",
                partition_key=partition_key,
            ) from err
        except OperationalError as err:
            self.session.rollback()
            logger.warning("Transient store error in batch for partition %s: %s", partition_key, err)
            raise TransientStoreError(
                "Partition batch failed",
                partition_key=partition_key,
            ) from err
        except BaseException:
            self.session.rollback()
            raise

    def run_batch(self, partition_key: str, work: Callable[[PartitionBatch], T]) -> T:
        """Run ``work`` inside :meth:`batch`, re-running it after a concurrent update.

        ``work`` may be called more than once, so everything it writes must be
        derived from what it reads through the batch it is given.

        Raises:
            ConcurrentUpdateError: If every attempt lost to a concurrent writer.
        """
        attempt = 1
        while True:
            try:
                with self.batch(partition_key) as batch:
                    return work(batch)
            except ConcurrentUpdateError:
                if attempt >= self.max_attempts:
                    raise
                logger.info(
                    "Partition %s changed under a batch (attempt %d/%d); re-running",
                    partition_key,
                    attempt,
                    self.max_attempts,
                )
                attempt += 1


class PartitionBatch:
    """Transactional view of one logical partition.

    Rows read through :meth:`read_for_update` are locked until the batch ends
    on databases that support row locks. Where there are none (SQLite), the
    version check on write still rejects a batch that read a stale row.
    """

    def __init__(self, session: Session, partition_key: str) -> None:
        self.session = session
        self.partition_key = partition_key

    def _check_partition(self, body: Mapping[str, Any], partition_key: str | None) -> str:
        if partition_key is not None and partition_key != self.partition_key:
            raise ValidationFailedError(
                "Batch operations must target the batch partition",
                batch_partition=self.partition_key,
                partition_key=partition_key,
                doc_id=body.get("id"),
            )
        return self.partition_key

    def read_for_update(self, doc_id: str) -> DocumentBody | None:
        """Return the document body, or ``None`` if absent, locking its row."""
        stmt = (
            select(Document)
            .where(Document.id == doc_id, Document.partition_key == self.partition_key)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = self.session.scalars(stmt).first()
        return None if row is None else dict(row.body)

    def query(
        self,
        doc_type: str,
        *,
        filters: Mapping[str, str] | None = None,
        limit: int | None = None,
    ) -> list[DocumentBody]:
        """Run a query confined to the batch partition."""
        stmt = _select_documents(
            doc_type,
            partition_key=self.partition_key,
            filters=filters,
            limit=limit,
        )
        stmt = stmt.execution_options(populate_existing=True)
        return [dict(row.body) for row in self.session.scalars(stmt)]

    def create(self, body: Mapping[str, Any], partition_key: str | None = None) -> None:
        """Stage an insert. A duplicate id fails the whole batch with a conflict."""
        values = _values_for(body, self._check_partition(body, partition_key))
        self.session.execute(insert(Document).values(**values))

    def upsert(self, body: Mapping[str, Any], partition_key: str | None = None) -> None:
        """Stage an insert-or-replace.

        A row read earlier in this batch is updated only if it is unchanged
        since that read; otherwise the batch fails with a concurrent update.
        """
        values = _values_for(body, self._check_partition(body, partition_key))
        _write_row(self.session, values, refresh=False)
        self.session.flush()

    def delete(self, doc_id: str) -> bool:
        """Stage a delete. Returns ``False`` if the document was already gone."""
        row = self.session.get(Document, (doc_id, self.partition_key), populate_existing=True)
        if row is None:
            return False
        self.session.delete(row)
        self.session.flush()
        return True
