"""Shared API dependencies wiring the core services per request."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from mediafeed.core.settings import settings
from mediafeed.db.session import get_db
from mediafeed.repositories.document_store import DocumentStore
from mediafeed.repositories.object_store import ObjectStore
from mediafeed.services.feed import FeedAssembler
from mediafeed.services.identity import IdentityRegistry
from mediafeed.services.post_aggregate import PostAggregate
from mediafeed.services.uploads import UploadService

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_document_store(db: SessionDep) -> DocumentStore:
    """Return a document store bound to the request's session."""
    return DocumentStore(
        db,
        max_attempts=settings.store_max_attempts,
        retry_backoff_seconds=settings.store_retry_backoff_seconds,
    )


def get_object_store(request: Request) -> ObjectStore:
    """Return the process-wide object store created at startup."""
    return request.app.state.object_store


DocumentStoreDep = Annotated[DocumentStore, Depends(get_document_store)]
ObjectStoreDep = Annotated[ObjectStore, Depends(get_object_store)]


def get_identity_registry(store: DocumentStoreDep) -> IdentityRegistry:
    return IdentityRegistry(store, username_partition=settings.username_partition)


def get_post_aggregate(store: DocumentStoreDep) -> PostAggregate:
    return PostAggregate(store)


PostAggregateDep = Annotated[PostAggregate, Depends(get_post_aggregate)]


def get_feed_assembler(store: DocumentStoreDep, posts: PostAggregateDep) -> FeedAssembler:
    return FeedAssembler(store, posts, max_page_size=settings.feed_max_page_size)


def get_upload_service(objects: ObjectStoreDep, posts: PostAggregateDep) -> UploadService:
    return UploadService(
        objects,
        posts,
        buffer_size=settings.upload_buffer_size,
        max_bytes=settings.max_upload_bytes,
    )


IdentityRegistryDep = Annotated[IdentityRegistry, Depends(get_identity_registry)]
FeedAssemblerDep = Annotated[FeedAssembler, Depends(get_feed_assembler)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
