"""Paginated, per-viewer feed assembly."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from mediafeed.core.errors import ValidationFailedError
from mediafeed.repositories.document_store import DocumentStore
from mediafeed.schemas.documents import DOC_TYPE_POST, LikeStatus, Post
from mediafeed.schemas.post import FeedPage, PostView
from mediafeed.services.post_aggregate import PostAggregate

__all__ = ["FeedAssembler", "rank_posts"]

logger = logging.getLogger(__name__)


def rank_posts(views: Iterable[PostView]) -> list[PostView]:
    """Order posts by likes, then comments, then recency, all descending."""
    return sorted(
        views,
        key=lambda view: (view.like_count, view.comment_count, view.date_created),
        reverse=True,
    )


class FeedAssembler:
    """Builds one feed page.

    Pagination is applied by the store on creation time; ranking is applied
    afterwards to that page only. A heavily liked post on a later page is
    therefore never pulled forward: the order within a page is a local re-sort,
    not a global top-k.
    """

    def __init__(
        self,
        store: DocumentStore,
        posts: PostAggregate | None = None,
        *,
        max_page_size: int | None = None,
    ) -> None:
        self.store = store
        self.posts = posts or PostAggregate(store)
        self.max_page_size = max_page_size

    def fetch_page(self, page_number: int, page_size: int) -> list[Post]:
        """Return one page of posts, newest first, before ranking."""
        if page_number < 1:
            raise ValidationFailedError("pageNumber must be at least 1", page_number=page_number)
        if page_size < 1:
            raise ValidationFailedError("pageSize must be at least 1", page_size=page_size)
        if self.max_page_size is not None and page_size > self.max_page_size:
            raise ValidationFailedError(
                f"pageSize must not exceed {self.max_page_size}",
                page_size=page_size,
            )

        docs = self.store.query(
            DOC_TYPE_POST,
            offset=(page_number - 1) * page_size,
            limit=page_size,
        )
        logger.debug("Fetched %d posts for page %d (size %d)", len(docs), page_number, page_size)
        return [Post.model_validate(doc) for doc in docs]

    def get_feed(
        self,
        viewer_id: str | None = None,
        page_number: int = 1,
        page_size: int = 2,
    ) -> FeedPage:
        """Return a ranked page, flagging the posts ``viewer_id`` has liked.

        A page past the end of the data is empty, not an error.
        """
        views = []
        for post in self.fetch_page(page_number, page_size):
            liked = False
            if viewer_id:
                # One like lookup per post on the page.
                liked = self.posts.get_like_status(post.post_id, viewer_id) is LikeStatus.LIKED
            views.append(PostView.from_post(post, liked_by_viewer=liked))

        return FeedPage(page_number=page_number, page_size=page_size, posts=rank_posts(views))
