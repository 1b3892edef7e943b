"""Posts and the comments and likes co-located in each post's partition.

A post's id is also its partition key, and every comment and like on it is
written into that same partition. That is what lets "insert child, bump the
parent's counter" run as one partition-scoped batch instead of two writes
that could interleave with other requests.

Like toggling is a two-state machine per (post, user): ``NOT_LIKED`` moves to
``LIKED`` by inserting a Like and incrementing ``likeCount``; ``LIKED`` moves
back by deleting the Like and decrementing (never below zero). The check and
the mutation run inside one batch that reads the post for update. If another
request changed the post in between, the batch fails on the post's version and
is re-run on fresh data, so concurrent likes and comments are all counted. A
Like's id is derived from the (post, user) pair, so a racing duplicate insert
by the same user is rejected as a conflict instead of producing a second like.
"""

from __future__ import annotations

import logging

from mediafeed.core.errors import ConflictError, NotFoundError, ValidationFailedError
from mediafeed.repositories.document_store import DocumentStore, PartitionBatch
from mediafeed.schemas.documents import (
    DOC_TYPE_COMMENT,
    DOC_TYPE_LIKE,
    Comment,
    Like,
    LikeStatus,
    Post,
    like_id_for,
)
from mediafeed.schemas.post import (
    CommentAppendResult,
    LikeToggleResult,
    PostDetail,
    PostEditView,
)

__all__ = ["PostAggregate"]

logger = logging.getLogger(__name__)


def _normalize_caption(caption: str | None) -> str:
    # Browser form posts send the literal "undefined" for an untouched field.
    if not caption or caption == "undefined":
        return ""
    return caption


class PostAggregate:
    """Operations on one post and the documents in its partition."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def create_post(
        self,
        *,
        author_id: str,
        author_username: str | None,
        content: str | None,
        caption: str | None = None,
        title: str | None = None,
        checksum: str | None = None,
    ) -> Post:
        """Write a new post with zeroed counters under a fresh id.

        Every call allocates a new id, so retries create duplicate posts.
        """
        if not author_id:
            raise ValidationFailedError("Post author is required")
        post = Post(
            title=title,
            content=content,
            caption=_normalize_caption(caption),
            author_id=author_id,
            author_username=author_username,
            checksum=checksum,
        )
        self.store.create(post.to_document(), post.partition_key)
        logger.info("Created post %s for author %s", post.post_id, author_id)
        return post

    def get_post(self, post_id: str) -> Post:
        """Point-read a post.

        Raises:
            NotFoundError: If the post does not exist.
        """
        try:
            return Post.model_validate(self.store.point_read(post_id, post_id))
        except NotFoundError as err:
            raise NotFoundError("Post not found", post_id=post_id) from err

    def get_post_for_edit(self, post_id: str) -> PostEditView:
        """Return only the editable fields of a post."""
        post = self.get_post(post_id)
        return PostEditView(title=post.title, content=post.content)

    def edit_post(self, post_id: str, title: str | None, content: str | None) -> Post:
        """Overwrite title and content. Concurrent edits are last-writer-wins.

        The counters are carried over from the row as read inside the batch,
        so an edit never reverts a like or comment that landed meanwhile.
        """

        def _edit(batch: PartitionBatch) -> Post | None:
            post_doc = batch.read_for_update(post_id)
            if post_doc is None:
                return None
            post = Post.model_validate(post_doc)
            post.title = title
            post.content = content
            batch.upsert(post.to_document())
            return post

        post = self.store.run_batch(post_id, _edit)
        if post is None:
            raise NotFoundError("Post not found", post_id=post_id)
        return post

    def add_comment(
        self,
        post_id: str,
        content: str,
        author_id: str,
        author_username: str | None = None,
        profile_pic_url: str | None = None,
    ) -> CommentAppendResult:
        """Append a comment and bump ``commentCount`` in one partition batch.

        A comment on a post that does not exist is dropped without error.

        Raises:
            ValidationFailedError: If the comment content is blank.
        """
        if not content or not content.strip():
            raise ValidationFailedError("Comment content is required", post_id=post_id)

        def _append(batch: PartitionBatch) -> tuple[Post, Comment] | None:
            post_doc = batch.read_for_update(post_id)
            if post_doc is None:
                return None
            post = Post.model_validate(post_doc)
            comment = Comment(
                post_id=post_id,
                content=content,
                author_id=author_id,
                author_username=author_username,
                profile_pic_url=profile_pic_url,
            )
            batch.create(comment.to_document())
            post.comment_count += 1
            batch.upsert(post.to_document())
            return post, comment

        outcome = self.store.run_batch(post_id, _append)
        if outcome is None:
            logger.info("Dropping comment on missing post %s", post_id)
            return CommentAppendResult(post_id=post_id)

        post, comment = outcome
        logger.info(
            "Comment %s added to post %s (commentCount=%d)",
            comment.comment_id,
            post_id,
            post.comment_count,
        )
        return CommentAppendResult(post_id=post_id, comment=comment)

    def _existing_like(self, batch: PartitionBatch, user_id: str) -> dict | None:
        matches = batch.query(DOC_TYPE_LIKE, filters={"userId": user_id}, limit=1)
        return matches[0] if matches else None

    def toggle_like(
        self,
        post_id: str,
        user_id: str,
        username: str | None = None,
        profile_pic_url: str | None = None,
    ) -> LikeToggleResult:
        """Flip the (post, user) like state and adjust ``likeCount`` to match.

        A toggle on a post that does not exist changes nothing and reports
        ``applied=False``. A toggle that loses to a concurrent change of the
        post is re-run on the fresh post.

        Raises:
            ConflictError: If a concurrent toggle by the same user inserted the
                same Like first.
        """
        if not user_id:
            raise ValidationFailedError("Like requires a user id", post_id=post_id)

        def _toggle(batch: PartitionBatch) -> tuple[Post, LikeStatus] | None:
            post_doc = batch.read_for_update(post_id)
            if post_doc is None:
                return None
            post = Post.model_validate(post_doc)
            existing = self._existing_like(batch, user_id)
            if existing is None:
                like = Like(
                    like_id=like_id_for(post_id, user_id),
                    post_id=post_id,
                    user_id=user_id,
                    username=username,
                    profile_pic_url=profile_pic_url,
                )
                batch.create(like.to_document())
                post.like_count += 1
                status = LikeStatus.LIKED
            else:
                batch.delete(existing["id"])
                post.like_count = max(0, post.like_count - 1)
                status = LikeStatus.NOT_LIKED
            batch.upsert(post.to_document())
            return post, status

        try:
            outcome = self.store.run_batch(post_id, _toggle)
        except ConflictError:
            logger.warning("Concurrent like toggle rejected for post %s user %s", post_id, user_id)
            raise

        if outcome is None:
            logger.info("Ignoring like toggle on missing post %s", post_id)
            return LikeToggleResult(
                post_id=post_id,
                applied=False,
                status=LikeStatus.NOT_LIKED,
                like_count=0,
            )

        post, status = outcome
        logger.info(
            "Like toggled on post %s by %s -> %s (likeCount=%d)",
            post_id,
            user_id,
            status.value,
            post.like_count,
        )
        return LikeToggleResult(
            post_id=post_id,
            applied=True,
            status=status,
            like_count=post.like_count,
        )

    def unlike(self, post_id: str, user_id: str) -> LikeToggleResult:
        """Remove the user's like if present. Never drives ``likeCount`` below zero."""

        def _unlike(batch: PartitionBatch) -> tuple[Post, bool] | None:
            post_doc = batch.read_for_update(post_id)
            if post_doc is None:
                return None
            post = Post.model_validate(post_doc)
            existing = self._existing_like(batch, user_id)
            if existing is None:
                return post, False
            batch.delete(existing["id"])
            post.like_count = max(0, post.like_count - 1)
            batch.upsert(post.to_document())
            return post, True

        outcome = self.store.run_batch(post_id, _unlike)
        if outcome is None:
            return LikeToggleResult(
                post_id=post_id,
                applied=False,
                status=LikeStatus.NOT_LIKED,
                like_count=0,
            )

        post, removed = outcome
        return LikeToggleResult(
            post_id=post_id,
            applied=removed,
            status=LikeStatus.NOT_LIKED,
            like_count=post.like_count,
        )

    def get_like_status(self, post_id: str, user_id: str) -> LikeStatus:
        """Return whether ``user_id`` currently likes ``post_id``."""
        matches = self.store.query(
            DOC_TYPE_LIKE,
            partition_key=post_id,
            filters={"userId": user_id},
            limit=1,
        )
        return LikeStatus.LIKED if matches else LikeStatus.NOT_LIKED

    def list_likes(self, post_id: str) -> list[Like]:
        """Return a post's likes, newest first.

        Raises:
            NotFoundError: If the post does not exist.
        """
        self.get_post(post_id)
        docs = self.store.query(DOC_TYPE_LIKE, partition_key=post_id)
        return [Like.model_validate(doc) for doc in docs]

    def list_comments(self, post_id: str) -> list[Comment]:
        """Return a post's comments, newest first.

        Raises:
            NotFoundError: If the post does not exist.
        """
        self.get_post(post_id)
        return self._comments(post_id)

    def _comments(self, post_id: str) -> list[Comment]:
        docs = self.store.query(DOC_TYPE_COMMENT, partition_key=post_id)
        return [Comment.model_validate(doc) for doc in docs]

    def get_post_detail(self, post_id: str, viewer_id: str | None = None) -> PostDetail:
        """Return a post with its comments and whether ``viewer_id`` likes it.

        Raises:
            NotFoundError: If the post does not exist.
        """
        post = self.get_post(post_id)
        liked = bool(viewer_id) and self.get_like_status(post_id, viewer_id) is LikeStatus.LIKED
        view = PostDetail.from_post(post, liked_by_viewer=liked)
        view.comments = self._comments(post_id)
        return view
