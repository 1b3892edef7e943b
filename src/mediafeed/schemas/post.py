"""Post-related Pydantic schemas for requests and views."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mediafeed.schemas.documents import Comment, Like, LikeStatus, Post


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PostCreate(CamelModel):
    """Schema for creating a text post without media."""

    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    caption: str | None = None
    author_id: str = Field(..., min_length=1)
    author_username: str | None = None


class PostEdit(CamelModel):
    """Editable fields of a post."""

    title: str | None = None
    content: str | None = None


class CommentCreate(CamelModel):
    """Schema for appending a comment to a post."""

    content: str = Field(..., min_length=1, max_length=5000)
    author_id: str = Field(..., min_length=1)
    author_username: str | None = None
    profile_pic_url: str | None = None


class LikeRequest(CamelModel):
    """Identity of the user toggling or removing a like."""

    user_id: str = Field(..., min_length=1)
    username: str | None = None
    profile_pic_url: str | None = None


class PostView(CamelModel):
    """A post as shown in a feed, enriched for one viewer."""

    post_id: str
    title: str | None = None
    content: str | None = None
    caption: str = ""
    author_id: str
    author_username: str | None = None
    date_created: datetime
    like_count: int
    comment_count: int
    checksum: str | None = None
    liked_by_viewer: bool = False

    @classmethod
    def from_post(cls, post: Post, *, liked_by_viewer: bool = False) -> PostView:
        return cls(
            post_id=post.post_id,
            title=post.title,
            content=post.content,
            caption=post.caption,
            author_id=post.author_id,
            author_username=post.author_username,
            date_created=post.date_created,
            like_count=post.like_count,
            comment_count=post.comment_count,
            checksum=post.checksum,
            liked_by_viewer=liked_by_viewer,
        )


class PostDetail(PostView):
    """A single post with its comments, newest first."""

    comments: list[Comment] = Field(default_factory=list)


class PostEditView(CamelModel):
    """Current values of the editable fields."""

    title: str | None = None
    content: str | None = None


class LikeToggleResult(CamelModel):
    """Result of a like toggle or unlike.

    ``applied`` is false when the post did not exist and nothing was written.
    """

    post_id: str
    applied: bool
    status: LikeStatus
    like_count: int


class LikeStatusView(CamelModel):
    """Whether one user currently likes one post."""

    post_id: str
    user_id: str
    status: LikeStatus


class CommentAppendResult(CamelModel):
    """Result of a comment append; ``comment`` is empty if the post was missing."""

    post_id: str
    comment: Comment | None = None


class FeedPage(CamelModel):
    """One ranked page of the feed."""

    page_number: int
    page_size: int
    posts: list[PostView]


class UploadResult(CamelModel):
    """Outcome of a media upload."""

    message: str = "Feed uploaded successfully."
    post_id: str
    checksum: str
    size: int
    content_url: str


__all__ = [
    "CommentAppendResult",
    "CommentCreate",
    "FeedPage",
    "Like",
    "LikeRequest",
    "LikeStatusView",
    "LikeToggleResult",
    "PostCreate",
    "PostDetail",
    "PostEdit",
    "PostEditView",
    "PostView",
    "UploadResult",
]
