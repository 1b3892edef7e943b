"""Pydantic schemas for stored documents and API payloads."""

from .documents import Comment, Like, LikeStatus, Post, User, UsernameReservation
from .post import FeedPage, PostDetail, PostView
from .user import UserOut

__all__ = [
    "Comment",
    "FeedPage",
    "Like",
    "LikeStatus",
    "Post",
    "PostDetail",
    "PostView",
    "User",
    "UserOut",
    "UsernameReservation",
]
