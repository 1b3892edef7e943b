"""API endpoint modules for version 1."""

from .account import router as account_router
from .feeds import router as feeds_router
from .posts import router as posts_router

__all__ = [
    "account_router",
    "feeds_router",
    "posts_router",
]
