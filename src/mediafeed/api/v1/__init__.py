"""Version 1 API endpoints."""

from .endpoints import account_router, feeds_router, posts_router

__all__ = [
    "account_router",
    "feeds_router",
    "posts_router",
]
