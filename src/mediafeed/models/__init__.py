"""SQLAlchemy models for the media feed document store."""

from .document import Document

__all__ = ["Document"]
