"""Gateways to the document store and the object store."""

from .document_store import DocumentStore, PartitionBatch
from .object_store import LocalObjectStore, ObjectStore

__all__ = ["DocumentStore", "LocalObjectStore", "ObjectStore", "PartitionBatch"]
