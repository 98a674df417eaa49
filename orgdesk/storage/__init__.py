"""Object storage buckets for documents and message attachments."""

from .base import ObjectNotFoundError, StorageBackend, StorageError
from .local import LocalStorageBackend

__all__ = ["LocalStorageBackend", "ObjectNotFoundError", "StorageBackend", "StorageError"]
