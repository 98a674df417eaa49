"""Storage bucket interface and errors."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from orgdesk.core.errors import OrgDeskError


class StorageError(OrgDeskError):
    """Raised when an object cannot be written, read or removed."""

    def __init__(self, bucket: str, path: str, message: str) -> None:
        super().__init__(f"Storage operation failed for '{bucket}/{path}': {message}")


class ObjectNotFoundError(StorageError):
    status_code = 404

    def __init__(self, bucket: str, path: str) -> None:
        super().__init__(bucket, path, "object not found")


class StorageBackend(Protocol):
    """Object storage organised in named buckets."""

    async def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> str: ...

    async def download(self, bucket: str, path: str) -> bytes: ...

    async def remove(self, bucket: str, paths: Sequence[str]) -> int: ...

    async def exists(self, bucket: str, path: str) -> bool: ...
