"""Filesystem-backed storage buckets.

Each bucket is a directory under the configured root. Blocking file I/O runs
in a worker thread so request handlers stay responsive.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Sequence

from orgdesk.core.logging_config import get_logger

from .base import ObjectNotFoundError, StorageError

logger = get_logger(__name__)


class LocalStorageBackend:
    """StorageBackend writing objects to ``<root>/<bucket>/<path>``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, bucket: str, path: str) -> Path:
        bucket_dir = (self.root / bucket).resolve()
        target = (bucket_dir / path.lstrip("/")).resolve()
        if bucket_dir != target and bucket_dir not in target.parents:
            raise StorageError(bucket, path, "path escapes the bucket")
        return target

    async def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Write an object, refusing to overwrite an existing one.

        Returns:
            The object path inside the bucket
        """
        target = self._resolve(bucket, path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as fh:
                fh.write(data)

        try:
            await asyncio.to_thread(_write)
        except FileExistsError:
            raise StorageError(bucket, path, "object already exists")
        except OSError as e:
            raise StorageError(bucket, path, str(e)) from e
        logger.debug(f"Stored {len(data)} bytes at {bucket}/{path} ({content_type or 'unknown type'})")
        return path

    async def download(self, bucket: str, path: str) -> bytes:
        target = self._resolve(bucket, path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError:
            raise ObjectNotFoundError(bucket, path)

    async def remove(self, bucket: str, paths: Sequence[str]) -> int:
        """Delete objects; missing objects are skipped.

        Returns:
            Number of objects actually removed
        """
        targets = [self._resolve(bucket, p) for p in paths]

        def _unlink() -> int:
            removed = 0
            for target in targets:
                try:
                    target.unlink()
                    removed += 1
                except FileNotFoundError:
                    continue
            return removed

        return await asyncio.to_thread(_unlink)

    async def exists(self, bucket: str, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(bucket, path).is_file)
