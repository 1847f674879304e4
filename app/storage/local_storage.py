"""Local filesystem storage."""

import asyncio
import logging
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import quote

import aiofiles
import aiofiles.os

from app.schemas.storage import FileMetadata, UploadResult, UploadUrl
from app.storage.base import StorageBackend
from app.storage.errors import StorageFileNotFoundError
from app.storage.utils import (
    DEFAULT_CONTENT_TYPE,
    filename_from_key,
    guess_content_type,
    to_bytes,
)

logger = logging.getLogger(__name__)


class LocalStorage(StorageBackend):
    """
    Store files on local disk under root. The key is the file's path relative to root.
    Files are served back by the retrieval route at {public_base_url}{route_prefix}/{key}.
    """

    def __init__(
        self,
        root: str | Path,
        public_base_url: str = "",
        key_prefix: str = "",
        route_prefix: str = "/api/storage/files",
    ) -> None:
        super().__init__(key_prefix)
        self.root = Path(root).resolve()
        self.public_base_url = public_base_url.rstrip("/")
        self.route_prefix = "/" + route_prefix.strip("/")
        self._root_ready = False

    async def _ensure_root(self) -> None:
        """Create the storage root on first use. Concurrent callers may both get here."""
        if self._root_ready:
            return
        if not await aiofiles.os.path.isdir(self.root):
            await aiofiles.os.makedirs(self.root, exist_ok=True)
            logger.info("Created storage directory: %s", self.root)
        self._root_ready = True

    def _path(self, key: str) -> Path | None:
        """Absolute path for key, or None if it would not land strictly inside root."""
        if not key:
            return None
        try:
            resolved = (self.root / key).resolve()
        except (OSError, RuntimeError, ValueError):
            return None
        if resolved == self.root or not resolved.is_relative_to(self.root):
            logger.warning("Rejected storage key not inside root: %r", key)
            return None
        return resolved

    async def _resolve(self, key: str) -> Path | None:
        # resolve() stats every path component
        return await asyncio.to_thread(self._path, key)

    def _public_url(self, key: str) -> str:
        return f"{self.public_base_url}{self.route_prefix}/{quote(key, safe='/')}"

    async def upload(
        self,
        content: Any,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        await self._ensure_root()
        data = await to_bytes(content)
        key = self.build_key(filename)
        path = await self._resolve(key)
        if path is None:
            raise ValueError("Invalid storage key")
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)

        metadata = FileMetadata(
            key=key,
            filename=filename_from_key(key),
            contentType=content_type or DEFAULT_CONTENT_TYPE,
            size=len(data),
            uploadedAt=datetime.now(timezone.utc),
        )
        logger.info("File uploaded: %s (%d bytes)", key, len(data))
        return UploadResult(key=key, sourceUrl=self._public_url(key), metadata=metadata)

    async def create_upload_url(
        self,
        *,
        filename: str | None = None,
        content_type: str | None = None,
        expires_in: int | None = None,
    ) -> UploadUrl | None:
        # No presigned uploads on local disk; clients post to the upload route instead
        return None

    async def download(self, key: str) -> bytes:
        path = await self._resolve(key)
        if path is None:
            raise StorageFileNotFoundError(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise StorageFileNotFoundError(key, e) from e

    async def delete(self, key: str) -> None:
        path = await self._resolve(key)
        if path is None:
            return
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        logger.info("File deleted: %s", key)

    async def exists(self, key: str) -> bool:
        # Any stat failure (including permission errors) reads as "absent"
        path = await self._resolve(key)
        if path is None:
            return False
        return await aiofiles.os.path.isfile(path)

    async def get_metadata(self, key: str) -> FileMetadata | None:
        path = await self._resolve(key)
        if path is None:
            return None
        try:
            st = await aiofiles.os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return None
        if not stat.S_ISREG(st.st_mode):
            return None
        return FileMetadata(
            key=key,
            filename=filename_from_key(key),
            contentType=guess_content_type(key),
            size=st.st_size,
            uploadedAt=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    async def get_source_url(self, key: str) -> str:
        return self._public_url(key)

    async def get_download_url(self, key: str) -> str:
        # Local files have no separate signed download path
        return self._public_url(key)
