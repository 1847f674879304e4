"""Abstract storage backend."""

import posixpath
import uuid
from abc import ABC, abstractmethod
from typing import Any

from app.schemas.storage import FileMetadata, UploadResult, UploadUrl
from app.storage.utils import DEFAULT_FILENAME, resolve_storage_prefix, sanitize_filename


class StorageBackend(ABC):
    """Interface for file storage (local or cloud)."""

    def __init__(self, key_prefix: str = "") -> None:
        self.key_prefix = resolve_storage_prefix(key_prefix)

    @abstractmethod
    async def upload(
        self,
        content: Any,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        """
        Persist content under a freshly generated key.
        content may be bytes, a file-like object or an iterable of byte chunks.
        The object is retrievable as soon as this returns.
        """
        ...

    @abstractmethod
    async def create_upload_url(
        self,
        *,
        filename: str | None = None,
        content_type: str | None = None,
        expires_in: int | None = None,
    ) -> UploadUrl | None:
        """Direct-upload descriptor, or None when the backend cannot offer one."""
        ...

    @abstractmethod
    async def download(self, key: str) -> bytes:
        """Return the object's bytes. Raises StorageFileNotFoundError if the key is missing."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object. Deleting a missing key is not an error."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def get_metadata(self, key: str) -> FileMetadata | None:
        """Metadata for key, or None when it does not exist."""
        ...

    @abstractmethod
    async def get_source_url(self, key: str) -> str:
        """Public URL the object's bytes can be fetched from."""
        ...

    @abstractmethod
    async def get_download_url(self, key: str) -> str:
        ...

    def build_key(self, filename: str | None) -> str:
        """Build storage key: [prefix/]uuid-filename, always with forward slashes."""
        safe_name = sanitize_filename(filename or DEFAULT_FILENAME)
        name = f"{uuid.uuid4()}-{safe_name}"
        if self.key_prefix:
            return posixpath.join(self.key_prefix, name)
        return name
