"""Supabase Storage backend."""

import asyncio
import logging
import posixpath
from datetime import datetime, timezone
from typing import Any

from supabase import Client, create_client

from app.schemas.storage import FileMetadata, UploadResult, UploadUrl
from app.storage.base import StorageBackend
from app.storage.errors import StorageFileNotFoundError
from app.storage.utils import DEFAULT_CONTENT_TYPE, filename_from_key, guess_content_type, to_bytes

logger = logging.getLogger(__name__)


def _is_not_found(error: Exception) -> bool:
    """True when an SDK error reports a missing object (404 / not_found)."""
    status = getattr(error, "status", None) or getattr(error, "status_code", None)
    if str(status) == "404":
        return True
    payload = error.args[0] if error.args else None
    if isinstance(payload, dict):
        if str(payload.get("statusCode")) == "404" or str(payload.get("status")) == "404":
            return True
        message = f"{payload.get('error', '')} {payload.get('message', '')}"
    else:
        message = str(error)
    message = message.lower()
    return "not found" in message or "not_found" in message


def _parse_timestamp(value: str | None) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class SupabaseStorage(StorageBackend):
    """Store files in a Supabase Storage bucket. Source URLs are the bucket's public URLs."""

    def __init__(
        self,
        url: str,
        service_role_key: str,
        bucket: str = "uploads",
        key_prefix: str = "",
        signed_url_expires_in: int = 3600,
        client: Client | None = None,
    ) -> None:
        super().__init__(key_prefix)
        if client is None:
            if not url or not service_role_key:
                raise RuntimeError(
                    "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set when STORAGE_BACKEND=supabase"
                )
            client = create_client(url, service_role_key)
        self.client = client
        self.bucket = bucket
        self.signed_url_expires_in = signed_url_expires_in

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    async def upload(
        self,
        content: Any,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        data = await to_bytes(content)
        key = self.build_key(filename)
        content_type = content_type or DEFAULT_CONTENT_TYPE
        opts = {"content-type": content_type, "upsert": "false"}
        await asyncio.to_thread(self._bucket().upload, key, data, opts)
        metadata = FileMetadata(
            key=key,
            filename=filename_from_key(key),
            contentType=content_type,
            size=len(data),
            uploadedAt=datetime.now(timezone.utc),
        )
        logger.info("File uploaded to bucket %s: %s (%d bytes)", self.bucket, key, len(data))
        return UploadResult(key=key, sourceUrl=await self.get_source_url(key), metadata=metadata)

    async def create_upload_url(
        self,
        *,
        filename: str | None = None,
        content_type: str | None = None,
        expires_in: int | None = None,
    ) -> UploadUrl | None:
        """Signed direct-upload URL. Supabase fixes its lifetime, so expires_in is not forwarded."""
        key = self.build_key(filename)
        result = await asyncio.to_thread(self._bucket().create_signed_upload_url, key)
        url = result.get("signed_url") or result.get("signedUrl") or result.get("signedURL")
        headers = {"Content-Type": content_type or DEFAULT_CONTENT_TYPE}
        return UploadUrl(key=key, url=url, method="PUT", headers=headers, expiresIn=None)

    async def download(self, key: str) -> bytes:
        try:
            return await asyncio.to_thread(self._bucket().download, key)
        except Exception as e:
            if _is_not_found(e):
                raise StorageFileNotFoundError(key, e) from e
            raise

    async def delete(self, key: str) -> None:
        # remove() reports nothing for keys that are already gone
        await asyncio.to_thread(self._bucket().remove, [key])
        logger.info("File deleted from bucket %s: %s", self.bucket, key)

    async def exists(self, key: str) -> bool:
        return await self.get_metadata(key) is not None

    async def get_metadata(self, key: str) -> FileMetadata | None:
        folder, name = posixpath.split(key)
        entries = await asyncio.to_thread(self._bucket().list, folder or None, {"search": name})
        for entry in entries or []:
            if entry.get("name") != name or not entry.get("metadata"):
                continue
            meta = entry["metadata"]
            return FileMetadata(
                key=key,
                filename=filename_from_key(key),
                contentType=meta.get("mimetype") or guess_content_type(key),
                size=int(meta.get("size") or 0),
                uploadedAt=_parse_timestamp(entry.get("updated_at") or entry.get("created_at")),
            )
        return None

    async def get_source_url(self, key: str) -> str:
        return self._bucket().get_public_url(key)

    async def get_download_url(self, key: str) -> str:
        result = await asyncio.to_thread(
            self._bucket().create_signed_url,
            key,
            self.signed_url_expires_in,
            {"download": filename_from_key(key)},
        )
        return result.get("signedURL") or result.get("signedUrl") or result.get("signed_url")
