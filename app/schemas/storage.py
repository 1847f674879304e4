"""Pydantic schemas for the storage layer and its API."""

from datetime import datetime

from pydantic import BaseModel, Field


class FileMetadata(BaseModel):
    """Metadata for a stored object. Derived on demand, never persisted separately."""

    key: str
    filename: str
    contentType: str
    size: int
    uploadedAt: datetime


class UploadResult(BaseModel):
    """Returned from a successful upload."""

    key: str
    sourceUrl: str
    metadata: FileMetadata


class UploadUrl(BaseModel):
    """Pre-authorized descriptor for uploading directly to the backend, bypassing the API."""

    key: str
    url: str
    method: str = "PUT"
    headers: dict[str, str] = Field(default_factory=dict)
    expiresIn: int | None = None


class UploadUrlRequest(BaseModel):
    """Body for requesting a direct-upload URL."""

    filename: str | None = None
    contentType: str | None = None
