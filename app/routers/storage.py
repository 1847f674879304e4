"""Storage API: direct uploads and serving files from local storage."""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from app.config import MAX_UPLOAD_SIZE, SIGNED_URL_EXPIRES_IN, STORAGE_ROUTE_PREFIX
from app.core.upload_validation import FILE_TOO_LARGE, validate_upload
from app.schemas.storage import UploadResult, UploadUrl, UploadUrlRequest
from app.storage import LocalStorage, StorageBackend, StorageFileNotFoundError, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["storage"])

# Keys are never rewritten in place, so responses can be cached forever
CACHE_CONTROL = "public, max-age=31536000, immutable"


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.post("/api/storage/upload", response_model=UploadResult, status_code=201)
async def upload_file(
    backend: Annotated[StorageBackend, Depends(get_storage)],
    file: UploadFile = File(...),
) -> UploadResult:
    """Store a single file through the active backend and return its key and source URL."""
    content = await file.read()
    err = validate_upload(file.filename, len(content), MAX_UPLOAD_SIZE)
    if err:
        code = 413 if err.startswith(FILE_TOO_LARGE) else 400
        raise HTTPException(status_code=code, detail=err)
    return await backend.upload(content, filename=file.filename, content_type=file.content_type)


@router.post("/api/storage/upload-url", response_model=UploadUrl)
async def create_upload_url(
    body: UploadUrlRequest,
    backend: Annotated[StorageBackend, Depends(get_storage)],
):
    """Direct-upload URL for backends that support it; 404 tells clients to use /api/storage/upload."""
    upload_url = await backend.create_upload_url(
        filename=body.filename,
        content_type=body.contentType,
        expires_in=SIGNED_URL_EXPIRES_IN,
    )
    if upload_url is None:
        return _error("Direct uploads are not supported by this storage backend", 404)
    return upload_url


@router.get(STORAGE_ROUTE_PREFIX + "/{path:path}")
async def serve_file(
    path: str,
    backend: Annotated[StorageBackend, Depends(get_storage)],
) -> Response:
    """Serve a file from local storage. Only available when STORAGE_BACKEND=local."""
    try:
        if not isinstance(backend, LocalStorage):
            return _error("This endpoint is only available for local storage", 404)

        key = "/".join(segment for segment in path.split("/") if segment)
        if not key:
            return _error("File path is required", 400)

        metadata, content = await asyncio.gather(
            backend.get_metadata(key),
            backend.download(key),
        )
        if metadata is None:
            return _error("File not found", 404)

        filename = metadata.filename.replace('"', "")
        return Response(
            content=content,
            status_code=200,
            headers={
                "Content-Type": metadata.contentType,
                "Content-Length": str(metadata.size),
                "Cache-Control": CACHE_CONTROL,
                "Content-Disposition": f'inline; filename="{filename}"',
            },
        )
    except StorageFileNotFoundError:
        return _error("File not found", 404)
    except Exception:
        logger.exception("Error serving file: %s", path)
        return _error("Failed to serve file", 500)
