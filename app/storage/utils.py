"""Key and metadata helpers shared by every storage backend."""

import inspect
import posixpath
import re
import unicodedata
from collections.abc import AsyncIterable, Iterable
from typing import Any

DEFAULT_FILENAME = "file"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
MAX_FILENAME_LENGTH = 100

# Extension -> MIME type used when inferring metadata from a key
CONTENT_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".json": "application/json",
    ".xml": "application/xml",
    ".csv": "text/csv",
    ".md": "text/markdown",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".zip": "application/zip",
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_DOT_RUNS = re.compile(r"\.{2,}")
_GENERATED_PREFIX = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}-(?P<name>.+)$"
)


def sanitize_filename(filename: str | None) -> str:
    """
    Make a caller-supplied filename safe to embed in a storage key.
    Path separators and any other run of characters outside [A-Za-z0-9._-]
    become one underscore, runs of dots collapse to one. Falls back to "file".
    """
    if not filename:
        return DEFAULT_FILENAME
    name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    name = name.replace("/", " ").replace("\\", " ")
    name = _UNSAFE_CHARS.sub("_", name)
    name = _DOT_RUNS.sub(".", name).strip("._")
    if len(name) > MAX_FILENAME_LENGTH:
        stem, dot, ext = name.rpartition(".")
        if dot and stem and len(ext) < 16:
            stem = stem[: MAX_FILENAME_LENGTH - len(ext) - 1].rstrip("._")
            name = f"{stem}.{ext}"
        else:
            name = name[:MAX_FILENAME_LENGTH].rstrip("._")
    return name or DEFAULT_FILENAME


def resolve_storage_prefix(raw: str | None) -> str:
    """Normalize the configured key namespace: "/Staging//a b/" -> "Staging/a_b"."""
    if not raw:
        return ""
    segments = []
    for segment in raw.replace("\\", "/").split("/"):
        segment = segment.strip()
        if not segment or segment in (".", ".."):
            continue
        segments.append(sanitize_filename(segment))
    return "/".join(segments)


def guess_content_type(name: str) -> str:
    """Content type from the extension of a key or filename (case-insensitive)."""
    ext = posixpath.splitext(name)[1].lower()
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


def filename_from_key(key: str) -> str:
    """Original (sanitized) filename for a key: basename without the generated uuid prefix."""
    base = posixpath.basename(key)
    match = _GENERATED_PREFIX.match(base)
    return match.group("name") if match else base


async def to_bytes(content: Any) -> bytes:
    """
    Coerce any byte-producing input into a single buffer.
    Accepts bytes-like objects, file-like objects with a sync or async read(),
    and sync or async iterables of byte chunks.
    """
    if isinstance(content, bytes):
        return content
    if isinstance(content, (bytearray, memoryview)):
        return bytes(content)
    if isinstance(content, str):
        raise TypeError("Expected bytes, got str; encode text before uploading")

    read = getattr(content, "read", None)
    if callable(read):
        data = read()
        if inspect.isawaitable(data):
            data = await data
        return await to_bytes(data)

    chunks: list[bytes] = []
    if isinstance(content, AsyncIterable):
        async for chunk in content:
            chunks.append(_chunk_bytes(chunk))
        return b"".join(chunks)
    if isinstance(content, Iterable):
        for chunk in content:
            chunks.append(_chunk_bytes(chunk))
        return b"".join(chunks)

    raise TypeError(f"Unsupported upload content type: {type(content).__name__}")


def _chunk_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    raise TypeError(f"Expected byte chunks, got {type(chunk).__name__}")
