import io

import pytest

from app.storage.utils import (
    filename_from_key,
    guess_content_type,
    resolve_storage_prefix,
    sanitize_filename,
    to_bytes,
)


# sanitize_filename --------------------------------------------------------------------------------------------
def test_sanitize_keeps_simple_names():
    assert sanitize_filename("notes.txt") == "notes.txt"
    assert sanitize_filename("report-2024_final.PDF") == "report-2024_final.PDF"


def test_sanitize_strips_traversal_and_separators():
    """Traversal sequences and path separators never survive sanitization."""
    for raw in ("../../etc/passwd", "..\\..\\windows\\system32", "/abs/path.txt", "a/../b"):
        name = sanitize_filename(raw)
        assert "/" not in name
        assert "\\" not in name
        assert ".." not in name
        assert not name.startswith(".")
    assert sanitize_filename("../../etc/passwd") == "etc_passwd"


def test_sanitize_replaces_disallowed_characters():
    assert sanitize_filename("my photo (1).png") == "my_photo_1_.png"
    assert sanitize_filename("résumé.pdf") == "resume.pdf"
    assert sanitize_filename('quo"te;.txt') == "quo_te_.txt"


@pytest.mark.parametrize("raw", [None, "", "..", "///", "   "])
def test_sanitize_falls_back_to_file(raw):
    assert sanitize_filename(raw) == "file"


def test_sanitize_truncates_and_keeps_extension():
    name = sanitize_filename("a" * 300 + ".png")
    assert len(name) <= 100
    assert name.endswith(".png")


# resolve_storage_prefix --------------------------------------------------------------------------------------
def test_prefix_empty_by_default():
    assert resolve_storage_prefix(None) == ""
    assert resolve_storage_prefix("") == ""
    assert resolve_storage_prefix("/") == ""


def test_prefix_normalized():
    assert resolve_storage_prefix("/staging/") == "staging"
    assert resolve_storage_prefix("tenant a//uploads") == "tenant_a/uploads"
    assert resolve_storage_prefix("../prod/./x") == "prod/x"


# content types -----------------------------------------------------------------------------------------------
def test_guess_content_type_known_extensions():
    assert guess_content_type("abc/123-photo.png") == "image/png"
    assert guess_content_type("photo.JPG") == "image/jpeg"
    assert guess_content_type("notes.txt") == "text/plain"
    assert guess_content_type("vector.svg") == "image/svg+xml"
    assert guess_content_type("bundle.zip") == "application/zip"


def test_guess_content_type_defaults_to_binary():
    assert guess_content_type("data.xyz") == "application/octet-stream"
    assert guess_content_type("no_extension") == "application/octet-stream"


def test_filename_from_key_strips_generated_prefix():
    key = "staging/0f8fad5b-d9cb-469f-a165-70867728950e-notes.txt"
    assert filename_from_key(key) == "notes.txt"
    assert filename_from_key("plain-name.txt") == "plain-name.txt"


# to_bytes ----------------------------------------------------------------------------------------------------
class _AsyncReader:
    def __init__(self, data: bytes):
        self.data = data

    async def read(self) -> bytes:
        return self.data


async def _async_chunks():
    yield b"hel"
    yield bytearray(b"lo")


@pytest.mark.asyncio
async def test_to_bytes_accepts_buffers():
    assert await to_bytes(b"hello") == b"hello"
    assert await to_bytes(bytearray(b"hello")) == b"hello"
    assert await to_bytes(memoryview(b"hello")) == b"hello"


@pytest.mark.asyncio
async def test_to_bytes_accepts_streams():
    assert await to_bytes(io.BytesIO(b"hello")) == b"hello"
    assert await to_bytes(_AsyncReader(b"hello")) == b"hello"


@pytest.mark.asyncio
async def test_to_bytes_accepts_chunk_iterables():
    assert await to_bytes([b"he", b"ll", b"o"]) == b"hello"
    assert await to_bytes(_async_chunks()) == b"hello"


@pytest.mark.asyncio
async def test_to_bytes_rejects_non_bytes():
    with pytest.raises(TypeError):
        await to_bytes("hello")
    with pytest.raises(TypeError):
        await to_bytes(42)
    with pytest.raises(TypeError):
        await to_bytes(["not", "bytes"])
