"""Upload validation for the direct-upload route."""

from app.config import MAX_UPLOAD_SIZE

FILE_TOO_LARGE = "File too large"


def validate_upload(filename: str | None, size: int, max_size: int = MAX_UPLOAD_SIZE) -> str | None:
    """
    Validate an incoming upload and return an error message, or None if valid.
    Content type is not restricted and empty files are valid objects.
    """
    if not filename:
        return "Filename is required"
    if size > max_size:
        return f"{FILE_TOO_LARGE}. Max size: {max_size // (1024 * 1024)} MB"
    return None
