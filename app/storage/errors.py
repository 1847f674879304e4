"""Storage errors."""


class StorageError(Exception):
    """Base class for storage-domain errors."""


class StorageFileNotFoundError(StorageError):
    """Raised by download when no object exists for the key."""

    def __init__(self, key: str, cause: BaseException | None = None) -> None:
        super().__init__(f"File not found: {key}")
        self.key = key
        self.cause = cause
