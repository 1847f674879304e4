# Storage backends

from app.config import StorageConfig
from app.storage.base import StorageBackend
from app.storage.errors import StorageError, StorageFileNotFoundError
from app.storage.local_storage import LocalStorage


def create_storage(config: StorageConfig) -> StorageBackend:
    """Pick the backend once, at startup."""
    if config.backend == "supabase":
        from app.storage.supabase_storage import SupabaseStorage

        return SupabaseStorage(
            url=config.supabase_url,
            service_role_key=config.supabase_service_role_key,
            bucket=config.supabase_bucket,
            key_prefix=config.key_prefix,
            signed_url_expires_in=config.signed_url_expires_in,
        )
    if config.backend != "local":
        raise ValueError(f"Unknown STORAGE_BACKEND: {config.backend!r}")
    return LocalStorage(
        root=config.storage_root,
        public_base_url=config.public_base_url,
        key_prefix=config.key_prefix,
        route_prefix=config.route_prefix,
    )


storage: StorageBackend = create_storage(StorageConfig.from_env())


def get_storage() -> StorageBackend:
    """FastAPI dependency returning the active backend."""
    return storage


__all__ = [
    "LocalStorage",
    "StorageBackend",
    "StorageError",
    "StorageFileNotFoundError",
    "create_storage",
    "get_storage",
    "storage",
]
