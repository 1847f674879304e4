"""Application configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env so storage settings can live outside the shell environment
load_dotenv()

# Storage: "local" or "supabase"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").strip().lower()

# Local storage root (used when STORAGE_BACKEND=local). Created lazily on first upload.
LOCAL_STORAGE_PATH = Path(os.getenv("LOCAL_STORAGE_PATH", "uploads")).resolve()

# Public base URL used to build absolute links to stored files (e.g. http://localhost:8000)
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")

# Optional deployment-wide key namespace (e.g. "staging" or "tenant-a")
FILE_STORAGE_PREFIX = os.getenv("FILE_STORAGE_PREFIX", "")

# Route that serves local files back to clients
STORAGE_ROUTE_PREFIX = "/" + os.getenv("STORAGE_ROUTE_PREFIX", "/api/storage/files").strip("/")

# Supabase (used when STORAGE_BACKEND=supabase)
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_BUCKET = os.getenv("SUPABASE_UPLOAD_BUCKET", "uploads")

# Upload limits (bytes)
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", 50 * 1024 * 1024))  # 50 MB

# Lifetime of signed upload/download URLs (seconds)
SIGNED_URL_EXPIRES_IN = int(os.getenv("SIGNED_URL_EXPIRES_IN", "3600"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]


class StorageConfig(BaseModel):
    """Everything a storage backend needs, resolved once at startup."""

    backend: str = "local"
    storage_root: Path = Path("uploads")
    public_base_url: str = ""
    key_prefix: str = ""
    route_prefix: str = "/api/storage/files"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_bucket: str = "uploads"
    signed_url_expires_in: int = 3600

    @classmethod
    def from_env(cls) -> "StorageConfig":
        return cls(
            backend=STORAGE_BACKEND,
            storage_root=LOCAL_STORAGE_PATH,
            public_base_url=PUBLIC_BASE_URL,
            key_prefix=FILE_STORAGE_PREFIX,
            route_prefix=STORAGE_ROUTE_PREFIX,
            supabase_url=SUPABASE_URL,
            supabase_service_role_key=SUPABASE_SERVICE_ROLE_KEY,
            supabase_bucket=SUPABASE_BUCKET,
            signed_url_expires_in=SIGNED_URL_EXPIRES_IN,
        )
