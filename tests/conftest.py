import os
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Test environment setup
os.environ["STORAGE_BACKEND"] = "local"
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")

from app.main import app
from app.storage import get_storage
from app.storage.local_storage import LocalStorage
from app.storage.supabase_storage import SupabaseStorage


# STORAGE FIXTURES --------------------------------------------------------------------------------------------
@pytest.fixture
def storage_root(tmp_path):
    """Storage root that does not exist yet, so lazy creation is exercised."""
    return tmp_path / "uploads"


@pytest.fixture
def local_storage(storage_root):
    """Local backend rooted in a temporary directory."""
    return LocalStorage(root=storage_root, public_base_url="http://testserver")


@pytest.fixture
def supabase_client():
    """Mocked Supabase client; bucket calls are recorded on supabase_client.bucket."""
    client = MagicMock()
    bucket = MagicMock()
    client.storage.from_.return_value = bucket
    client.bucket = bucket
    return client


@pytest.fixture
def remote_storage(supabase_client):
    """Supabase backend wired to the mocked client."""
    return SupabaseStorage(url="", service_role_key="", bucket="assets", client=supabase_client)


# APP FIXTURES ------------------------------------------------------------------------------------------------
@pytest.fixture
def client(local_storage):
    """FastAPI test client with the local backend active."""
    app.dependency_overrides[get_storage] = lambda: local_storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def remote_client(remote_storage):
    """FastAPI test client with the Supabase backend active."""
    app.dependency_overrides[get_storage] = lambda: remote_storage
    yield TestClient(app)
    app.dependency_overrides.clear()
