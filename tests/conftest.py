import os
import tempfile

# Must be set before anything imports app.core.config
_DB_DIR = tempfile.mkdtemp(prefix="newsdesk-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_DB_DIR}/test.db")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "true")
os.environ.setdefault("CORS_ALLOW_ORIGIN", "*")

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="session")
def client():
    from app.main import app

    # One client for the whole run keeps every request on the same event loop
    with TestClient(app) as test_client:
        yield test_client
