"""
Global pytest fixtures for the Shortener Platform test suite.

Responsibilities:
    - Provide isolated in-memory and file-journal storage backends
    - Provide a ShortenerManager wired to the in-memory backend
    - Provide a fresh FastAPI TestClient via the app factory for HTTP tests

Why an app factory?
    Using `create_app(storage=...)` gives each test its own backend, so no
    state leaks between tests.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortener_platform.manager.shortener_manager import ShortenerManager
from shortener_platform.storage.file_storage import FileStorage
from shortener_platform.storage.memory_storage import MemoryStorage

BASE_URL = "http://localhost:8080"


@pytest.fixture
def storage() -> MemoryStorage:
    """Fresh in-memory backend."""
    return MemoryStorage(base_url=BASE_URL)


@pytest.fixture
def journal_path(tmp_path):
    return str(tmp_path / "short-url-db.json")


@pytest.fixture
def file_storage(journal_path):
    """File-journal backend on a temporary journal; closed after the test."""
    fs = FileStorage(path=journal_path, base_url=BASE_URL)
    yield fs
    fs.close()


@pytest.fixture
def manager(storage: MemoryStorage) -> ShortenerManager:
    return ShortenerManager(storage=storage)


@pytest.fixture
def app(storage: MemoryStorage):
    return create_app(storage=storage, trusted_subnet="127.0.0.0/8")


@pytest.fixture
def client(app) -> TestClient:
    """
    TestClient used as a context manager so the lifespan runs and one event
    loop serves every request (the delete pipeline schedules tasks on it).
    """
    with TestClient(app) as c:
        yield c
