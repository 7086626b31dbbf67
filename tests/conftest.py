"""
Pytest configuration and fixtures.
"""
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from khqrgen.api import app, get_store
from khqrgen.services.store import LatestPayloadStore


@pytest.fixture
def store() -> LatestPayloadStore:
    """Fresh latest-payload store."""
    return LatestPayloadStore()


@pytest.fixture
def client(store: LatestPayloadStore) -> Iterator[TestClient]:
    """HTTP client bound to an isolated store."""
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
