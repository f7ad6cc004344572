"""
Shared fixtures: an in-memory MongoDB, a real JWT token service with a test
secret, and a TestClient whose service providers can be overridden per test.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from athena.api.dependencies import get_token_service
from athena.services.token_service import TokenService
from main import app

TEST_SECRET = "test-secret-key"


@pytest.fixture
def mongo_db():
    return mongomock.MongoClient()["athena_test"]


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET, "HS256")


@pytest.fixture
def client(token_service):
    app.dependency_overrides[get_token_service] = lambda: token_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(token_service):
    token = token_service.create_access_token("user-1", "user1@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(token_service):
    token = token_service.create_access_token("user-2", "user2@example.com")
    return {"Authorization": f"Bearer {token}"}
