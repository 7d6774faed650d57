"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from clipbatch.config import settings
from clipbatch.main import app
from clipbatch.services import BatchProcessingService
from tests.fixtures import FakeBackend


@pytest.fixture
def fake_backend():
    """Backend answering every command immediately."""
    return FakeBackend()


@pytest.fixture
def service(fake_backend):
    """Fresh service wired to the fake backend."""
    return BatchProcessingService(fake_backend)


@pytest.fixture
def test_settings():
    """Override settings for testing."""
    original_api_keys = settings.api_keys

    settings.api_keys = "test_key_123,test_key_456"

    yield settings

    settings.api_keys = original_api_keys


@pytest.fixture
def client(test_settings, service):
    """Create a test client whose app uses the test service."""
    original_service = app.state.batch_service
    app.state.batch_service = service

    with TestClient(app) as test_client:
        yield test_client

    app.state.batch_service = original_service


@pytest.fixture
def api_key():
    """Valid API key for testing."""
    return "test_key_123"


@pytest.fixture
def headers(api_key):
    """Request headers with valid API key."""
    return {"X-API-Key": api_key}
