"""Pytest configuration and fixtures for wastefleet-client tests."""

import json
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from wastefleet_client.config import ClientSettings
from wastefleet_client.http import AsyncHTTPClient
from wastefleet_client.session import MemorySessionStorage


# ============================================================================
# Recording transport
# ============================================================================


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: List[httpx.Request] = []
        self._handler = handler or (lambda request: httpx.Response(200, json={}))
        super().__init__(self._record)

    def _record(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def request_json(request: httpx.Request) -> Any:
    """Decode the JSON body of a recorded request."""
    return json.loads(request.content.decode("utf-8"))


def create_mock_response(
    status_code: int = 200,
    json_data: Optional[Any] = None,
) -> MagicMock:
    """Create a mock httpx.Response for endpoint client tests."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.content = b"" if json_data is None else json.dumps(json_data).encode()
    response.json.return_value = json_data
    return response


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def api_root():
    """Default API root for testing."""
    return "http://localhost:8000/api"


@pytest.fixture
def settings(api_root):
    return ClientSettings(api_root=api_root)


@pytest.fixture
def session():
    """Session storage holding a bearer token."""
    storage = MemorySessionStorage()
    storage.store_login("test-access-token", role="admin", unique_id="U-1", name="Tester")
    return storage


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def mock_http_client():
    """Create a mock HTTP client."""
    return AsyncMock(spec=AsyncHTTPClient)


@pytest.fixture
def mock_login_response() -> Dict[str, Any]:
    """Mock successful login response."""
    return {
        "access_token": "new-access-token",
        "role": "Admin",
        "unique_id": "STAFF-7",
        "name": "Depot Admin",
    }
