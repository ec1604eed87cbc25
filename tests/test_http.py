"""Tests for the HTTP transport module."""

from typing import Optional

import httpx
import pytest
from pydantic import BaseModel

from conftest import RecordingTransport, request_json
from wastefleet_client.config import Audience, ClientSettings
from wastefleet_client.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NetworkError,
    NotFoundError,
    RequestFailed,
    ServerError,
    TimeoutError as ClientTimeoutError,
    ValidationError,
)
from wastefleet_client.http import (
    LOGIN_PATH,
    AsyncHTTPClient,
    AuthInterceptor,
    create_transport_client,
    create_transport_clients,
    normalize_request_path,
)
from wastefleet_client.session import MemorySessionStorage


class TestNormalizeRequestPath:
    """Tests for request path normalization."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("login/login-user", "/login/login-user/"),
            ("/login/login-user/", "/login/login-user/"),
            ("//login/login-user//", "/login/login-user/"),
            ("/login/login-user/?next=1", "/login/login-user/"),
            ("", "/"),
        ],
    )
    def test_normalize(self, path, expected):
        assert normalize_request_path(path) == expected


class TestAuthInterceptor:
    """Tests for the bearer token interceptor."""

    @pytest.fixture
    def interceptor(self, session):
        return AuthInterceptor(session, base_path="/api/desktop")

    @pytest.mark.asyncio
    async def test_adds_header_for_regular_path(self, interceptor):
        request = httpx.Request("GET", "http://localhost:8000/api/desktop/vehicles/vehicle-creation/")
        await interceptor(request)
        assert request.headers["Authorization"] == "Bearer test-access-token"

    @pytest.mark.asyncio
    async def test_skips_login_path(self, interceptor):
        request = httpx.Request("POST", "http://localhost:8000/api/desktop/login/login-user/")
        await interceptor(request)
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_login_match_is_exact(self, interceptor):
        """Paths merely containing the login route still carry the token."""
        request = httpx.Request(
            "GET", "http://localhost:8000/api/desktop/reports/login/login-user/history/"
        )
        await interceptor(request)
        assert request.headers["Authorization"] == "Bearer test-access-token"

    @pytest.mark.asyncio
    async def test_no_token_no_header(self):
        interceptor = AuthInterceptor(MemorySessionStorage(), base_path="/api/desktop")
        request = httpx.Request("GET", "http://localhost:8000/api/desktop/zones/")
        await interceptor(request)
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_reads_token_per_request(self, session, interceptor):
        session.store_login("rotated-token")
        request = httpx.Request("GET", "http://localhost:8000/api/desktop/zones/")
        await interceptor(request)
        assert request.headers["Authorization"] == "Bearer rotated-token"

    def test_custom_unauthenticated_paths(self, session):
        interceptor = AuthInterceptor(session, unauthenticated_paths=["auth/token", "/health"])
        assert interceptor.is_unauthenticated("/auth/token/")
        assert interceptor.is_unauthenticated("/health")
        assert not interceptor.is_unauthenticated(LOGIN_PATH)


class TestAsyncHTTPClient:
    """Tests for the AsyncHTTPClient class."""

    @pytest.fixture
    def client(self, session, transport):
        return AsyncHTTPClient(
            "http://localhost:8000/api/desktop/",
            session,
            transport=transport,
        )

    def test_initialization(self, client):
        assert client.base_url == "http://localhost:8000/api/desktop"
        assert client.timeout == 30.0
        assert client.auth_interceptor.base_path == "/api/desktop"

    @pytest.mark.asyncio
    async def test_bearer_header_on_resource_request(self, client, transport):
        await client.get("/vehicles/vehicle-creation/")

        request = transport.last
        assert request.url.path == "/api/desktop/vehicles/vehicle-creation/"
        assert request.headers["Authorization"] == "Bearer test-access-token"

    @pytest.mark.asyncio
    async def test_no_bearer_header_on_login(self, client, transport):
        await client.post(LOGIN_PATH, json_data={"username": "u", "password": "p"})

        assert transport.last.url.path == "/api/desktop/login/login-user/"
        assert "Authorization" not in transport.last.headers

    @pytest.mark.asyncio
    async def test_default_headers(self, client, transport):
        await client.get("/zones/")
        assert transport.last.headers["Content-Type"] == "application/json"
        assert transport.last.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_pydantic_payload_is_dumped(self, client, transport):
        class ZoneCreate(BaseModel):
            name: str
            ward_count: Optional[int] = None

        await client.post("/zones/", json_data=ZoneCreate(name="North"))
        assert request_json(transport.last) == {"name": "North"}

    @pytest.mark.asyncio
    async def test_patch(self, client, transport):
        await client.patch("/zones/3/", json_data={"name": "North"}, params={"partial": 1})

        request = transport.last
        assert request.method == "PATCH"
        assert request.url.path == "/api/desktop/zones/3/"
        assert request.url.params["partial"] == "1"
        assert request_json(request) == {"name": "North"}
        assert request.headers["Authorization"] == "Bearer test-access-token"

    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self, client, transport):
        await client.get("/zones/", params={"city": 3, "ward": None})
        assert dict(transport.last.url.params) == {"city": "3"}

    @pytest.mark.asyncio
    async def test_context_manager(self, session):
        async with AsyncHTTPClient("http://localhost:8000/api/desktop", session) as client:
            assert client._client is not None
        assert client._client is None

    @pytest.mark.asyncio
    async def test_close(self, client):
        await client._get_client()
        await client.close()
        assert client._client is None


class TestAsyncHTTPClientErrorHandling:
    """Tests for error handling in AsyncHTTPClient."""

    def _client(self, status_code, **response_kwargs):
        transport = RecordingTransport(
            lambda request: httpx.Response(status_code, **response_kwargs)
        )
        return AsyncHTTPClient("http://localhost:8000/api/desktop", transport=transport)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, exception_class",
        [
            (400, ValidationError),
            (401, AuthenticationError),
            (403, AuthorizationError),
            (404, NotFoundError),
            (409, ConflictError),
            (422, ValidationError),
            (500, ServerError),
            (503, ServerError),
            (418, RequestFailed),
        ],
    )
    async def test_status_mapping(self, status_code, exception_class):
        client = self._client(status_code, json={"detail": "nope"})

        with pytest.raises(exception_class) as exc_info:
            await client.get("/zones/")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.body == {"detail": "nope"}
        assert exc_info.value.message == "nope"

    @pytest.mark.asyncio
    async def test_text_body_is_kept(self):
        client = self._client(502, text="Bad Gateway")

        with pytest.raises(ServerError) as exc_info:
            await client.get("/zones/")

        assert exc_info.value.body == "Bad Gateway"
        assert "HTTP 502" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = AsyncHTTPClient(
            "http://localhost:8000/api/desktop", transport=RecordingTransport(refuse)
        )

        with pytest.raises(NetworkError) as exc_info:
            await client.get("/zones/")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value, RequestFailed)

    @pytest.mark.asyncio
    async def test_timeout(self):
        def stall(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = AsyncHTTPClient(
            "http://localhost:8000/api/desktop", transport=RecordingTransport(stall)
        )

        with pytest.raises(ClientTimeoutError):
            await client.get("/zones/")

    @pytest.mark.asyncio
    async def test_no_retry(self):
        transport = RecordingTransport(lambda request: httpx.Response(500, json={}))
        client = AsyncHTTPClient("http://localhost:8000/api/desktop", transport=transport)

        with pytest.raises(ServerError):
            await client.get("/zones/")

        assert len(transport.requests) == 1


class TestTransportFactory:
    """Tests for per-audience transport construction."""

    def test_desktop_client(self, settings, session):
        client = create_transport_client(settings, Audience.DESKTOP, session)
        assert client.base_url == "http://localhost:8000/api/desktop"
        assert client.with_credentials is False
        assert client.session is session

    def test_mobile_client(self, settings, session):
        client = create_transport_client(settings, "mobile", session)
        assert client.base_url == "http://localhost:8000/api/mobile"
        assert client.with_credentials is True

    def test_both_audiences_share_session(self, settings, session):
        clients = create_transport_clients(settings, session)
        assert set(clients) == {Audience.DESKTOP, Audience.MOBILE}
        assert clients[Audience.DESKTOP].session is clients[Audience.MOBILE].session

    @pytest.mark.asyncio
    async def test_interceptor_attached_to_each_audience(self, settings, session):
        transport = RecordingTransport()
        clients = create_transport_clients(settings, session, transport=transport)

        await clients[Audience.DESKTOP].get("/zones/")
        await clients[Audience.MOBILE].get("/zones/")

        assert [r.url.path for r in transport.requests] == [
            "/api/desktop/zones/",
            "/api/mobile/zones/",
        ]
        assert all(
            r.headers["Authorization"] == "Bearer test-access-token"
            for r in transport.requests
        )

    @pytest.mark.asyncio
    async def test_desktop_drops_cookies(self, settings, session):
        transport = RecordingTransport()
        client = create_transport_client(settings, Audience.DESKTOP, session, transport=transport)

        await client.get("/zones/", headers={"Cookie": "sid=abc"})

        assert "Cookie" not in transport.last.headers

    @pytest.mark.asyncio
    async def test_mobile_keeps_cookies(self, settings, session):
        transport = RecordingTransport()
        client = create_transport_client(settings, Audience.MOBILE, session, transport=transport)

        await client.get("/zones/", headers={"Cookie": "sid=abc"})

        assert transport.last.headers["Cookie"] == "sid=abc"

    def test_unauthenticated_paths_from_settings(self, session):
        settings = ClientSettings(unauthenticated_paths=("/auth/token/",))
        client = create_transport_client(settings, Audience.DESKTOP, session)
        assert client.auth_interceptor.unauthenticated_paths == frozenset({"/auth/token/"})
