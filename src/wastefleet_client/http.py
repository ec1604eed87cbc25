"""
Async HTTP transport for the WasteFleet API.

This module provides the transport client built on httpx with:
- One base URL per audience (desktop, mobile)
- Bearer token injection through a shared request interceptor
- An explicit set of unauthenticated endpoints matched by exact path
- Response error mapping to RequestFailed subclasses

No retries are performed here; every failure reaches the caller.
"""

from typing import Any, Dict, Iterable, Optional, Union
import logging

import httpx
from pydantic import BaseModel

from wastefleet_client.config import Audience, ClientSettings
from wastefleet_client.exceptions import (
    NetworkError,
    TimeoutError as ClientTimeoutError,
    exception_from_response,
)
from wastefleet_client.session import MemorySessionStorage, SessionStorage

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login/login-user/"

DEFAULT_UNAUTHENTICATED_PATHS = (LOGIN_PATH,)


def normalize_request_path(path: str) -> str:
    """Return ``path`` with exactly one leading and one trailing slash."""
    trimmed = path.split("?", 1)[0].strip("/")
    if not trimmed:
        return "/"
    return f"/{trimmed}/"


class AuthInterceptor:
    """
    Request hook adding ``Authorization: Bearer <token>``.

    The token is read from session storage for every request, so a login
    or logout takes effect immediately on all clients sharing the storage.
    Requests whose path (relative to the client's base path) is one of the
    unauthenticated endpoints are sent without the header.
    """

    def __init__(
        self,
        session: SessionStorage,
        *,
        base_path: str = "",
        unauthenticated_paths: Iterable[str] = DEFAULT_UNAUTHENTICATED_PATHS,
    ):
        self.session = session
        self.base_path = base_path.rstrip("/")
        self.unauthenticated_paths = frozenset(
            normalize_request_path(p) for p in unauthenticated_paths
        )

    def relative_path(self, request: httpx.Request) -> str:
        path = request.url.path
        if self.base_path and path.startswith(self.base_path):
            path = path[len(self.base_path):]
        return path

    def is_unauthenticated(self, path: str) -> bool:
        return normalize_request_path(path) in self.unauthenticated_paths

    async def __call__(self, request: httpx.Request) -> None:
        token = self.session.access_token
        if token and not self.is_unauthenticated(self.relative_path(request)):
            request.headers["Authorization"] = f"Bearer {token}"


async def _drop_cookies(request: httpx.Request) -> None:
    request.headers.pop("Cookie", None)


class AsyncHTTPClient:
    """
    Async HTTP client for WasteFleet API requests.

    This client handles:
    - Base URL management
    - Authentication header injection
    - Response parsing and error handling
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[SessionStorage] = None,
        *,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        unauthenticated_paths: Iterable[str] = DEFAULT_UNAUTHENTICATED_PATHS,
        with_credentials: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            base_url: Base URL for the API (e.g., "http://localhost:8000/api/desktop")
            session: Session storage the bearer token is read from
            timeout: Request timeout in seconds
            headers: Additional headers to include in all requests
            unauthenticated_paths: Paths sent without the bearer header
            with_credentials: Whether cookies are sent with requests
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else MemorySessionStorage()
        self.timeout = timeout
        self.with_credentials = with_credentials
        self._default_headers = headers or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        self.auth_interceptor = AuthInterceptor(
            self.session,
            base_path=httpx.URL(self.base_url).path,
            unauthenticated_paths=unauthenticated_paths,
        )

    def _request_hooks(self) -> list:
        hooks = [self.auth_interceptor]
        if not self.with_credentials:
            hooks.append(_drop_cookies)
        return hooks

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    **self._default_headers,
                },
                event_hooks={"request": self._request_hooks()},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AsyncHTTPClient":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _raise_for_response(self, response: httpx.Response) -> None:
        """Convert an error response into a RequestFailed subclass."""
        status_code = response.status_code

        try:
            body = response.json()
        except ValueError:
            body = response.text

        detail = None
        if isinstance(body, dict):
            detail = body.get("detail") or body.get("message") or body.get("error")
        if not detail:
            detail = f"HTTP {status_code}"

        logger.debug(f"{response.request.method} {response.request.url} failed with {status_code}")
        raise exception_from_response(status_code, str(detail), body=body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Union[Dict[str, Any], list, BaseModel]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Make an HTTP request.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            path: Request path, relative to base_url
            params: Query parameters
            json_data: JSON body data (can be dict, list or Pydantic model)
            headers: Additional headers

        Returns:
            httpx.Response object

        Raises:
            RequestFailed: On non-2xx responses
            NetworkError: On connection failures
            TimeoutError: On request timeout
        """
        client = await self._get_client()

        # Handle Pydantic models in json_data
        if isinstance(json_data, BaseModel):
            json_data = json_data.model_dump(mode="json", exclude_none=True)

        # Clean query params
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        logger.debug(f"{method} {self.base_url}{path}")

        try:
            response = await client.request(
                method=method,
                url=path,
                params=params,
                json=json_data,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise ClientTimeoutError(f"Request timed out: {e}") from e
        except httpx.TransportError as e:
            raise NetworkError(f"Request failed: {e}") from e

        if not response.is_success:
            self._raise_for_response(response)

        return response

    async def get(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        *,
        json_data: Optional[Union[Dict[str, Any], list, BaseModel]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a POST request."""
        return await self.request(
            "POST", path, json_data=json_data, params=params, headers=headers
        )

    async def put(
        self,
        path: str,
        *,
        json_data: Optional[Union[Dict[str, Any], list, BaseModel]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a PUT request."""
        return await self.request(
            "PUT", path, json_data=json_data, params=params, headers=headers
        )

    async def patch(
        self,
        path: str,
        *,
        json_data: Optional[Union[Dict[str, Any], list, BaseModel]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a PATCH request."""
        return await self.request(
            "PATCH", path, json_data=json_data, params=params, headers=headers
        )

    async def delete(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path, params=params, headers=headers)

    def __repr__(self) -> str:
        return f"AsyncHTTPClient(base_url={self.base_url!r})"


def create_transport_client(
    settings: ClientSettings,
    audience: Audience = Audience.DESKTOP,
    session: Optional[SessionStorage] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncHTTPClient:
    """
    Build the transport client for one audience.

    Both audiences share the interceptor logic; the mobile audience keeps
    cookies while the desktop audience does not send them.
    """
    audience = Audience(audience)
    return AsyncHTTPClient(
        settings.base_url(audience),
        session,
        timeout=settings.timeout,
        headers=settings.headers,
        unauthenticated_paths=settings.unauthenticated_paths,
        with_credentials=audience is Audience.MOBILE,
        transport=transport,
    )


def create_transport_clients(
    settings: ClientSettings,
    session: Optional[SessionStorage] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[Audience, AsyncHTTPClient]:
    """Build one transport client per audience sharing the same session."""
    session = session if session is not None else MemorySessionStorage()
    return {
        audience: create_transport_client(settings, audience, session, transport=transport)
        for audience in Audience
    }
