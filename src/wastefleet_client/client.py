"""
Main WasteFleet API client.

This module provides the WasteFleetClient class, the explicit construction
point for an application session. It builds the desktop and mobile
transports, the resource registry and the route token cache once, and
manages login state in the shared session storage.
"""

from typing import Any, Dict, Mapping, Optional, Type
import logging

import httpx
from pydantic import BaseModel

from wastefleet_client.config import Audience, ClientSettings
from wastefleet_client.crud import CRUDClient
from wastefleet_client.endpoints import EndpointRegistry, EndpointTable
from wastefleet_client.exceptions import AuthenticationError
from wastefleet_client.http import LOGIN_PATH, AsyncHTTPClient, create_transport_clients
from wastefleet_client.registry import ResourceRegistry, build_registry
from wastefleet_client.route_tokens import RouteTokenCache
from wastefleet_client.session import MemorySessionStorage, SessionStorage

logger = logging.getLogger(__name__)


class WasteFleetClient:
    """
    Main client for the WasteFleet admin API.

    Example usage:
        ```python
        settings = ClientSettings.from_env()
        async with WasteFleetClient(settings) as client:
            await client.login(username="admin", password="secret")

            bins = await client.bins.list()
            await client.vehicle_creations.action("bulk-sync", {"ids": [1, 2]})

            tokens = client.routes.get_encrypted_table()
        ```
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        session: Optional[SessionStorage] = None,
        endpoints: Optional[EndpointTable] = None,
        response_models: Optional[Mapping[str, Type[BaseModel]]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Connection settings (defaults to ClientSettings())
            session: Session storage shared by both transports
            endpoints: Endpoint table (defaults to the admin table)
            response_models: Optional Pydantic model per logical name
            transport: Optional httpx transport (used by tests)
        """
        self._settings = settings or ClientSettings()
        self._session = session if session is not None else MemorySessionStorage()

        self._transports = create_transport_clients(
            self._settings, self._session, transport=transport
        )

        endpoint_registry = (
            EndpointRegistry.default() if endpoints is None else EndpointRegistry(endpoints)
        )
        self._resources = build_registry(
            endpoint_registry, self.desktop, response_models=response_models
        )
        self._routes = RouteTokenCache(self._settings.route_secret)

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def session(self) -> SessionStorage:
        return self._session

    @property
    def desktop(self) -> AsyncHTTPClient:
        return self._transports[Audience.DESKTOP]

    @property
    def mobile(self) -> AsyncHTTPClient:
        return self._transports[Audience.MOBILE]

    @property
    def resources(self) -> ResourceRegistry:
        return self._resources

    @property
    def routes(self) -> RouteTokenCache:
        return self._routes

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated()

    # =========================================================================
    # Authentication
    # =========================================================================

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        """
        Authenticate with username and password.

        The login call is sent without a bearer header. On success the
        access token, normalized role, unique id and display name are
        written to the session storage.

        Returns:
            The decoded login response

        Raises:
            AuthenticationError: If the server rejects the credentials or
                the response carries no access token
        """
        response = await self.desktop.post(
            LOGIN_PATH,
            json_data={"username": username, "password": password},
        )
        try:
            data = response.json()
        except ValueError:
            data = None

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise AuthenticationError(
                "Login response did not contain an access token",
                status_code=response.status_code,
                body=data,
            )

        self._session.store_login(
            access_token,
            role=data.get("role"),
            unique_id=data.get("unique_id"),
            name=data.get("name") or data.get("username") or username,
        )

        logger.info(f"Logged in as {self._session.unique_id or username}")
        return data

    def logout(self) -> None:
        """Clear the session marker and identity fields."""
        self._session.clear()
        logger.info("Logged out")

    # =========================================================================
    # Resource Clients
    # =========================================================================

    def resource(self, logical_name: str) -> CRUDClient:
        """Get the CRUD client registered under ``logical_name``."""
        return self._resources[logical_name]

    def __getattr__(self, name: str) -> CRUDClient:
        """Access resource clients as attributes, e.g. ``client.bins``."""
        if name.startswith("_"):
            raise AttributeError(name)
        return self._resources[name]

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def close(self) -> None:
        """Close both transports."""
        for transport in self._transports.values():
            await transport.close()
        logger.debug("Client closed")

    async def __aenter__(self) -> "WasteFleetClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        auth_status = "authenticated" if self.is_authenticated else "not authenticated"
        return f"WasteFleetClient(api_root={self._settings.api_root!r}, {auth_status})"
