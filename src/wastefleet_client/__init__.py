"""
WasteFleet Client Library.

An async resource-access layer for the waste-collection fleet admin API.

Example usage:
    ```python
    from wastefleet_client import ClientSettings, WasteFleetClient

    async with WasteFleetClient(ClientSettings.from_env()) as client:
        # Authenticate
        await client.login(username="admin", password="secret")

        # List resources
        zones = await client.zones.list()

        # Get a single resource
        vehicle = await client.vehicle_creations.get(42)

        # Create a resource
        bin = await client.bins.create({"name": "B1"})

        # Obfuscated navigation paths
        tokens = client.routes.get_encrypted_table()
    ```
"""

__version__ = "0.1.0"

# Main client
from wastefleet_client.client import WasteFleetClient

# Configuration and session
from wastefleet_client.config import Audience, ClientSettings
from wastefleet_client.session import (
    FileSessionStorage,
    MemorySessionStorage,
    SessionStorage,
)

# HTTP client components (for advanced usage)
from wastefleet_client.http import (
    AsyncHTTPClient,
    AuthInterceptor,
    create_transport_client,
    create_transport_clients,
)

# Resource access
from wastefleet_client.endpoints import (
    ADMIN_ENDPOINTS,
    AdminEntity,
    EndpointDescriptor,
    EndpointRegistry,
    normalize_path,
)
from wastefleet_client.crud import CRUDClient, create_crud_client, normalize_list_response
from wastefleet_client.registry import ResourceRegistry, build_registry

# Route obfuscation
from wastefleet_client.route_tokens import ROUTE_SEGMENTS, RouteTokenCache
from wastefleet_client.router import (
    DecodeFailure,
    ScreenMatch,
    build_admin_path,
    build_dashboard_path,
    resolve_admin_route,
    resolve_dashboard_route,
)

# Exceptions
from wastefleet_client.exceptions import (
    WasteFleetClientError,
    UnknownEntity,
    DuplicateRegistration,
    RequestFailed,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    ServerError,
    NetworkError,
    TimeoutError,
    exception_from_response,
)

__all__ = [
    "__version__",
    "WasteFleetClient",
    "Audience",
    "ClientSettings",
    "FileSessionStorage",
    "MemorySessionStorage",
    "SessionStorage",
    "AsyncHTTPClient",
    "AuthInterceptor",
    "create_transport_client",
    "create_transport_clients",
    "ADMIN_ENDPOINTS",
    "AdminEntity",
    "EndpointDescriptor",
    "EndpointRegistry",
    "normalize_path",
    "CRUDClient",
    "create_crud_client",
    "normalize_list_response",
    "ResourceRegistry",
    "build_registry",
    "ROUTE_SEGMENTS",
    "RouteTokenCache",
    "DecodeFailure",
    "ScreenMatch",
    "build_admin_path",
    "build_dashboard_path",
    "resolve_admin_route",
    "resolve_dashboard_route",
    "WasteFleetClientError",
    "UnknownEntity",
    "DuplicateRegistration",
    "RequestFailed",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
    "NetworkError",
    "TimeoutError",
    "exception_from_response",
]
