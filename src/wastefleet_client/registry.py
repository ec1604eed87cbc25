"""
Resource registry: one CRUD client per endpoint descriptor.

Call sites ask the registry for a client by logical name
(``registry.bins.list()``) instead of constructing clients per screen.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Type, Union
import logging

from pydantic import BaseModel

from wastefleet_client.crud import CRUDClient, create_crud_client
from wastefleet_client.endpoints import EndpointRegistry, EndpointTable
from wastefleet_client.exceptions import UnknownEntity
from wastefleet_client.http import AsyncHTTPClient

logger = logging.getLogger(__name__)


class ResourceRegistry(Mapping):
    """
    Immutable namespace of CRUD clients keyed by logical name.

    Supports both mapping access (``registry["bins"]``) and attribute
    access (``registry.bins``). Unknown names raise UnknownEntity.
    """

    __slots__ = ("_clients", "_endpoints")

    def __init__(self, endpoints: EndpointRegistry, clients: Dict[str, CRUDClient]):
        object.__setattr__(self, "_endpoints", endpoints)
        object.__setattr__(self, "_clients", MappingProxyType(dict(clients)))

    @property
    def endpoints(self) -> EndpointRegistry:
        return self._endpoints

    def __getitem__(self, logical_name: Union[str, Enum]) -> CRUDClient:
        key = logical_name.value if isinstance(logical_name, Enum) else logical_name
        try:
            return self._clients[key]
        except KeyError:
            raise UnknownEntity(key) from None

    def __getattr__(self, name: str) -> CRUDClient:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ResourceRegistry is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("ResourceRegistry is read-only")

    def __iter__(self) -> Iterator[str]:
        return iter(self._clients)

    def __len__(self) -> int:
        return len(self._clients)

    def __dir__(self):
        return list(super().__dir__()) + list(self._clients)

    def __repr__(self) -> str:
        return f"ResourceRegistry({', '.join(self._clients)})"


def build_registry(
    table: EndpointTable,
    http_client: AsyncHTTPClient,
    response_models: Optional[Mapping[str, Type[BaseModel]]] = None,
) -> ResourceRegistry:
    """
    Build one CRUD client per descriptor in ``table``.

    Args:
        table: EndpointRegistry, mapping of name to path, or an iterable of
            descriptors / (name, path) pairs
        http_client: Transport shared by every client
        response_models: Optional Pydantic model per logical name

    Raises:
        DuplicateRegistration: If two descriptors share a logical name
        UnknownEntity: If response_models names an unregistered entity
    """
    endpoints = table if isinstance(table, EndpointRegistry) else EndpointRegistry(table)
    response_models = response_models or {}

    for name in response_models:
        if name not in endpoints:
            raise UnknownEntity(name)

    clients = {
        descriptor.logical_name: create_crud_client(
            http_client,
            descriptor.resource_path,
            response_model=response_models.get(descriptor.logical_name),
        )
        for descriptor in endpoints
    }

    logger.debug(f"Built resource registry with {len(clients)} clients")
    return ResourceRegistry(endpoints, clients)
