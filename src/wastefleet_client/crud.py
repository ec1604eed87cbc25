"""
Uniform CRUD client over one REST resource.

Every resource on the admin API follows the same trailing-slash contract:

    GET    /{resource}/             list
    GET    /{resource}/{id}/        get
    POST   /{resource}/             create
    PUT    /{resource}/{id}/        update
    DELETE /{resource}/{id}/        remove
    POST|GET /{resource}/{action}/  action

CRUDClient is a thin veneer over the transport: it adds no caching, no
retries and no error translation.
"""

from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel

from wastefleet_client.endpoints import normalize_path
from wastefleet_client.http import AsyncHTTPClient

Payload = Union[Dict[str, Any], List[Any], BaseModel]

# Keys under which list endpoints may nest their rows
LIST_ENVELOPE_KEYS = ("data", "results", "items")


def normalize_list_response(data: Any) -> List[Any]:
    """
    Coerce a decoded list response into a list.

    List endpoints are expected to return a JSON array. Envelopes carrying
    the array under ``data``, ``results`` or ``items`` are unwrapped, an
    empty body becomes ``[]`` and any other value is wrapped in a
    one-element list.
    """
    if data is None:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in LIST_ENVELOPE_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    return [data]


class CRUDClient:
    """
    Client for one resource path.

    Stateless apart from its path, so a single instance can be shared by
    any number of concurrent tasks.
    """

    def __init__(
        self,
        http_client: AsyncHTTPClient,
        base_path: str,
        response_model: Optional[Type[BaseModel]] = None,
    ):
        """
        Initialize the CRUD client.

        Args:
            http_client: The underlying HTTP client
            base_path: Resource path, with or without surrounding slashes
            response_model: Optional Pydantic model used to validate
                single resources and list items
        """
        self._http = http_client
        self._base_path = normalize_path(base_path)
        self._response_model = response_model

    @property
    def base_path(self) -> str:
        """Get the normalized base path for this resource."""
        return self._base_path

    def _build_path(self, *parts: Any) -> str:
        """Build ``/{resource}/{part}/.../`` with a single trailing slash."""
        clean_parts = [str(p).strip("/") for p in parts if p is not None and str(p).strip("/")]
        if clean_parts:
            return f"{self._base_path}{'/'.join(clean_parts)}/"
        return self._base_path

    def _item_path(self, id: Union[str, int]) -> str:
        # Ids containing "/" or "?" are raw sub-paths such as "by-staff/?staff=3"
        if isinstance(id, str) and ("/" in id or "?" in id):
            return f"{self._base_path}{id.lstrip('/')}"
        return self._build_path(id)

    def _parse(self, data: Any) -> Any:
        if self._response_model is not None and data is not None:
            return self._response_model.model_validate(data)
        return data

    async def list(
        self,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> List[Any]:
        """
        List the resource collection.

        Returns:
            The decoded rows, normalized by normalize_list_response
        """
        response = await self._http.get(self._base_path, params=params, headers=headers)
        return [self._parse(item) for item in normalize_list_response(_json_or_none(response))]

    async def get(
        self,
        id: Union[str, int],
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Get a single resource by ID.

        Args:
            id: Resource identifier, or a raw sub-path containing "/" or "?"

        Raises:
            NotFoundError: If the resource doesn't exist
        """
        response = await self._http.get(self._item_path(id), params=params, headers=headers)
        return self._parse(_json_or_none(response))

    async def create(
        self,
        payload: Payload,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Create a resource and return the decoded server representation."""
        response = await self._http.post(
            self._base_path, json_data=payload, params=params, headers=headers
        )
        return self._parse(_json_or_none(response))

    async def update(
        self,
        id: Union[str, int],
        payload: Payload,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Replace a resource with PUT."""
        response = await self._http.put(
            self._build_path(id), json_data=payload, params=params, headers=headers
        )
        return self._parse(_json_or_none(response))

    async def remove(
        self,
        id: Union[str, int],
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """Delete a resource. The response body is discarded."""
        await self._http.delete(self._build_path(id), params=params, headers=headers)

    async def action(
        self,
        action_name: str,
        payload: Optional[Payload] = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Call a named sub-resource of the collection.

        A truthy payload is POSTed; otherwise the action is fetched with GET.
        Action names may contain inner slashes, e.g. "bulk-sync-multi/123".

        Returns:
            The decoded response body, never validated against response_model
        """
        path = self._build_path(action_name)
        if payload:
            response = await self._http.post(path, json_data=payload, params=params, headers=headers)
        else:
            response = await self._http.get(path, params=params, headers=headers)
        return _json_or_none(response)

    def __repr__(self) -> str:
        return f"CRUDClient(base_path={self._base_path!r})"


def _json_or_none(response: Any) -> Any:
    # 204 responses and empty bodies carry no JSON
    if response.status_code == 204 or not response.content:
        return None
    return response.json()


def create_crud_client(
    http_client: AsyncHTTPClient,
    base_path: str,
    response_model: Optional[Type[BaseModel]] = None,
) -> CRUDClient:
    """Create a CRUD client bound to ``base_path``."""
    return CRUDClient(http_client, base_path, response_model=response_model)
