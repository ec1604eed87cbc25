"""
Admin endpoint registry.

Single source of truth mapping logical resource names to REST resource
paths. The table is declarative: adding an entity means adding one entry
to ADMIN_ENDPOINTS.
"""

from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator

from wastefleet_client.exceptions import DuplicateRegistration, UnknownEntity


def normalize_path(path: str) -> str:
    """
    Normalize a resource path to ``/segment/.../segment/``.

    Leading, trailing and repeated slashes are collapsed so that every
    segment is bare.

    Raises:
        ValueError: If the path has no segments
    """
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        raise ValueError(f"Resource path {path!r} is empty")
    return "/" + "/".join(segments) + "/"


class EndpointDescriptor(BaseModel):
    """An immutable logical name to resource path binding."""

    model_config = ConfigDict(frozen=True)

    logical_name: str
    resource_path: str
    group: str = "default"

    @field_validator("logical_name")
    @classmethod
    def check_logical_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Logical name must not be empty")
        return value

    @field_validator("resource_path")
    @classmethod
    def normalize_resource_path(cls, value: str) -> str:
        return normalize_path(value)


# (logical name, resource path) per domain area
ADMIN_ENDPOINTS: Dict[str, Tuple[Tuple[str, str], ...]] = {
    "geography": (
        ("continents", "continents"),
        ("countries", "countries"),
        ("states", "states"),
        ("districts", "districts"),
        ("cities", "cities"),
        ("zones", "zones"),
        ("wards", "wards"),
    ),
    "properties": (
        ("properties", "properties"),
        ("sub_properties", "subproperties"),
        ("bins", "bins"),
    ),
    "staff": (
        ("staff_creation", "staffcreation"),
        ("staff_templates", "staff-template"),
        ("alternative_staff_templates", "alternative-staff-template"),
        ("route_plans", "route-plans"),
        ("supervisor_zone_maps", "supervisor-zone-map"),
        ("supervisor_zone_access_audits", "supervisor-zone-access-audit"),
        ("unassigned_staff_pool", "unassigned-staff-pool"),
    ),
    "admin": (
        ("user_types", "user-type"),
        ("user_creations", "users-creation"),
        ("staff_user_types", "staffusertypes"),
        ("main_screen_types", "mainscreentype"),
        ("user_screen_actions", "userscreen-action"),
        ("main_screens", "mainscreens"),
        ("user_screens", "userscreens"),
        ("user_screen_permissions", "userscreenpermissions"),
    ),
    "transport": (
        ("fuels", "fuels"),
        ("vehicle_types", "vehicle-type"),
        ("vehicle_creations", "vehicle-creation"),
        ("vehicle_assignments", "vehicle-assigning"),
    ),
    "trips": (
        ("trip_definitions", "trip-definitions"),
        ("trip_instances", "trip-instances"),
        ("trip_attendances", "trip-attendance"),
        ("trip_exception_logs", "trip-exception-logs"),
        ("vehicle_trip_audits", "vehicle-trip-audit"),
        ("bin_load_logs", "bin-load-log"),
        ("zone_property_load_trackers", "zone-property-load-tracker"),
    ),
    "customers": (
        ("customer_creations", "customercreations"),
        ("customer_tags", "customer-tag"),
        ("household_pickup_events", "household-pickup-event"),
    ),
    "operations": (
        ("waste_collections", "wastecollections"),
        ("complaints", "complaints"),
        ("feedbacks", "feedbacks"),
    ),
}


def admin_descriptors() -> List[EndpointDescriptor]:
    """Descriptors for the default admin endpoint table."""
    return [
        EndpointDescriptor(logical_name=name, resource_path=path, group=group)
        for group, entries in ADMIN_ENDPOINTS.items()
        for name, path in entries
    ]


AdminEntity = Enum(
    "AdminEntity",
    {
        name.upper(): name
        for entries in ADMIN_ENDPOINTS.values()
        for name, _ in entries
    },
    type=str,
)
AdminEntity.__doc__ = "Closed set of logical names in the default admin table."


EndpointTable = Union[
    "EndpointRegistry",
    Mapping[str, str],
    Iterable[Union[EndpointDescriptor, Tuple[str, str]]],
]


def _coerce_descriptors(table: EndpointTable) -> Iterator[EndpointDescriptor]:
    if isinstance(table, EndpointRegistry):
        yield from table
        return

    entries = table.items() if isinstance(table, Mapping) else table
    for entry in entries:
        if isinstance(entry, EndpointDescriptor):
            yield entry
        else:
            name, path = entry
            yield EndpointDescriptor(logical_name=name, resource_path=path)


class EndpointRegistry:
    """
    Verified mapping of logical names to endpoint descriptors.

    Construction rejects duplicate logical names; lookups of names that were
    never registered raise UnknownEntity.
    """

    def __init__(self, table: EndpointTable):
        descriptors: Dict[str, EndpointDescriptor] = {}

        for descriptor in _coerce_descriptors(table):
            existing = descriptors.get(descriptor.logical_name)
            if existing is not None:
                raise DuplicateRegistration(
                    descriptor.logical_name,
                    existing_path=existing.resource_path,
                    new_path=descriptor.resource_path,
                )
            descriptors[descriptor.logical_name] = descriptor

        self._descriptors = descriptors

    @classmethod
    def default(cls) -> "EndpointRegistry":
        """Registry over the built-in admin endpoint table."""
        return cls(admin_descriptors())

    @property
    def names(self) -> List[str]:
        return list(self._descriptors)

    def descriptor(self, logical_name: Union[str, Enum]) -> EndpointDescriptor:
        key = logical_name.value if isinstance(logical_name, Enum) else logical_name
        try:
            return self._descriptors[key]
        except KeyError:
            raise UnknownEntity(key) from None

    def resolve_path(self, logical_name: Union[str, Enum]) -> str:
        """Return the normalized resource path for a logical name."""
        return self.descriptor(logical_name).resource_path

    def groups(self) -> List[str]:
        seen: Dict[str, None] = {}
        for descriptor in self._descriptors.values():
            seen.setdefault(descriptor.group, None)
        return list(seen)

    def in_group(self, group: str) -> List[str]:
        return [
            name
            for name, descriptor in self._descriptors.items()
            if descriptor.group == group
        ]

    def __contains__(self, logical_name: object) -> bool:
        if isinstance(logical_name, Enum):
            logical_name = logical_name.value
        return logical_name in self._descriptors

    def __iter__(self) -> Iterator[EndpointDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __repr__(self) -> str:
        return f"EndpointRegistry({len(self)} endpoints)"
