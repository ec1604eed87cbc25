"""
Resolution of obfuscated navigation paths to screens.

Admin URLs have the shape ``/{enc_master}/{enc_module}[/new | /{id}]`` and
dashboard URLs ``/dashboard/{enc_module}``. Both segments are route tokens
from RouteTokenCache. A segment that does not decrypt, or decrypts to a
screen that does not exist, resolves to a DecodeFailure pointing at the
section's landing page instead of raising.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union

from wastefleet_client.route_tokens import RouteTokenCache

ADMIN_FALLBACK = "/"
DASHBOARD_FALLBACK = "/dashboard"

VIEW = "view"
NEW = "new"
EDIT = "edit"


@dataclass(frozen=True)
class ScreenConfig:
    list: Optional[str] = None
    form: Optional[str] = None
    edit_form: Optional[str] = None
    component: Optional[str] = None

    def screen_for(self, mode: str) -> Optional[str]:
        if self.component:
            return self.component
        if mode == EDIT:
            return self.edit_form or self.form
        if mode == NEW:
            return self.form
        return self.list


def _crud(name: str) -> ScreenConfig:
    return ScreenConfig(list=f"{name}List", form=f"{name}Form")


# Plaintext master segment -> plaintext module segment -> screens
ADMIN_SCREENS: Dict[str, Dict[str, ScreenConfig]] = {
    "admins": {
        "user-type": _crud("UserType"),
        "user-creation": _crud("UserCreation"),
        "staff-user-type": _crud("StaffUserType"),
        "mainscreen-type": _crud("MainScreenType"),
        "userscreen-action": _crud("UserScreenAction"),
        "mainscreens": _crud("MainScreen"),
        "userscreens": _crud("UserScreen"),
        "userscreenpermissions": _crud("UserScreenPermission"),
    },
    "masters": {
        "continents": _crud("Continent"),
        "countries": _crud("Country"),
        "bins": _crud("Bin"),
        "states": _crud("State"),
        "districts": _crud("District"),
        "cities": _crud("City"),
        "zones": _crud("Zone"),
        "wards": _crud("Ward"),
        "properties": _crud("Property"),
        "sub-properties": _crud("SubProperty"),
    },
    "staff-masters": {
        "staff-creation": _crud("StaffCreation"),
        "staff-template": _crud("StaffTemplate"),
        "alternative-staff-template": _crud("AlternativeStaffTemplate"),
        "staff-template-audit": _crud("StaffTemplateAudit"),
        "route-plans": _crud("RoutePlan"),
        "supervisor-zone-map": _crud("SupervisorZoneMap"),
        "supervisor-zone-access-audit": _crud("SupervisorZoneAccessAudit"),
        "unassigned-staff-pool": _crud("UnassignedStaffPool"),
    },
    "transport-master": {
        "fuel": _crud("Fuel"),
        "vehicle-type": _crud("VehicleType"),
        "vehicle-creation": _crud("VehicleCreation"),
        "trip-definition": _crud("TripDefinition"),
        "bin-load-log": _crud("BinLoadLog"),
        "trip-instance": _crud("TripInstance"),
        "zone-property-load-tracker": _crud("ZonePropertyLoadTracker"),
        "trip-attendance": _crud("TripAttendance"),
        "vehicle-trip-audit": _crud("VehicleTripAudit"),
        "trip-exception-log": _crud("TripExceptionLog"),
    },
    "customer-master": {
        "customer-creation": _crud("CustomerCreation"),
        "customer-tag": _crud("CustomerTag"),
        "household-pickup-event": _crud("HouseholdPickupEvent"),
    },
    "vehicle-tracking": {
        "vehicle-track": ScreenConfig(component="VehicleTracking"),
        "vehicle-history": ScreenConfig(component="VehicleHistory"),
    },
    "waste-management": {
        "waste-collected-data": _crud("WasteCollectedData"),
        "collection-monitoring": ScreenConfig(component="WasteCollectionMonitor"),
    },
    "workforce-management": {
        "workforce-management": ScreenConfig(component="WorkforceManagement"),
        "date-report": ScreenConfig(component="DateReport"),
        "day-report": ScreenConfig(component="DayReport"),
    },
    "citizen-grievance": {
        "complaint": ScreenConfig(
            list="ComplaintList", form="ComplaintAddForm", edit_form="ComplaintEditForm"
        ),
        "main-complaint-category": _crud("MainComplaintCategory"),
        "sub-complaint-category": _crud("SubComplaintCategory"),
        "feedback": _crud("Feedback"),
    },
    "reports": {
        "trip-summary": ScreenConfig(component="TripSummary"),
        "monthly-distance": ScreenConfig(component="MonthlyDistance"),
        "waste-collected-summary": ScreenConfig(component="WasteSummary"),
    },
}

DASHBOARD_SCREENS: Dict[str, str] = {
    "dashboard-map": "MapView",
    "dashboard-vehicle": "Vehicle",
    "dashboard-waste-collection": "WasteCollection",
    "dashboard-resources": "ResourceManagement",
    "dashboard-grievances": "Grievances",
    "dashboard-alerts": "Alerts",
    "dashboard-reports": "Reports",
    "dashboard-weighbridge": "Weighbridge",
}


@dataclass(frozen=True)
class ScreenMatch:
    screen: str
    module: str
    master: Optional[str] = None
    mode: str = VIEW
    id: Optional[str] = None


@dataclass(frozen=True)
class DecodeFailure:
    """A navigation path that did not resolve; routers redirect to ``redirect_to``."""

    redirect_to: str
    segment: Optional[str] = None


RouteResult = Union[ScreenMatch, DecodeFailure]


def _mode(id: Optional[str], path: str) -> str:
    if id:
        return EDIT
    if path.rstrip("/").endswith("/new"):
        return NEW
    return VIEW


def resolve_admin_route(
    cache: RouteTokenCache,
    enc_master: Optional[str],
    enc_module: Optional[str],
    id: Optional[str] = None,
    path: str = "",
) -> RouteResult:
    """Resolve ``/{enc_master}/{enc_module}[/new|/{id}]`` to an admin screen."""
    master = cache.decrypt_segment(enc_master or "")
    if master is None:
        return DecodeFailure(ADMIN_FALLBACK, enc_master)

    module = cache.decrypt_segment(enc_module or "")
    if module is None:
        return DecodeFailure(ADMIN_FALLBACK, enc_module)

    config = ADMIN_SCREENS.get(master, {}).get(module)
    if config is None:
        return DecodeFailure(ADMIN_FALLBACK)

    mode = _mode(id, path)
    screen = config.screen_for(mode)
    if screen is None:
        return DecodeFailure(ADMIN_FALLBACK)

    return ScreenMatch(screen=screen, module=module, master=master, mode=mode, id=id)


def resolve_dashboard_route(cache: RouteTokenCache, enc_module: Optional[str]) -> RouteResult:
    """Resolve ``/dashboard/{enc_module}`` to a dashboard screen."""
    module = cache.decrypt_segment(enc_module or "")
    if module is None:
        return DecodeFailure(DASHBOARD_FALLBACK, enc_module)

    screen = DASHBOARD_SCREENS.get(module)
    if screen is None:
        return DecodeFailure(DASHBOARD_FALLBACK)

    return ScreenMatch(screen=screen, module=module)


def build_admin_path(
    cache: RouteTokenCache,
    master: str,
    module: str,
    id: Optional[str] = None,
    new: bool = False,
) -> str:
    """Build the obfuscated admin URL for plaintext ``master``/``module``."""
    path = f"/{cache.encrypt_segment(master)}/{cache.encrypt_segment(module)}"
    if id is not None:
        return f"{path}/{id}"
    if new:
        return f"{path}/new"
    return path


def build_dashboard_path(cache: RouteTokenCache, module: str) -> str:
    return f"{DASHBOARD_FALLBACK}/{cache.encrypt_segment(module)}"
