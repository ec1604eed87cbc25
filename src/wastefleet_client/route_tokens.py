"""
Route segment obfuscation.

Navigation paths use opaque tokens instead of readable segment names such
as ``masters`` or ``bins``. RouteTokenCache encrypts each segment once per
process and remembers the result, so every link built in one process uses
the same token, and resolves tokens back to segment names for routing.

The key is bundled with the client. This hides resource names from the
address bar; it does not protect them.
"""

from typing import Dict, Mapping, Optional
import base64
import hashlib
import logging

from keycove import decrypt, encrypt

from wastefleet_client.config import DEFAULT_ROUTE_SECRET

logger = logging.getLogger(__name__)

# Route key -> plaintext URL segment
ROUTE_SEGMENTS: Dict[str, str] = {
    # Admin sections
    "admins": "admins",
    "masters": "masters",
    "staff_masters": "staff-masters",
    "transport_master": "transport-master",
    "customer_master": "customer-master",
    "vehicle_tracking": "vehicle-tracking",
    "waste_management_master": "waste-management",
    "workforce_management": "workforce-management",
    "citizen_grievance": "citizen-grievance",
    "report": "reports",
    # Admin screens
    "user_type": "user-type",
    "user_creation": "user-creation",
    "staff_user_type": "staff-user-type",
    "main_screen_type": "mainscreen-type",
    "user_screen_action": "userscreen-action",
    "main_screen": "mainscreens",
    "user_screen": "userscreens",
    "user_screen_permission": "userscreenpermissions",
    # Masters
    "continents": "continents",
    "countries": "countries",
    "bins": "bins",
    "states": "states",
    "districts": "districts",
    "cities": "cities",
    "zones": "zones",
    "wards": "wards",
    "properties": "properties",
    "sub_properties": "sub-properties",
    # Staff masters
    "staff_creation": "staff-creation",
    "staff_template": "staff-template",
    "alternative_staff_template": "alternative-staff-template",
    "staff_template_audit": "staff-template-audit",
    "route_plans": "route-plans",
    "supervisor_zone_map": "supervisor-zone-map",
    "supervisor_zone_access_audit": "supervisor-zone-access-audit",
    "unassigned_staff_pool": "unassigned-staff-pool",
    # Transport masters
    "fuel": "fuel",
    "vehicle_type": "vehicle-type",
    "vehicle_creation": "vehicle-creation",
    "trip_definition": "trip-definition",
    "bin_load_log": "bin-load-log",
    "trip_instance": "trip-instance",
    "zone_property_load_tracker": "zone-property-load-tracker",
    "trip_attendance": "trip-attendance",
    "vehicle_trip_audit": "vehicle-trip-audit",
    "trip_exception_log": "trip-exception-log",
    # Customer masters
    "customer_creation": "customer-creation",
    "customer_tag": "customer-tag",
    "household_pickup_event": "household-pickup-event",
    # Tracking, waste and workforce
    "vehicle_track": "vehicle-track",
    "vehicle_history": "vehicle-history",
    "waste_collected_data": "waste-collected-data",
    "collection_monitoring": "collection-monitoring",
    "date_report": "date-report",
    "day_report": "day-report",
    # Citizen grievance
    "complaint": "complaint",
    "main_complaint_category": "main-complaint-category",
    "sub_complaint_category": "sub-complaint-category",
    "feedback": "feedback",
    # Reports
    "trip_summary": "trip-summary",
    "monthly_distance": "monthly-distance",
    "waste_collected_summary": "waste-collected-summary",
    # Dashboard
    "dashboard_live_map": "dashboard-map",
    "dashboard_vehicle_management": "dashboard-vehicle",
    "dashboard_waste_collection": "dashboard-waste-collection",
    "dashboard_resources": "dashboard-resources",
    "dashboard_grievances": "dashboard-grievances",
    "dashboard_alerts": "dashboard-alerts",
    "dashboard_reports": "dashboard-reports",
    "dashboard_weighbridge": "dashboard-weighbridge",
}


def derive_key(secret: str) -> str:
    """Stretch an arbitrary passphrase into a Fernet key."""
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii")


class RouteTokenCache:
    """
    Per-process bijection between route segments and opaque tokens.

    Encryption is memoized per plaintext, so two calls for the same segment
    always return the same token and distinct segments always get distinct
    tokens. Only registered segments (the base table plus anything encrypted
    through this cache) decrypt successfully.
    """

    def __init__(
        self,
        secret: str = DEFAULT_ROUTE_SECRET,
        segments: Optional[Mapping[str, str]] = None,
    ):
        self._key = derive_key(secret)
        self._segments: Dict[str, str] = dict(ROUTE_SEGMENTS if segments is None else segments)
        self._known = set(self._segments.values())
        self._tokens: Dict[str, str] = {}
        self._plaintexts: Dict[str, str] = {}
        self._default_table: Optional[Dict[str, str]] = None

    @property
    def segments(self) -> Dict[str, str]:
        return dict(self._segments)

    def encrypt_segment(self, plaintext: str) -> str:
        """Return the token for ``plaintext``, encrypting it on first use."""
        token = self._tokens.get(plaintext)
        if token is None:
            token = encrypt(plaintext, self._key)
            self._tokens[plaintext] = token
            self._plaintexts[token] = plaintext
            self._known.add(plaintext)
        return token

    def _encrypt_table(self, table: Mapping[str, str]) -> Dict[str, str]:
        return {key: self.encrypt_segment(plaintext) for key, plaintext in table.items()}

    def get_encrypted_table(self, overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """
        Encrypt the route table.

        Args:
            overrides: Route key -> plaintext entries merged over the base
                table before encryption

        Returns:
            Route key -> token. Without overrides the table is built once
            and the same values are returned on every call.
        """
        if not overrides:
            if self._default_table is None:
                self._default_table = self._encrypt_table(self._segments)
                logger.debug(f"Encrypted {len(self._default_table)} route segments")
            return dict(self._default_table)

        return self._encrypt_table({**self._segments, **overrides})

    def decrypt_segment(self, token: Optional[str]) -> Optional[str]:
        """
        Resolve a token back to its segment.

        Returns None (never raises) when the token is empty, malformed,
        made with another key or does not name a registered segment.
        """
        if not token:
            return None

        plaintext = self._plaintexts.get(token)
        if plaintext is not None:
            return plaintext

        try:
            plaintext = decrypt(token, self._key)
        except Exception as e:
            logger.debug(f"Route token could not be decrypted: {e!r}")
            return None

        if plaintext not in self._known:
            logger.debug(f"Route token decrypted to unregistered segment {plaintext!r}")
            return None
        return plaintext

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.decrypt_segment(token) is not None
