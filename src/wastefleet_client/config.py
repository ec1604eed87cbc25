"""
Client configuration.

ClientSettings is built once by start-up code and passed to the pieces that
need it. It can be created directly, from environment variables or from a
YAML profile file.
"""

import os
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

LOCAL_API_ROOT = "http://localhost:8000/api"

# Bundled with every client; route tokens are obfuscation, not access control.
DEFAULT_ROUTE_SECRET = "wastefleet-admin-route-segments"


class Audience(str, Enum):
    """API audiences served under ``{api_root}/{audience}``."""

    DESKTOP = "desktop"
    MOBILE = "mobile"


class ClientSettings(BaseModel):
    """Connection and obfuscation settings shared by all clients."""

    api_root: str = LOCAL_API_ROOT
    timeout: float = 30.0
    headers: Dict[str, str] = Field(default_factory=dict)
    route_secret: str = DEFAULT_ROUTE_SECRET
    unauthenticated_paths: Tuple[str, ...] = ("/login/login-user/",)

    @field_validator("api_root")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def base_url(self, audience: Audience) -> str:
        return f"{self.api_root}/{Audience(audience).value}"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ClientSettings":
        """
        Build settings from environment variables.

        WASTEFLEET_PROD selects WASTEFLEET_API_PROD over WASTEFLEET_API_LOCAL
        as the API root. WASTEFLEET_TIMEOUT and WASTEFLEET_ROUTE_SECRET
        override their defaults when set.
        """
        env = os.environ if environ is None else environ

        is_prod = env.get("WASTEFLEET_PROD", "").lower() == "true"
        root_var = "WASTEFLEET_API_PROD" if is_prod else "WASTEFLEET_API_LOCAL"

        values: Dict[str, Any] = {}
        if env.get(root_var):
            values["api_root"] = env[root_var]
        if env.get("WASTEFLEET_TIMEOUT"):
            values["timeout"] = float(env["WASTEFLEET_TIMEOUT"])
        if env.get("WASTEFLEET_ROUTE_SECRET"):
            values["route_secret"] = env["WASTEFLEET_ROUTE_SECRET"]

        return cls(**values)

    @classmethod
    def from_yaml(cls, filename: str) -> "ClientSettings":
        with open(filename, "r") as file:
            data = yaml.safe_load(file)

        if data is None:
            return cls()
        return cls(**data)

    def write_yaml(self, filename: str) -> None:
        with open(filename, "w") as file:
            file.write(yaml.safe_dump(self.model_dump(mode="json", exclude_unset=True)))
