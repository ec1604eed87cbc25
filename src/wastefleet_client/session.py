"""
Session storage for the authenticated session marker.

The bearer token and a few identity fields live in a small key/value store
under fixed key names. The transport reads the token on every request; only
login and logout write to the store.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import logging
import os

import yaml

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
USER_ROLE_KEY = "user_role"
UNIQUE_ID_KEY = "unique_id"
USER_NAME_KEY = "name"

SESSION_KEYS = (ACCESS_TOKEN_KEY, USER_ROLE_KEY, UNIQUE_ID_KEY, USER_NAME_KEY)

ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"


def normalize_role(role: Optional[str]) -> Optional[str]:
    """Map a server role string onto ``admin``/``user``, or None if unknown."""
    if not role:
        return None

    normalized = role.lower()
    if normalized in (ADMIN_ROLE, DEFAULT_ROLE):
        return normalized
    return None


class SessionStorage(ABC):
    """Abstract key/value store holding the session marker."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...

    @property
    def access_token(self) -> Optional[str]:
        return self.get_item(ACCESS_TOKEN_KEY)

    @property
    def role(self) -> Optional[str]:
        return self.get_item(USER_ROLE_KEY)

    @property
    def unique_id(self) -> Optional[str]:
        return self.get_item(UNIQUE_ID_KEY)

    @property
    def name(self) -> Optional[str]:
        return self.get_item(USER_NAME_KEY)

    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def store_login(
        self,
        access_token: str,
        *,
        role: Optional[str] = None,
        unique_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        """Write the session marker and identity fields after a login."""
        self.set_item(ACCESS_TOKEN_KEY, access_token)
        self.set_item(USER_ROLE_KEY, normalize_role(role) or DEFAULT_ROLE)
        if unique_id is not None:
            self.set_item(UNIQUE_ID_KEY, str(unique_id))
        if name is not None:
            self.set_item(USER_NAME_KEY, name)

    def clear(self) -> None:
        """Remove every session key."""
        for key in SESSION_KEYS:
            self.remove_item(key)


class MemorySessionStorage(SessionStorage):
    """Process-local session storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileSessionStorage(SessionStorage):
    """
    Session storage persisted to a YAML file.

    The file is re-read on every access so that several processes (for
    example consecutive CLI invocations) share one session.
    """

    def __init__(self, filename: str):
        self.filename = filename

    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.filename):
            return {}

        with open(self.filename, "r") as file:
            data = yaml.safe_load(file)

        return data or {}

    def _write(self, data: Dict[str, Any]) -> None:
        directory = os.path.dirname(self.filename)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

        with open(self.filename, "w") as file:
            file.write(yaml.safe_dump(data))

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return None if value is None else str(value)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
            logger.debug(f"Removed session key {key} from {self.filename}")
