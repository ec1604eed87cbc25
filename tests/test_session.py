"""Tests for session storage."""

import pytest

from wastefleet_client.session import (
    ACCESS_TOKEN_KEY,
    USER_ROLE_KEY,
    FileSessionStorage,
    MemorySessionStorage,
    normalize_role,
)


@pytest.mark.parametrize(
    "role, expected",
    [
        ("admin", "admin"),
        ("Admin", "admin"),
        ("USER", "user"),
        ("driver", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_role(role, expected):
    assert normalize_role(role) == expected


@pytest.fixture(params=["memory", "file"])
def storage(request, tmp_path):
    if request.param == "memory":
        return MemorySessionStorage()
    return FileSessionStorage(str(tmp_path / "nested" / "session.yaml"))


class TestSessionStorage:
    def test_empty(self, storage):
        assert storage.access_token is None
        assert storage.is_authenticated() is False

    def test_store_login(self, storage):
        storage.store_login("token-1", role="ADMIN", unique_id=7, name="Depot Admin")

        assert storage.get_item(ACCESS_TOKEN_KEY) == "token-1"
        assert storage.role == "admin"
        assert storage.unique_id == "7"
        assert storage.name == "Depot Admin"
        assert storage.is_authenticated() is True

    def test_role_defaults_to_user(self, storage):
        storage.store_login("token-1")
        assert storage.get_item(USER_ROLE_KEY) == "user"

    def test_clear(self, storage):
        storage.store_login("token-1", role="admin", unique_id="U", name="N")
        storage.clear()

        assert storage.access_token is None
        assert storage.role is None
        assert storage.unique_id is None
        assert storage.name is None

    def test_remove_missing_key(self, storage):
        storage.remove_item(ACCESS_TOKEN_KEY)
        assert storage.access_token is None


class TestFileSessionStorage:
    def test_shared_between_instances(self, tmp_path):
        filename = str(tmp_path / "session.yaml")

        FileSessionStorage(filename).store_login("token-1", role="admin")

        assert FileSessionStorage(filename).access_token == "token-1"

    def test_changes_seen_by_existing_instance(self, tmp_path):
        filename = str(tmp_path / "session.yaml")
        reader = FileSessionStorage(filename)

        FileSessionStorage(filename).store_login("token-2")

        assert reader.access_token == "token-2"


def test_memory_storage_initial_items():
    storage = MemorySessionStorage({ACCESS_TOKEN_KEY: "seeded"})
    assert storage.is_authenticated() is True
