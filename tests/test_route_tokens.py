"""Tests for route segment obfuscation."""

import pytest

from wastefleet_client.route_tokens import ROUTE_SEGMENTS, RouteTokenCache, derive_key


@pytest.fixture
def cache():
    return RouteTokenCache("test-route-secret")


class TestDeriveKey:
    def test_key_is_stable(self):
        assert derive_key("secret") == derive_key("secret")
        assert derive_key("secret") != derive_key("other")

    def test_key_is_fernet_sized(self):
        assert len(derive_key("secret")) == 44


class TestRouteTokenCache:
    def test_round_trip(self, cache):
        for plaintext in ROUTE_SEGMENTS.values():
            assert cache.decrypt_segment(cache.encrypt_segment(plaintext)) == plaintext

    def test_encryption_is_memoized(self, cache):
        assert cache.encrypt_segment("masters") == cache.encrypt_segment("masters")

    def test_distinct_segments_get_distinct_tokens(self, cache):
        table = cache.get_encrypted_table()
        assert len(set(table.values())) == len(set(ROUTE_SEGMENTS.values()))

    def test_table_is_stable(self, cache):
        first = cache.get_encrypted_table()
        second = cache.get_encrypted_table()

        assert first == second
        assert set(first) == set(ROUTE_SEGMENTS)
        assert first["bins"] == cache.encrypt_segment("bins")

    def test_table_is_a_copy(self, cache):
        cache.get_encrypted_table()["bins"] = "tampered"
        assert cache.get_encrypted_table()["bins"] != "tampered"

    def test_overrides(self, cache):
        table = cache.get_encrypted_table({"bins": "bins-v2", "depots": "depots"})

        assert cache.decrypt_segment(table["bins"]) == "bins-v2"
        assert cache.decrypt_segment(table["depots"]) == "depots"
        assert table["masters"] == cache.get_encrypted_table()["masters"]

    def test_token_from_fresh_cache_with_same_secret(self, cache):
        token = cache.encrypt_segment("masters")
        assert RouteTokenCache("test-route-secret").decrypt_segment(token) == "masters"

    @pytest.mark.parametrize(
        "token",
        ["", None, "abc123", "Z0FBQUFBQm5vdGF0b2tlbg", "gAAAAA-not-a-fernet-token=="],
    )
    def test_garbage_returns_none(self, cache, token):
        assert cache.decrypt_segment(token) is None

    def test_other_secret_returns_none(self, cache):
        token = RouteTokenCache("another-secret").encrypt_segment("masters")
        assert cache.decrypt_segment(token) is None

    def test_unregistered_plaintext_returns_none(self):
        writer = RouteTokenCache("test-route-secret")
        token = writer.encrypt_segment("not-a-route")

        reader = RouteTokenCache("test-route-secret")
        assert reader.decrypt_segment(token) is None
        assert writer.decrypt_segment(token) == "not-a-route"

    def test_custom_segments(self):
        cache = RouteTokenCache("test-route-secret", segments={"depots": "depots"})
        table = cache.get_encrypted_table()

        assert list(table) == ["depots"]
        assert cache.decrypt_segment(cache.encrypt_segment("masters")) == "masters"
        assert RouteTokenCache("test-route-secret", segments={"depots": "depots"}).decrypt_segment(
            RouteTokenCache("test-route-secret").encrypt_segment("masters")
        ) is None

    def test_contains(self, cache):
        assert cache.encrypt_segment("zones") in cache
        assert "garbage" not in cache
        assert 42 not in cache
