"""Tests for exception classes."""

import pytest

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


class TestWasteFleetClientError:
    """Tests for the base WasteFleetClientError class."""

    def test_basic_creation(self):
        error = WasteFleetClientError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details == {}

    def test_with_details(self):
        details = {"field": "name"}
        error = WasteFleetClientError("Validation failed", details=details)
        assert error.details == details


class TestRegistryErrors:
    def test_unknown_entity(self):
        error = UnknownEntity("trucks")

        assert error.logical_name == "trucks"
        assert str(error) == "Unknown entity: 'trucks'"
        assert isinstance(error, WasteFleetClientError)
        assert isinstance(error, KeyError)

    def test_duplicate_registration(self):
        error = DuplicateRegistration("bins", existing_path="/bins/", new_path="/masters/bins/")

        assert error.logical_name == "bins"
        assert "/bins/ and /masters/bins/" in str(error)


class TestRequestFailed:
    def test_with_status_code(self):
        error = RequestFailed("Error", status_code=500, body={"detail": "Error"})

        assert error.status_code == 500
        assert error.body == {"detail": "Error"}
        assert "(HTTP 500)" in str(error)

    def test_network_error_has_no_status(self):
        error = NetworkError("Connection refused")

        assert error.status_code is None
        assert str(error) == "Connection refused"
        assert isinstance(error, RequestFailed)

    def test_timeout_is_network_error(self):
        error = TimeoutError()

        assert isinstance(error, NetworkError)
        assert error.message == "Request timed out"

    def test_repr(self):
        assert repr(NotFoundError("gone", status_code=404)) == (
            "NotFoundError(message='gone', status_code=404)"
        )


class TestExceptionFromResponse:
    @pytest.mark.parametrize(
        "status_code, expected_class",
        [
            (400, ValidationError),
            (401, AuthenticationError),
            (403, AuthorizationError),
            (404, NotFoundError),
            (409, ConflictError),
            (422, ValidationError),
            (500, ServerError),
            (502, ServerError),
            (429, RequestFailed),
        ],
    )
    def test_status_code_mapping(self, status_code, expected_class):
        error = exception_from_response(status_code, "Error", body={"detail": "Error"})

        assert type(error) is expected_class
        assert error.status_code == status_code
        assert error.body == {"detail": "Error"}
