"""Unit tests for the core models."""

import pytest
from pydantic import ValidationError

from request_pipeline.cancellation import CancelToken
from request_pipeline.models import (
    ClassifiedError,
    ContentType,
    ErrorCategory,
    PendingEntry,
    RequestDescriptor,
    RequestMethod,
    RequestState,
    ResultCode,
)


class TestRequestDescriptor:
    """Tests for RequestDescriptor."""

    def test_defaults(self) -> None:
        descriptor = RequestDescriptor(method="get", url="/users")

        assert descriptor.method == "GET"
        assert descriptor.body is None
        assert descriptor.params is None
        assert descriptor.headers == {}
        assert descriptor.cancellable is True
        assert descriptor.show_loading is True
        assert descriptor.response_type == "json"
        assert descriptor.timeout is None
        assert descriptor.cancel_token is None
        assert descriptor.state == RequestState.CREATED

    def test_method_enum_accepted(self) -> None:
        descriptor = RequestDescriptor(method=RequestMethod.PATCH, url="/users/1")
        assert descriptor.method == "PATCH"

    def test_invalid_method_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            RequestDescriptor(method="FETCH", url="/users")
        assert "Invalid HTTP method" in str(exc_info.value)

    def test_only_explicit_false_disables_flags(self) -> None:
        descriptor = RequestDescriptor(method="GET", url="/a", cancellable=None, show_loading=None)
        assert descriptor.cancellable is True
        assert descriptor.show_loading is True

        descriptor = RequestDescriptor(method="GET", url="/a", cancellable=False, show_loading=False)
        assert descriptor.cancellable is False
        assert descriptor.show_loading is False

    def test_invalid_response_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RequestDescriptor(method="GET", url="/a", response_type="stream")

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RequestDescriptor(method="GET", url="/a", timeout=0)

    def test_fingerprint(self) -> None:
        descriptor = RequestDescriptor(method="GET", url="/users", params={"id": 2})
        assert descriptor.fingerprint == "get&/users&&id=2"

    def test_fingerprint_ignores_headers_and_flags(self) -> None:
        d1 = RequestDescriptor(method="GET", url="/users", headers={"x": "1"})
        d2 = RequestDescriptor(method="GET", url="/users", show_loading=False)
        assert d1.fingerprint == d2.fingerprint

    def test_cancel_token_excluded_from_dump(self) -> None:
        descriptor = RequestDescriptor(method="GET", url="/users", cancel_token=CancelToken())
        assert "cancel_token" not in descriptor.model_dump()


class TestClassifiedError:
    """Tests for ClassifiedError."""

    def test_creation(self) -> None:
        error = ClassifiedError(category=ErrorCategory.NOT_FOUND, message="missing", original_status=404)
        assert error.category == ErrorCategory.NOT_FOUND
        assert error.category.value == "NotFound"
        assert error.original_status == 404

    def test_status_optional(self) -> None:
        error = ClassifiedError(category=ErrorCategory.NETWORK_ERROR, message="offline")
        assert error.original_status is None

    def test_frozen(self) -> None:
        error = ClassifiedError(category=ErrorCategory.UNKNOWN, message="x")
        with pytest.raises(ValidationError):
            error.message = "y"


class TestEnums:
    """Tests for the enum constants."""

    def test_error_categories(self) -> None:
        assert {c.value for c in ErrorCategory} == {
            "BadRequest",
            "Unauthorized",
            "Forbidden",
            "NotFound",
            "MethodNotAllowed",
            "Timeout",
            "ServerError",
            "BadGateway",
            "ServiceUnavailable",
            "GatewayTimeout",
            "NetworkError",
            "BusinessError",
            "Unknown",
        }

    def test_result_codes(self) -> None:
        assert ResultCode.SUCCESS == 200
        assert ResultCode.OVERDUE == 401
        assert ResultCode.ERROR == 500

    def test_content_types(self) -> None:
        assert ContentType.JSON.value.startswith("application/json")
        assert ContentType.FORM_URLENCODED.value.startswith("application/x-www-form-urlencoded")


def test_pending_entry_holds_token() -> None:
    token = CancelToken()
    entry = PendingEntry(fingerprint="get&/a&&", token=token)
    assert entry.token is token
