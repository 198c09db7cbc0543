"""Core type definitions and models for the request pipeline.

This module provides the data structures shared by the registry, the
status classifier and the pipeline: request descriptors, lifecycle states,
error categories and the classified-error record surfaced to callers.

Examples:
    Describing a request::

        from request_pipeline.models import RequestDescriptor

        descriptor = RequestDescriptor(
            method="get",
            url="/users",
            params={"id": 2},
        )
        descriptor.method        # 'GET'
        descriptor.cancellable   # True
        descriptor.fingerprint   # 'get&/users&&id=2'

    Classifying a failure::

        error = ClassifiedError(
            category=ErrorCategory.NOT_FOUND,
            message="你所访问的资源不存在！",
            original_status=404,
        )
"""

from enum import Enum, IntEnum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from request_pipeline.cancellation import CancelToken
from request_pipeline.fingerprint import compute_fingerprint

VALID_HTTP_METHODS = {
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "DELETE",
    "OPTIONS",
    "PATCH",
}


class RequestMethod(str, Enum):
    """HTTP methods exposed by the pipeline's call shapes."""

    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    PUT = "PUT"
    DELETE = "DELETE"


class ContentType(str, Enum):
    """Common request content types."""

    JSON = "application/json;charset=UTF-8"
    TEXT = "text/plain;charset=UTF-8"
    FORM_URLENCODED = "application/x-www-form-urlencoded;charset=UTF-8"
    FORM_DATA = "multipart/form-data;charset=UTF-8"


class ResultCode(IntEnum):
    """Business status codes carried in response bodies."""

    SUCCESS = 200
    ERROR = 500
    OVERDUE = 401


class RequestState(str, Enum):
    """Lifecycle state of a single request.

    Attributes:
        CREATED: Descriptor built, request-transform stage not finished.
        DISPATCHED: Handed to the transport.
        SETTLED_SUCCESS: Resolved with a payload.
        SETTLED_ERROR: Rejected (transport, HTTP, business, or cancellation).
    """

    CREATED = "CREATED"
    DISPATCHED = "DISPATCHED"
    SETTLED_SUCCESS = "SETTLED_SUCCESS"
    SETTLED_ERROR = "SETTLED_ERROR"


class ErrorCategory(str, Enum):
    """User-facing failure category."""

    BAD_REQUEST = "BadRequest"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    TIMEOUT = "Timeout"
    SERVER_ERROR = "ServerError"
    BAD_GATEWAY = "BadGateway"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    GATEWAY_TIMEOUT = "GatewayTimeout"
    NETWORK_ERROR = "NetworkError"
    BUSINESS_ERROR = "BusinessError"
    UNKNOWN = "Unknown"


class ClassifiedError(BaseModel):
    """A failure reduced to a category and a user-facing message.

    Attributes:
        category: Failure category.
        message: Human-readable message shown to the user.
        original_status: HTTP or business status code, when one exists.
    """

    category: ErrorCategory = Field(..., description="Failure category")
    message: str = Field(..., description="User-facing message")
    original_status: int | None = Field(
        default=None,
        description="HTTP or business status that produced this classification",
        examples=[404, 401, None],
    )

    model_config = {"frozen": True}


class RequestDescriptor(BaseModel):
    """Everything the pipeline needs to perform one request.

    Created by the caller per call. The pipeline attaches a cancel token and
    the auth header, and advances ``state`` as the request progresses.

    Attributes:
        method: Upper-cased HTTP method.
        url: Target url, relative to the client's base url.
        body: Request body; mappings and sequences are sent as JSON unless a
            form content type is set.
        params: Query parameters.
        headers: Extra request headers.
        cancellable: Register in the pending registry so an identical later
            request supersedes this one.
        show_loading: Count towards the global loading indicator.
        response_type: ``"json"`` interprets the business envelope,
            ``"blob"`` returns raw bytes.
        timeout: Per-request transport deadline in seconds.
        cancel_token: Attached by the pending registry.
        state: Current lifecycle state.
    """

    method: str = Field(..., description="HTTP method")
    url: str = Field(..., description="Request url or path")
    body: Any = Field(default=None, description="Request body")
    params: Any = Field(default=None, description="Query parameters")
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers")
    cancellable: bool = Field(default=True, description="Supersede identical in-flight requests")
    show_loading: bool = Field(default=True, description="Drive the loading indicator")
    response_type: Literal["json", "blob"] = Field(default="json")
    timeout: float | None = Field(default=None, gt=0, description="Transport deadline override")
    cancel_token: CancelToken | None = Field(default=None, exclude=True)
    state: RequestState = Field(default=RequestState.CREATED)

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("method", mode="before")
    @classmethod
    def validate_method(cls, v: Any) -> str:
        """Upper-case and validate the HTTP method.

        Raises:
            ValueError: If the method is not a known HTTP method.
        """
        method = (v.value if isinstance(v, Enum) else str(v)).upper()
        if method not in VALID_HTTP_METHODS:
            raise ValueError(
                f"Invalid HTTP method: {v}. "
                f"Valid methods are: {', '.join(sorted(VALID_HTTP_METHODS))}"
            )
        return method

    @field_validator("cancellable", "show_loading", mode="before")
    @classmethod
    def default_unless_false(cls, v: Any) -> bool:
        # Only an explicit False opts out.
        return v is not False

    @property
    def fingerprint(self) -> str:
        """Dedup identity of this request."""
        return compute_fingerprint(self.method, self.url, self.body, self.params)


class PendingEntry(BaseModel):
    """A registered in-flight request and its cancellation handle."""

    fingerprint: str
    token: CancelToken

    model_config = {"arbitrary_types_allowed": True, "frozen": True}
