"""Custom exceptions for the request pipeline.

Every failed call rejects with a subclass of RequestPipelineError, so
callers can branch on the exception type or on ``error.category``:

- TransportError: timeout or network failure, no response received
- HttpStatusError: non-2xx HTTP status
- BusinessError: 2xx response whose body carries a non-success code
- SessionExpiredError: body code equals the session-expired sentinel
- CancellationError: request superseded or explicitly aborted

Examples:
    Ignoring superseded requests::

        from request_pipeline.exceptions import CancellationError, RequestPipelineError

        try:
            users = await pipeline.get("/users", {"page": 2})
        except CancellationError:
            return  # a newer identical request is in flight
        except RequestPipelineError as e:
            logger.warning("request.failed", category=e.category.value)
            raise
"""

from typing import Any

import httpx

from request_pipeline.models import ClassifiedError, ErrorCategory, RequestState


class RequestPipelineError(Exception):
    """Base exception for all request pipeline errors.

    Attributes:
        message: Human-readable error description.
        category: Failure category.
        original_status: HTTP or business status code, if any.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        original_status: int | None = None,
    ) -> None:
        self.message = message
        self.category = category
        self.original_status = original_status
        super().__init__(message)

    @property
    def classified(self) -> ClassifiedError:
        """The failure as a ClassifiedError record."""
        return ClassifiedError(
            category=self.category,
            message=self.message,
            original_status=self.original_status,
        )


class TransportError(RequestPipelineError):
    """No response was received: the transport timed out or the network failed.

    Attributes:
        cause: The transport exception.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, category)
        self.cause = cause


class HttpStatusError(RequestPipelineError):
    """The server answered with a non-2xx HTTP status.

    Attributes:
        response: The httpx response.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        status: int,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(message, category, status)
        self.response = response


class BusinessError(RequestPipelineError):
    """The transport succeeded but the body reports a failure code.

    Attributes:
        payload: The decoded response body.
    """

    def __init__(self, message: str, code: int | None, payload: Any = None) -> None:
        super().__init__(message, ErrorCategory.BUSINESS_ERROR, code)
        self.payload = payload


class SessionExpiredError(RequestPipelineError):
    """The body reports that the caller's session is no longer valid.

    Attributes:
        payload: The decoded response body.
    """

    def __init__(self, message: str, code: int, payload: Any = None) -> None:
        super().__init__(message, ErrorCategory.UNAUTHORIZED, code)
        self.payload = payload


class CancellationError(RequestPipelineError):
    """The request was aborted before it settled.

    Attributes:
        reason: Cancellation reason recorded on the token.
        superseded: True when a newer identical request replaced this one.
    """

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message, ErrorCategory.UNKNOWN)
        self.reason = reason

    @property
    def superseded(self) -> bool:
        return self.reason == "superseded"


class InvalidTransitionError(RequestPipelineError):
    """A request tried to move to a state not reachable from its current one.

    Attributes:
        current: State the request was in.
        target: State it tried to enter.
    """

    def __init__(self, current: RequestState, target: RequestState) -> None:
        super().__init__(f"Invalid request transition {current.value} -> {target.value}")
        self.current = current
        self.target = target
