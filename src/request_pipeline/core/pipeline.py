"""HTTP request pipeline.

This module wraps a single httpx.AsyncClient with the request discipline
every call goes through:

1. Request-transform stage: register the request in the pending registry
   (superseding an identical in-flight one), count it towards the loading
   indicator and inject the auth token header.
2. Transport: send the request, racing it against its cancel token.
3. Response-transform stage: release the registry entry and the loading
   count, then interpret the business envelope of 2xx responses or
   classify the failure.

Registry registration and loading increment are held in a scoped
acquisition, so they are released on every exit path, including failures
before the request reaches the transport.

Examples:
    Basic usage::

        from request_pipeline import PipelineConfig, RequestPipeline

        async with RequestPipeline(PipelineConfig(base_url="https://api.example.com")) as api:
            users = await api.get("/users", {"page": 1})
            await api.post("/users", {"name": "Alice"}, show_loading=False)
            report = await api.download("/reports/export", {"year": 2024})
"""

import asyncio
import json
import time
from collections.abc import Iterator, Mapping
from contextlib import ExitStack, contextmanager
from typing import Any

import httpx

from request_pipeline.collaborators import (
    HistoryNavigator,
    LogNotifier,
    MemorySessionStore,
    Navigator,
    Notifier,
    OnlineStatus,
    SessionStore,
    StaticOnlineStatus,
)
from request_pipeline.config import PipelineConfig
from request_pipeline.core.state_machine import transition
from request_pipeline.exceptions import (
    BusinessError,
    CancellationError,
    HttpStatusError,
    RequestPipelineError,
    SessionExpiredError,
    TransportError,
)
from request_pipeline.fingerprint import encode_pairs, serialize
from request_pipeline.loading import LoadingCounter
from request_pipeline.models import (
    ContentType,
    ErrorCategory,
    RequestDescriptor,
    RequestMethod,
    RequestState,
)
from request_pipeline.observability.logging import bind_request, get_logger
from request_pipeline.observability.metrics import record_duration, record_request
from request_pipeline.registry.base import PendingRegistry
from request_pipeline.registry.memory import MemoryPendingRegistry
from request_pipeline.status import (
    NETWORK_MESSAGE,
    TIMEOUT_MESSAGE,
    UNKNOWN_MESSAGE,
    classify_status,
)

logger = get_logger(__name__)


class RequestPipeline:
    """HTTP client applying cancellation, loading, auth and error discipline.

    Keep one long-lived instance per application and pass it to the code
    that issues requests. The registry and loading counter it owns are
    shared by every call made through it.

    Attributes:
        config: Pipeline configuration.
        registry: Pending-request registry.
        loading: Loading counter driving the loading indicator.
        notifier: User-facing error notifications.
        session: Auth token storage.
        navigator: Application router.
        online: Connectivity oracle.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        registry: PendingRegistry | None = None,
        loading: LoadingCounter | None = None,
        notifier: Notifier | None = None,
        session: SessionStore | None = None,
        navigator: Navigator | None = None,
        online: OnlineStatus | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration, defaults to PipelineConfig()
            registry: Pending registry, defaults to a fresh MemoryPendingRegistry
            loading: Loading counter, defaults to one without an indicator
            notifier: Error notifier, defaults to LogNotifier
            session: Session store, defaults to an empty MemorySessionStore
            navigator: Router, defaults to HistoryNavigator
            online: Connectivity oracle, defaults to always online
            transport: httpx transport for the owned client (ignored when
                ``client`` is given)
            client: Pre-built httpx client; the caller keeps ownership
        """
        self.config = config if config is not None else PipelineConfig()
        self.registry = registry if registry is not None else MemoryPendingRegistry()
        self.loading = loading if loading is not None else LoadingCounter()
        self.notifier = notifier if notifier is not None else LogNotifier()
        self.session = session if session is not None else MemorySessionStore()
        self.navigator = navigator if navigator is not None else HistoryNavigator()
        self.online = online if online is not None else StaticOnlineStatus()

        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
                follow_redirects=True,
                transport=transport,
            )
        self._client = client

    async def __aenter__(self) -> "RequestPipeline":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Cancel every pending request and close the owned client."""
        self.registry.remove_all_pending()
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Call shapes
    # ------------------------------------------------------------------

    async def get(self, url: str, params: Any = None, **options: Any) -> Any:
        """Send a GET request with ``params`` as the query string."""
        return await self.dispatch(
            RequestDescriptor(method=RequestMethod.GET, url=url, params=params, **options)
        )

    async def post(self, url: str, body: Any = None, **options: Any) -> Any:
        """Send a POST request with ``body`` as the payload."""
        return await self.dispatch(
            RequestDescriptor(method=RequestMethod.POST, url=url, body=body, **options)
        )

    async def put(self, url: str, body: Any = None, **options: Any) -> Any:
        """Send a PUT request with ``body`` as the payload."""
        return await self.dispatch(
            RequestDescriptor(method=RequestMethod.PUT, url=url, body=body, **options)
        )

    async def patch(self, url: str, body: Any = None, **options: Any) -> Any:
        """Send a PATCH request with ``body`` as the payload."""
        return await self.dispatch(
            RequestDescriptor(method=RequestMethod.PATCH, url=url, body=body, **options)
        )

    async def delete(self, url: str, params: Any = None, **options: Any) -> Any:
        """Send a DELETE request with ``params`` as the query string."""
        return await self.dispatch(
            RequestDescriptor(method=RequestMethod.DELETE, url=url, params=params, **options)
        )

    async def download(self, url: str, body: Any = None, **options: Any) -> bytes:
        """POST ``body`` and return the raw response bytes.

        The business envelope is not inspected; cancellation, loading and
        error handling are the same as for ``post``.
        """
        options["response_type"] = "blob"
        return await self.dispatch(
            RequestDescriptor(method=RequestMethod.POST, url=url, body=body, **options)
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def dispatch(self, descriptor: RequestDescriptor) -> Any:
        """Run a request through the full pipeline.

        Args:
            descriptor: The request to perform

        Returns:
            The decoded response body (bytes for blob responses)

        Raises:
            CancellationError: The request was superseded or aborted
            TransportError: Timeout or network failure
            HttpStatusError: Non-2xx HTTP status
            SessionExpiredError: Body code equals the session-expired code
            BusinessError: Body code is neither success nor session-expired
        """
        with bind_request(descriptor.method, descriptor.url, descriptor.fingerprint):
            return await self._run(descriptor)

    async def _run(self, descriptor: RequestDescriptor) -> Any:
        started = time.perf_counter()
        try:
            with self._in_flight(descriptor):
                self._inject_auth(descriptor)
                transition(descriptor, RequestState.DISPATCHED)
                logger.debug(
                    "request.dispatched",
                    cancellable=descriptor.cancellable,
                    show_loading=descriptor.show_loading,
                )
                response = await self._send(descriptor)
        except asyncio.CancelledError:
            # The caller's task was cancelled; settle so the outcome is recorded.
            error = CancellationError(
                f"Request {descriptor.method} {descriptor.url} was aborted",
                reason="aborted",
            )
            self._settle_error(descriptor, started, error, outcome="cancelled")
            raise
        except CancellationError as e:
            self._settle_error(descriptor, started, e, outcome="cancelled")
            raise
        except httpx.RequestError as e:
            raise self._on_transport_error(descriptor, started, e) from e
        except RequestPipelineError:
            raise
        except Exception:
            # Failure before or during dispatch that the transport did not
            # classify; cleanup already ran in _in_flight.
            transition(descriptor, RequestState.SETTLED_ERROR)
            logger.exception("request.aborted")
            raise

        if not response.is_success:
            raise self._on_http_error(descriptor, started, response)
        return self._on_response(descriptor, started, response)

    @contextmanager
    def _in_flight(self, descriptor: RequestDescriptor) -> Iterator[None]:
        """Hold the registry entry and loading count for one request."""
        with ExitStack() as stack:
            if descriptor.cancellable:
                self.registry.add_pending(descriptor)
                stack.callback(self.registry.remove_pending, descriptor)
            if descriptor.show_loading:
                self.loading.increment()
                stack.callback(self.loading.decrement)
            yield

    def _inject_auth(self, descriptor: RequestDescriptor) -> None:
        token = self.session.get_token()
        if token:
            descriptor.headers[self.config.token_header] = token

    async def _send(self, descriptor: RequestDescriptor) -> httpx.Response:
        """Send the request, aborting it if its cancel token fires first."""
        request = self._build_request(descriptor)
        sending = asyncio.ensure_future(self._client.send(request))

        token = descriptor.cancel_token
        if token is None:
            return await sending

        waiting = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({sending, waiting}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            sending.cancel()
            raise
        finally:
            waiting.cancel()

        if token.cancelled:
            sending.cancel()
            # Let the transport unwind; its outcome is stale either way.
            await asyncio.gather(sending, return_exceptions=True)
            raise CancellationError(
                f"Request {descriptor.method} {descriptor.url} was cancelled",
                reason=token.reason,
            )
        return sending.result()

    def _build_request(self, descriptor: RequestDescriptor) -> httpx.Request:
        params = descriptor.params
        if isinstance(params, (Mapping, list, tuple)):
            params = encode_pairs(params)
        kwargs: dict[str, Any] = {
            "params": params,
            "headers": descriptor.headers,
        }
        if descriptor.timeout is not None:
            kwargs["timeout"] = descriptor.timeout

        body = descriptor.body
        if isinstance(body, (bytes, str)):
            kwargs["content"] = body
        elif body is not None:
            content_type = next(
                (v for k, v in descriptor.headers.items() if k.lower() == "content-type"),
                "",
            )
            if content_type.startswith(ContentType.FORM_URLENCODED.value.split(";")[0]):
                # Same bracket encoding as the query string.
                kwargs["content"] = serialize(body)
            else:
                kwargs["json"] = body

        return self._client.build_request(descriptor.method, descriptor.url, **kwargs)

    # ------------------------------------------------------------------
    # Response-transform stage
    # ------------------------------------------------------------------

    def _on_response(
        self,
        descriptor: RequestDescriptor,
        started: float,
        response: httpx.Response,
    ) -> Any:
        """Interpret a 2xx response's business envelope."""
        if descriptor.response_type == "blob":
            self._settle_success(descriptor, started)
            return response.content

        payload = self._decode(response)
        code = payload.get(self.config.code_field) if isinstance(payload, dict) else None
        message = payload.get(self.config.message_field) if isinstance(payload, dict) else None

        if code is not None and code == self.config.session_expired_code:
            error = SessionExpiredError(
                message or classify_status(self.config.session_expired_code).message,
                code=code,
                payload=payload,
            )
            self.session.set_token("")
            self.navigator.replace(self.config.login_path)
            self.notifier.notify_error(error.message)
            logger.warning("session.expired", login_path=self.config.login_path)
            self._settle_error(descriptor, started, error)
            raise error

        if code and code != self.config.success_code:
            error = BusinessError(message or UNKNOWN_MESSAGE, code=code, payload=payload)
            self.notifier.notify_error(error.message)
            self._settle_error(descriptor, started, error)
            raise error

        self._settle_success(descriptor, started)
        return payload

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text

    def _on_http_error(
        self,
        descriptor: RequestDescriptor,
        started: float,
        response: httpx.Response,
    ) -> HttpStatusError:
        classified = classify_status(response.status_code)
        error = HttpStatusError(
            classified.message,
            classified.category,
            status=response.status_code,
            response=response,
        )
        self.notifier.notify_error(error.message)
        self._redirect_if_offline()
        self._settle_error(descriptor, started, error)
        return error

    def _on_transport_error(
        self,
        descriptor: RequestDescriptor,
        started: float,
        exc: httpx.RequestError,
    ) -> TransportError:
        text = str(exc)
        if isinstance(exc, httpx.TimeoutException) or "timeout" in text.lower():
            error = TransportError(TIMEOUT_MESSAGE, ErrorCategory.TIMEOUT, cause=exc)
        elif isinstance(exc, httpx.TransportError) or "Network Error" in text:
            error = TransportError(NETWORK_MESSAGE, ErrorCategory.NETWORK_ERROR, cause=exc)
        else:
            error = TransportError(UNKNOWN_MESSAGE, ErrorCategory.UNKNOWN, cause=exc)

        self.notifier.notify_error(error.message)
        self._redirect_if_offline()
        self._settle_error(descriptor, started, error)
        return error

    def _redirect_if_offline(self) -> None:
        if not self.online.is_online():
            self.navigator.replace(self.config.offline_path)

    def _settle_success(self, descriptor: RequestDescriptor, started: float) -> None:
        transition(descriptor, RequestState.SETTLED_SUCCESS)
        duration = time.perf_counter() - started
        record_request(descriptor.method, "success")
        record_duration(duration)
        logger.info(
            "request.settled",
            method=descriptor.method,
            url=descriptor.url,
            duration_ms=int(duration * 1000),
        )

    def _settle_error(
        self,
        descriptor: RequestDescriptor,
        started: float,
        error: RequestPipelineError,
        outcome: str = "error",
    ) -> None:
        transition(descriptor, RequestState.SETTLED_ERROR)
        duration = time.perf_counter() - started
        record_request(descriptor.method, outcome, error.category.value)
        record_duration(duration)
        logger.info(
            "request.cancelled" if outcome == "cancelled" else "request.failed",
            method=descriptor.method,
            url=descriptor.url,
            category=error.category.value,
            status=error.original_status,
            duration_ms=int(duration * 1000),
        )
