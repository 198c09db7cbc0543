"""Prometheus metrics for the request pipeline.

Metrics include:

- Request counters by method, outcome and error category
- Request duration histogram
- Pending-registry and loading gauges
- Cancellation counter by reason

Examples:
    Recording a settled request::

        from request_pipeline.observability.metrics import record_request

        record_request(method="GET", outcome="success")

    Recording a business failure::

        record_request(method="POST", outcome="error", category="BusinessError")
"""

from prometheus_client import Counter, Gauge, Histogram

# Labels: method, outcome (success, error, cancelled), category
requests_total = Counter(
    "request_pipeline_requests_total",
    "Total number of requests settled by the request pipeline",
    ["method", "outcome", "category"],
)

request_duration_seconds = Histogram(
    "request_pipeline_request_duration_seconds",
    "Time from dispatch to settlement in seconds",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
)

pending_requests = Gauge(
    "request_pipeline_pending_requests",
    "Number of cancellable requests currently held in the pending registry",
)

loading_requests = Gauge(
    "request_pipeline_loading_requests",
    "Number of outstanding requests that keep the loading indicator visible",
)

# Labels: reason (superseded, removed, flushed)
cancellations_total = Counter(
    "request_pipeline_cancellations_total",
    "Total number of cancellation handles invoked",
    ["reason"],
)


def record_request(method: str, outcome: str, category: str = "") -> None:
    """Record a settled request.

    Args:
        method: Upper-case HTTP method
        outcome: One of "success", "error", "cancelled"
        category: ErrorCategory value for failures, empty for successes

    Examples:
        >>> record_request("GET", "success")
        >>> record_request("POST", "error", "NotFound")
    """
    requests_total.labels(method=method, outcome=outcome, category=category).inc()


def record_duration(duration_seconds: float) -> None:
    """Record the dispatch-to-settlement duration of a request."""
    request_duration_seconds.observe(duration_seconds)


def set_pending(count: int) -> None:
    """Publish the current size of the pending registry."""
    pending_requests.set(count)


def set_loading(count: int) -> None:
    """Publish the current value of the loading counter."""
    loading_requests.set(count)


def record_cancellation(reason: str, count: int = 1) -> None:
    """Record invoked cancellation handles.

    Args:
        reason: Why the handles fired (superseded, removed, flushed)
        count: Number of handles invoked
    """
    cancellations_total.labels(reason=reason).inc(count)
