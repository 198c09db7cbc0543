"""
Disciplined HTTP client pipeline.

This package wraps an httpx client with request deduplication and
cancellation, auth header injection, global loading-state bookkeeping and
uniform classification of network, HTTP and business failures.
"""

__version__ = "0.1.0"

from request_pipeline.config import PipelineConfig
from request_pipeline.core.pipeline import RequestPipeline
from request_pipeline.exceptions import (
    BusinessError,
    CancellationError,
    HttpStatusError,
    RequestPipelineError,
    SessionExpiredError,
    TransportError,
)
from request_pipeline.fingerprint import compute_fingerprint
from request_pipeline.loading import LoadingCounter
from request_pipeline.models import ClassifiedError, ErrorCategory, RequestDescriptor
from request_pipeline.registry import MemoryPendingRegistry
from request_pipeline.status import classify_status

__all__ = [
    "__version__",
    "PipelineConfig",
    "RequestPipeline",
    "RequestDescriptor",
    "ClassifiedError",
    "ErrorCategory",
    "LoadingCounter",
    "MemoryPendingRegistry",
    "compute_fingerprint",
    "classify_status",
    "RequestPipelineError",
    "TransportError",
    "HttpStatusError",
    "BusinessError",
    "SessionExpiredError",
    "CancellationError",
]
