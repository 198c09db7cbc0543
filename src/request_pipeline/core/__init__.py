"""Core request-processing logic.

This package contains:
- Pipeline: the request-transform, transport and response-transform stages
- State machine: per-request transitions (CREATED -> DISPATCHED -> SETTLED)
"""

from request_pipeline.core.pipeline import RequestPipeline
from request_pipeline.core.state_machine import is_settled, transition

__all__ = ["RequestPipeline", "is_settled", "transition"]
