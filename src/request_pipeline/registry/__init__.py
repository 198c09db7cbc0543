"""Pending-request registries.

All registries implement the PendingRegistry protocol defined in base.py.

Available Registries:
    - MemoryPendingRegistry: Process-local dictionary registry
"""

from request_pipeline.registry.base import PendingRegistry
from request_pipeline.registry.memory import MemoryPendingRegistry

__all__ = [
    "PendingRegistry",
    "MemoryPendingRegistry",
]
