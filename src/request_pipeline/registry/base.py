"""Pending-request registry protocol.

The registry maps request fingerprints to the cancellation handle of the
request currently in flight for that fingerprint. It owns the invariant
that at most one request per fingerprint is pending: registering a
fingerprint that is already present cancels the older request first.

Examples:
    Implementing a custom registry::

        from request_pipeline.registry.base import PendingRegistry

        class AuditedRegistry:
            def add_pending(self, descriptor):
                audit.record("add", descriptor.fingerprint)
                ...

    Using a registry::

        registry = MemoryPendingRegistry()
        token = registry.add_pending(descriptor)
        try:
            ...
        finally:
            registry.remove_pending(descriptor)

Concurrency Requirements:
    Operations are synchronous and run on the event loop thread, so they
    need no locking. Every code path that registers a request must also
    remove it once the request settles.
"""

from typing import Protocol, runtime_checkable

from request_pipeline.cancellation import CancelToken
from request_pipeline.models import RequestDescriptor


@runtime_checkable
class PendingRegistry(Protocol):
    """Protocol defining the pending-request registry operations."""

    def add_pending(self, descriptor: RequestDescriptor) -> CancelToken | None:
        """Register a cancellable request, superseding any identical one.

        Non-cancellable descriptors are ignored. Otherwise an existing entry
        with the same fingerprint is cancelled and removed, a fresh token is
        attached to ``descriptor.cancel_token`` and the new entry inserted.

        Returns:
            The new token, or None when the descriptor is not cancellable.
        """
        ...

    def remove_pending(self, descriptor: RequestDescriptor) -> bool:
        """Cancel and drop the entry for the descriptor's fingerprint.

        When the descriptor carries a token, only an entry holding that same
        token is removed, so a superseded request settling late never evicts
        its successor.

        Returns:
            True if an entry was removed.
        """
        ...

    def remove_all_pending(self) -> int:
        """Cancel every entry and clear the registry.

        Returns:
            The number of entries cancelled.
        """
        ...

    def has_pending(self, descriptor: RequestDescriptor) -> bool:
        """Return True if an entry exists for the descriptor's fingerprint."""
        ...

    def count(self) -> int:
        """Return the number of pending entries."""
        ...
