"""In-memory pending-request registry.

Thread Safety:
    The registry is mutated only from the event loop thread. Operations
    never await, so no interleaving can happen inside one of them.

Examples:
    Superseding an identical request::

        from request_pipeline.registry.memory import MemoryPendingRegistry

        registry = MemoryPendingRegistry()
        first = RequestDescriptor(method="GET", url="/users", params={"id": 2})
        second = RequestDescriptor(method="GET", url="/users", params={"id": 2})

        registry.add_pending(first)
        registry.add_pending(second)

        assert first.cancel_token.cancelled
        assert registry.count() == 1
"""

from request_pipeline.cancellation import CancelToken
from request_pipeline.models import PendingEntry, RequestDescriptor
from request_pipeline.observability.logging import get_logger
from request_pipeline.observability.metrics import record_cancellation, set_pending
from request_pipeline.registry.base import PendingRegistry

logger = get_logger(__name__)


class MemoryPendingRegistry(PendingRegistry):
    """Dictionary-backed pending registry.

    Attributes:
        _pending: Mapping of fingerprint to PendingEntry.
    """

    def __init__(self) -> None:
        self._pending: dict[str, PendingEntry] = {}

    def add_pending(self, descriptor: RequestDescriptor) -> CancelToken | None:
        """Register a cancellable request, superseding any identical one."""
        if not descriptor.cancellable:
            return None

        fingerprint = descriptor.fingerprint
        existing = self._pending.pop(fingerprint, None)
        if existing is not None:
            existing.token.cancel("superseded")
            record_cancellation("superseded")
            logger.info("request.superseded", fingerprint=fingerprint)

        token = CancelToken()
        descriptor.cancel_token = token
        self._pending[fingerprint] = PendingEntry(fingerprint=fingerprint, token=token)
        set_pending(len(self._pending))
        return token

    def remove_pending(self, descriptor: RequestDescriptor) -> bool:
        """Cancel and drop the entry for the descriptor's fingerprint."""
        fingerprint = descriptor.fingerprint
        entry = self._pending.get(fingerprint)
        if entry is None:
            return False

        if descriptor.cancel_token is not None and entry.token is not descriptor.cancel_token:
            return False

        entry.token.cancel("removed")
        del self._pending[fingerprint]
        set_pending(len(self._pending))
        return True

    def remove_all_pending(self) -> int:
        """Cancel every entry and clear the registry."""
        entries = list(self._pending.values())
        for entry in entries:
            entry.token.cancel("flushed")
        self._pending.clear()
        set_pending(0)

        if entries:
            record_cancellation("flushed", len(entries))
            logger.info("registry.flushed", cancelled=len(entries))
        return len(entries)

    def has_pending(self, descriptor: RequestDescriptor) -> bool:
        return descriptor.fingerprint in self._pending

    def count(self) -> int:
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._pending
