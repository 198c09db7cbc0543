"""Cooperative cancellation tokens.

A CancelToken is created by the pending registry for every cancellable
request. The registry keeps one reference so it can abort the request when
an identical one supersedes it; the pipeline keeps the other and races the
transport call against ``wait()``.

Examples:
    >>> token = CancelToken()
    >>> token.cancel("superseded")
    True
    >>> token.cancel("removed")
    False
    >>> token.reason
    'superseded'
"""

import asyncio


class CancelToken:
    """Idempotent cancellation signal for one in-flight request.

    Only the first ``cancel()`` takes effect; later calls are no-ops, so a
    request that already settled may be re-cancelled harmlessly.

    Attributes:
        reason: Why the token was cancelled, None while still live.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        """True once ``cancel()`` has been called."""
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> bool:
        """Signal cancellation.

        Args:
            reason: Short label recorded on the first call.

        Returns:
            True if this call cancelled the token, False if it was already
            cancelled.
        """
        if self._event.is_set():
            return False
        self.reason = reason
        self._event.set()
        return True

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

    def __repr__(self) -> str:
        state = f"cancelled:{self.reason}" if self.cancelled else "live"
        return f"<CancelToken {state}>"
