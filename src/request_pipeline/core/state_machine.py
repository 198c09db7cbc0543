"""Per-request lifecycle state machine.

Each request moves through:

    CREATED -> DISPATCHED -> SETTLED_SUCCESS | SETTLED_ERROR

A failure in the request-transform stage settles straight from CREATED to
SETTLED_ERROR. Settled states are terminal, which is what guarantees a
request settles exactly once: a second settlement raises
InvalidTransitionError instead of silently overwriting the first outcome.

Examples:
    >>> descriptor = RequestDescriptor(method="GET", url="/users")
    >>> transition(descriptor, RequestState.DISPATCHED)
    >>> transition(descriptor, RequestState.SETTLED_SUCCESS)
    >>> is_settled(descriptor)
    True
"""

from request_pipeline.exceptions import InvalidTransitionError
from request_pipeline.models import RequestDescriptor, RequestState

ALLOWED_TRANSITIONS: dict[RequestState, frozenset[RequestState]] = {
    RequestState.CREATED: frozenset({RequestState.DISPATCHED, RequestState.SETTLED_ERROR}),
    RequestState.DISPATCHED: frozenset(
        {RequestState.SETTLED_SUCCESS, RequestState.SETTLED_ERROR}
    ),
    RequestState.SETTLED_SUCCESS: frozenset(),
    RequestState.SETTLED_ERROR: frozenset(),
}


def transition(descriptor: RequestDescriptor, target: RequestState) -> None:
    """Advance a request to ``target``.

    Args:
        descriptor: The request being advanced
        target: The state to enter

    Raises:
        InvalidTransitionError: If ``target`` is not reachable from the
            descriptor's current state
    """
    current = descriptor.state
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(current, target)
    descriptor.state = target


def is_settled(descriptor: RequestDescriptor) -> bool:
    """Return True once the request has resolved or rejected."""
    return descriptor.state in (RequestState.SETTLED_SUCCESS, RequestState.SETTLED_ERROR)
