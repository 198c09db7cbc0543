"""Global loading-state bookkeeping.

The loading overlay is visible exactly while at least one request with
``show_loading`` enabled is outstanding. The counter shows the overlay on
the 0 -> 1 transition and hides it on 1 -> 0; it never goes negative.
"""

from request_pipeline.collaborators import LoadingIndicator, NullLoadingIndicator
from request_pipeline.observability.metrics import set_loading


class LoadingCounter:
    """Counts outstanding loading requests and drives the indicator.

    Attributes:
        indicator: The loading UI collaborator.
    """

    def __init__(self, indicator: LoadingIndicator | None = None) -> None:
        self.indicator = indicator if indicator is not None else NullLoadingIndicator()
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    @property
    def visible(self) -> bool:
        return self._count > 0

    def increment(self) -> None:
        """Register a loading request, showing the indicator if it is the first."""
        if self._count == 0:
            self.indicator.show()
        self._count += 1
        set_loading(self._count)

    def decrement(self) -> None:
        """Release a loading request, hiding the indicator after the last one.

        Extra calls at zero are ignored.
        """
        if self._count <= 0:
            return
        self._count -= 1
        set_loading(self._count)
        if self._count == 0:
            self.indicator.try_hide()
