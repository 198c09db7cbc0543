"""
Pytest configuration and shared fixtures for request_pipeline tests.
"""

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from hypothesis import HealthCheck, settings

from request_pipeline.collaborators import (
    HistoryNavigator,
    MemorySessionStore,
    StaticOnlineStatus,
)
from request_pipeline.config import PipelineConfig
from request_pipeline.core.pipeline import RequestPipeline
from request_pipeline.loading import LoadingCounter
from request_pipeline.registry.memory import MemoryPendingRegistry

# Strategy warm-up (unicode category tables) can trip the timing-based
# health check on a cold run; it says nothing about the code under test.
settings.register_profile("default", suppress_health_check=[HealthCheck.too_slow])
settings.load_profile("default")


class RecordingNotifier:
    """Notifier that keeps every message it was asked to show."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify_error(self, message: str) -> None:
        self.messages.append(message)


class RecordingIndicator:
    """Loading indicator that records show/hide calls."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.visible = False

    def show(self) -> None:
        self.calls.append("show")
        self.visible = True

    def try_hide(self) -> None:
        self.calls.append("hide")
        self.visible = False


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def indicator() -> RecordingIndicator:
    return RecordingIndicator()


@pytest.fixture
def session() -> MemorySessionStore:
    return MemorySessionStore(token="token-abc")


@pytest.fixture
def navigator() -> HistoryNavigator:
    return HistoryNavigator()


@pytest.fixture
def online() -> StaticOnlineStatus:
    return StaticOnlineStatus(online=True)


@pytest.fixture
def registry() -> MemoryPendingRegistry:
    return MemoryPendingRegistry()


@pytest.fixture
def loading(indicator: RecordingIndicator) -> LoadingCounter:
    return LoadingCounter(indicator)


@pytest.fixture
def make_pipeline(
    registry: MemoryPendingRegistry,
    loading: LoadingCounter,
    notifier: RecordingNotifier,
    session: MemorySessionStore,
    navigator: HistoryNavigator,
    online: StaticOnlineStatus,
) -> Callable[..., RequestPipeline]:
    """Build a pipeline wired to the recording collaborators.

    Pass either ``handler`` (wrapped in httpx.MockTransport) or ``transport``.
    """

    def factory(
        handler: Callable[[httpx.Request], Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **config: Any,
    ) -> RequestPipeline:
        if transport is None and handler is not None:
            transport = httpx.MockTransport(handler)
        return RequestPipeline(
            PipelineConfig(base_url="http://testserver", **config),
            registry=registry,
            loading=loading,
            notifier=notifier,
            session=session,
            navigator=navigator,
            online=online,
            transport=transport,
        )

    return factory

