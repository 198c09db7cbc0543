"""Interfaces to the application services the pipeline talks to.

The pipeline never renders anything or owns session state itself. It calls
out to five narrow collaborators:

- Notifier: shows an error message to the user
- LoadingIndicator: shows and hides the global loading overlay
- SessionStore: holds the auth token
- Navigator: replaces the current route
- OnlineStatus: reports whether the client has connectivity

Each protocol ships with a small default implementation usable in
headless applications and tests.
"""

from typing import Protocol, runtime_checkable

from request_pipeline.observability.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Notifier(Protocol):
    """Fire-and-forget user-facing error messages."""

    def notify_error(self, message: str) -> None: ...


@runtime_checkable
class LoadingIndicator(Protocol):
    """Global loading overlay.

    ``try_hide()`` is only called when no request still needs the overlay.
    """

    def show(self) -> None: ...

    def try_hide(self) -> None: ...


@runtime_checkable
class SessionStore(Protocol):
    """Storage for the current auth token; empty string means no session."""

    def get_token(self) -> str: ...

    def set_token(self, token: str) -> None: ...


@runtime_checkable
class Navigator(Protocol):
    """Application router."""

    def replace(self, path: str) -> None: ...


@runtime_checkable
class OnlineStatus(Protocol):
    """Connectivity oracle."""

    def is_online(self) -> bool: ...


class LogNotifier(Notifier):
    """Notifier that writes messages to the structured log."""

    def notify_error(self, message: str) -> None:
        logger.warning("notify.error", message=message)


class NullLoadingIndicator(LoadingIndicator):
    """Loading indicator for applications without a loading overlay."""

    def show(self) -> None:
        pass

    def try_hide(self) -> None:
        pass


class MemorySessionStore(SessionStore):
    """Session store holding the token in memory."""

    def __init__(self, token: str = "") -> None:
        self._token = token

    def get_token(self) -> str:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token


class HistoryNavigator(Navigator):
    """Navigator that records every route it is asked to replace.

    Attributes:
        history: Paths passed to ``replace()``, oldest first.
    """

    def __init__(self, initial: str = "/") -> None:
        self.history: list[str] = []
        self.current = initial

    def replace(self, path: str) -> None:
        logger.info("navigation.replace", path=path, previous=self.current)
        self.history.append(path)
        self.current = path


class StaticOnlineStatus(OnlineStatus):
    """Online status fixed at construction, togglable via ``online``."""

    def __init__(self, online: bool = True) -> None:
        self.online = online

    def is_online(self) -> bool:
        return self.online
