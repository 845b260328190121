"""Where the client sends the user once the session cannot be renewed."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Navigator(Protocol):
    """Performs a hard navigation to a location, discarding in-memory state."""

    def redirect(self, location: str) -> None: ...  # noqa: D102


class LoggingNavigator:
    """Default navigator for headless use.

    Logs the forced logout and forwards the target location to any registered
    listeners (for example a UI shell that swaps to its login screen).
    """

    def __init__(self, *listeners: Callable[[str], None]):
        self._listeners = list(listeners)
        self.history: list[str] = []

    def add_listener(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def redirect(self, location: str) -> None:
        logger.warning("Session ended; redirecting to %s", location)
        self.history.append(location)
        for listener in self._listeners:
            listener(location)
