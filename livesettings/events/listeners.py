"""
Listener registry for settings change notifications.

Listeners are plain callables taking the changed key. They are kept in
registration order, deduplicated by identity, and isolated from each other
during dispatch: a failing listener is logged and the rest still run.
"""
from typing import Callable, List
import threading

from livesettings.logging.logger import get_logger
from livesettings.errors import ListenerFailure

logger = get_logger(__name__)

Listener = Callable[[str], None]


class ListenerRegistry:
    """Ordered, identity-deduplicated collection of change listeners."""

    def __init__(self):
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    def add(self, listener: Listener) -> None:
        """
        Register a listener. Adding the same callable twice is a no-op.

        Raises:
            ValueError: If listener is not callable (a programming error,
                raised rather than logged)
        """
        if not callable(listener):
            raise ValueError("Listener must be callable")

        with self._lock:
            if any(existing is listener for existing in self._listeners):
                return
            self._listeners.append(listener)

        logger.debug("Listener added: %r (total=%d)", listener, len(self._listeners))

    def remove(self, listener: Listener) -> None:
        """Unregister a listener; unknown listeners are ignored."""
        with self._lock:
            for index, existing in enumerate(self._listeners):
                if existing is listener:
                    del self._listeners[index]
                    break
            else:
                return

        logger.debug("Listener removed: %r (total=%d)", listener, len(self._listeners))

    def dispatch(self, key: str) -> int:
        """
        Call every listener with ``key`` in registration order.

        Returns:
            Number of listeners that failed.
        """
        with self._lock:
            listeners = list(self._listeners)

        failures = 0
        for listener in listeners:
            try:
                listener(key)
            except Exception:
                failures += 1
                logger.error("%s", ListenerFailure(key, listener), exc_info=True)
        return failures

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        with self._lock:
            return any(existing is listener for existing in self._listeners)
