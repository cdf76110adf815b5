"""
Error taxonomy for the settings layer.

None of these escape a property get/set: the layer catches them at the
boundary, logs them and carries on with the in-memory value.
"""
from typing import Any, Callable, Optional


class SettingsError(Exception):
    """Base class for settings layer failures."""


class StoreUnavailable(SettingsError):
    """The persistent store could not service a read or write for a key."""

    def __init__(self, key: Optional[str], message: str = "store unavailable"):
        self.key = key
        if key is None:
            super().__init__(message)
        else:
            super().__init__(f"{message} (key={key!r})")


class ListenerFailure(SettingsError):
    """A change listener raised while being dispatched."""

    def __init__(self, key: str, listener: Callable[[str], Any]):
        self.key = key
        self.listener = listener
        name = getattr(listener, '__qualname__', None) or repr(listener)
        super().__init__(f"listener {name} failed for key {key!r}")


class SubscriptionSetupFailure(SettingsError):
    """Change notifications from the store could not be subscribed to."""


class SchemaError(SettingsError):
    """A settings schema document is malformed."""
