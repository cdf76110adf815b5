"""
Live settings facade.

Exposes every declared key of a preference store as a live property::

    settings = LiveSettings(store)
    settings.startup()
    settings.add_listener(lambda key: print("changed", key))
    settings.retries = 3          # attribute access ('-' and '.' become '_')
    settings["show-icon"]         # mapping access by key
    settings.get("retries")

Reads come from the in-memory cache. Writes go through to the store and
notify listeners synchronously. Changes made to the store by anyone else
arrive through the store's change subscription and refresh the cache.
"""
from enum import Enum
from typing import Any, Dict, Iterator, List

from PySide6.QtCore import QObject, Signal

from livesettings.events.listeners import Listener, ListenerRegistry
from livesettings.logging.logger import get_logger
from livesettings.errors import StoreUnavailable, SubscriptionSetupFailure
from livesettings.settings.bindings import PropertyRegistry
from livesettings.settings.guard import WriteGuard
from livesettings.settings.store import PreferenceStore
from livesettings.settings.types import PreferenceType

logger = get_logger(__name__)


class SettingsState(Enum):
    """Lifecycle of a LiveSettings facade."""
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"


class SettingsSignals(QObject):
    """Qt-side notifications, emitted after the listener registry."""

    setting_changed = Signal(str)  # key


def attribute_name(key: str) -> str:
    """Return the attribute alias for ``key``."""
    return key.replace("-", "_").replace(".", "_")


class LiveSettings:
    """
    Facade exposing a store's declared keys as cached, observable properties.

    Each instance owns its listener registry and write guard, so several
    facades can run side by side over different stores.
    """

    def __init__(self, store: PreferenceStore):
        self._store = store
        self._guard = WriteGuard()
        self._listeners = ListenerRegistry()
        self._registry = PropertyRegistry(store, self._guard, self._notify)
        self._attr_keys: Dict[str, str] = {}
        self._state = SettingsState.UNINITIALIZED
        self._subscribed = False
        self.signals = SettingsSignals()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> SettingsState:
        return self._state

    @property
    def subscribed(self) -> bool:
        """False when startup could not subscribe to store changes."""
        return self._subscribed

    @property
    def guard(self) -> WriteGuard:
        return self._guard

    def startup(self) -> None:
        """Materialize a property per declared key and subscribe to changes."""
        if self._state is SettingsState.RUNNING:
            logger.warning("LiveSettings.startup() called twice; ignoring")
            return

        try:
            declared_keys = list(self._store.list_keys())
        except StoreUnavailable:
            logger.error("Failed to enumerate settings keys", exc_info=True)
            declared_keys = []

        for key, declared in declared_keys:
            pref_type = PreferenceType.classify(declared)
            if pref_type is None:
                logger.debug("Skipping %s: unsupported type %r", key, declared)
                continue
            try:
                self._registry.create(key, pref_type)
            except Exception:
                logger.error("Failed to bind setting %s", key, exc_info=True)
                continue
            self._register_attribute(key)

        try:
            self._store.subscribe_to_changes(self._on_store_changed)
            self._subscribed = True
        except SubscriptionSetupFailure:
            logger.error(
                "Failed to subscribe to settings changes; external changes will not be observed",
                exc_info=True,
            )

        self._state = SettingsState.RUNNING
        logger.info("LiveSettings started (%d properties)", len(self._registry))

    def shutdown(self) -> None:
        """Reserved for cleanup; the store subscription belongs to the host."""
        logger.debug("LiveSettings.shutdown()")

    # ------------------------------------------------------------------
    # Property access
    # ------------------------------------------------------------------

    def get(self, key: str) -> Any:
        """Return the cached value of ``key``.

        Raises:
            KeyError: if ``key`` has no property.
        """
        return self._registry.get(key)

    def set(self, key: str, value: Any) -> Any:
        """Set ``key`` and write it through to the store.

        Returns:
            The value held after the call.

        Raises:
            KeyError: if ``key`` has no property. Unknown keys are
                programming errors; store failures are logged instead.
        """
        return self._registry.set(key, value)

    def keys(self) -> List[str]:
        return self._registry.keys()

    def type_of(self, key: str) -> PreferenceType:
        binding = self._registry.binding(key)
        if binding is None:
            raise KeyError(key)
        return binding.pref_type

    def snapshot(self) -> Dict[str, Any]:
        """Return a copy of all cached values."""
        return self._registry.snapshot()

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._registry

    def __iter__(self) -> Iterator[str]:
        return iter(self._registry)

    def __len__(self) -> int:
        return len(self._registry)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails.
        attr_keys = self.__dict__.get("_attr_keys", {})
        if name in attr_keys:
            return self._registry.get(attr_keys[name])
        raise AttributeError(f"{type(self).__name__!s} has no setting {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        attr_keys = self.__dict__.get("_attr_keys")
        if attr_keys and name in attr_keys:
            self._registry.set(attr_keys[name], value)
        else:
            super().__setattr__(name, value)

    def _register_attribute(self, key: str) -> None:
        name = attribute_name(key)
        if (
            not name.isidentifier()
            or name.startswith("_")
            or hasattr(type(self), name)
            or name in self.__dict__
        ):
            logger.debug("Setting %s has no attribute alias; use get()/set()", key)
            return
        if name in self._attr_keys:
            logger.debug(
                "Setting %s has no attribute alias; %r already maps to %s",
                key, name, self._attr_keys[name],
            )
            return
        self._attr_keys[name] = key

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        """Register ``listener(key)`` for changes of any setting.

        Store and listener failures never escape; they are logged.

        Raises:
            ValueError: if ``listener`` is not callable. This is a
                programming error, not a runtime failure.
        """
        self._listeners.add(listener)

    def remove_listener(self, listener: Listener) -> None:
        """Unregister ``listener``; unknown listeners are ignored."""
        self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Notification plumbing
    # ------------------------------------------------------------------

    def _notify(self, key: str) -> None:
        self._listeners.dispatch(key)
        self.signals.setting_changed.emit(key)

    def _on_store_changed(self, key: str) -> None:
        if self._guard.raised:
            logger.debug("Ignoring store echo for %s during local write", key)
            return
        if key not in self._registry:
            return
        try:
            self._registry.refresh(key)
        except Exception:
            logger.error("Failed to refresh setting %s", key, exc_info=True)
