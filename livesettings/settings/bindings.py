"""
Property bindings between cached values and the preference store.

Each declared key gets one PropertyBinding holding its cached value plus a
reader and a writer bound to the store. Reads never touch the store; writes
go through the store under the write guard and notify synchronously; store
change notifications re-read the value through ``refresh``.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from livesettings.logging.logger import get_logger, is_verbose_logging
from livesettings.settings.guard import WriteGuard
from livesettings.settings.store import PreferenceStore
from livesettings.settings.types import PreferenceType

logger = get_logger(__name__)

Reader = Callable[[], Any]
Writer = Callable[[Any], None]
Notify = Callable[[str], None]


@dataclass
class PropertyBinding:
    """Cached value of one key with its store reader and writer."""
    key: str
    pref_type: PreferenceType
    reader: Reader
    writer: Writer
    notify: Notify
    guard: WriteGuard
    value: Any = field(default=None)

    def __post_init__(self):
        self.value = self.pref_type.default
        self.refresh(dispatch=False)

    def get(self) -> Any:
        return self.value

    def set(self, new_value: Any) -> Any:
        """
        Write a new value through to the store.

        Returns:
            The cached value after the call.
        """
        try:
            new_value = self.pref_type.coerce(new_value)
        except (TypeError, ValueError):
            logger.warning(
                "Ignoring %r for %s: not a %s value", new_value, self.key, self.pref_type.value
            )
            return self.value

        if new_value == self.value:
            return self.value

        with self.guard:
            try:
                self.writer(new_value)
            except Exception:
                # No rollback: the cache keeps the new value.
                logger.error("Failed to persist %s; keeping in-memory value", self.key, exc_info=True)
            old_value = self.value
            self.value = new_value
            if is_verbose_logging():
                logger.debug("Setting changed: %s: %r -> %r", self.key, old_value, new_value)
            else:
                logger.debug("Setting changed: %s", self.key)
            self.notify(self.key)
        return self.value

    def refresh(self, dispatch: bool = True) -> bool:
        """
        Re-read the value from the store.

        Returns:
            True if the read succeeded. A failed read keeps the previous
            cached value and does not notify.
        """
        try:
            value = self.reader()
        except Exception:
            logger.error("Failed to read %s; keeping cached value", self.key, exc_info=True)
            return False

        self.value = value
        if dispatch:
            logger.debug("Setting refreshed: %s", self.key)
            self.notify(self.key)
        return True


class PropertyRegistry:
    """Key to PropertyBinding mapping for one store."""

    def __init__(self, store: PreferenceStore, guard: WriteGuard, notify: Notify):
        self._store = store
        self._guard = guard
        self._notify = notify
        self._bindings: Dict[str, PropertyBinding] = {}

    def create(self, key: str, pref_type: PreferenceType) -> PropertyBinding:
        """Build the binding for ``key`` and populate it from the store."""
        store = self._store
        binding = PropertyBinding(
            key=key,
            pref_type=pref_type,
            reader=lambda: store.get(key, pref_type),
            writer=lambda value: store.set(key, pref_type, value),
            notify=self._notify,
            guard=self._guard,
        )
        self._bindings[key] = binding
        return binding

    def binding(self, key: str) -> Optional[PropertyBinding]:
        return self._bindings.get(key)

    def get(self, key: str) -> Any:
        return self._bindings[key].get()

    def set(self, key: str, value: Any) -> Any:
        return self._bindings[key].set(value)

    def refresh(self, key: str) -> bool:
        binding = self._bindings.get(key)
        if binding is None:
            return False
        return binding.refresh()

    def keys(self) -> List[str]:
        return list(self._bindings)

    def snapshot(self) -> Dict[str, Any]:
        return {key: binding.value for key, binding in self._bindings.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._bindings

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)
