"""
Store adapter contract for the settings layer.

A store is a typed key-value backend scoped to one namespace. The settings
facade only talks to it through this interface, so any persistent backend
(QSettings, an in-memory dict, ...) can sit underneath.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from livesettings.logging.logger import get_logger, is_verbose_logging
from livesettings.errors import StoreUnavailable
from livesettings.settings.types import PreferenceType

logger = get_logger(__name__)

ChangeHandler = Callable[[str], None]


class PreferenceStore(ABC):
    """Typed key-value store with change notifications."""

    @abstractmethod
    def get_int(self, key: str) -> int:
        ...

    @abstractmethod
    def set_int(self, key: str, value: int) -> None:
        ...

    @abstractmethod
    def get_bool(self, key: str) -> bool:
        ...

    @abstractmethod
    def set_bool(self, key: str, value: bool) -> None:
        ...

    @abstractmethod
    def get_string(self, key: str) -> str:
        ...

    @abstractmethod
    def set_string(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def list_keys(self) -> List[Tuple[str, Any]]:
        """Return ``(key, declared_type)`` pairs for every declared key."""

    @abstractmethod
    def subscribe_to_changes(self, handler: ChangeHandler) -> None:
        """Call ``handler(key)`` whenever a key in the namespace changes.

        Raises:
            SubscriptionSetupFailure: if notifications cannot be delivered.
        """

    def get(self, key: str, pref_type: PreferenceType) -> Any:
        """Read ``key`` using the getter for ``pref_type``."""
        if pref_type is PreferenceType.INTEGER:
            return self.get_int(key)
        if pref_type is PreferenceType.BOOLEAN:
            return self.get_bool(key)
        return self.get_string(key)

    def set(self, key: str, pref_type: PreferenceType, value: Any) -> None:
        """Write ``key`` using the setter for ``pref_type``."""
        if pref_type is PreferenceType.INTEGER:
            self.set_int(key, value)
        elif pref_type is PreferenceType.BOOLEAN:
            self.set_bool(key, value)
        else:
            self.set_string(key, value)


def normalize_schema(schema: Mapping[str, Any]) -> Dict[str, Tuple[Any, Any]]:
    """Normalize ``{key: type}`` / ``{key: (type, default)}`` to pairs."""
    normalized: Dict[str, Tuple[Any, Any]] = {}
    for key, entry in schema.items():
        if isinstance(entry, tuple):
            declared, default = entry
        else:
            declared, default = entry, None
        normalized[str(key)] = (declared, default)
    return normalized


def schema_default(declared: Any, default: Any) -> Any:
    """Resolve the value a missing key reads back as."""
    pref_type = PreferenceType.classify(declared)
    if pref_type is None:
        return default
    if default is None:
        return pref_type.default
    return pref_type.coerce(default)


class MemoryStore(PreferenceStore):
    """
    Dict-backed store.

    Every write notifies subscribers synchronously, the same way a store
    echoes a write back to its own process. ``available`` can be switched
    off to make every read and write raise StoreUnavailable.
    """

    def __init__(self, schema: Mapping[str, Any], values: Optional[Mapping[str, Any]] = None):
        self._schema = normalize_schema(schema)
        self._values: Dict[str, Any] = {}
        self._handlers: List[ChangeHandler] = []
        self.available = True
        for key, value in (values or {}).items():
            self._values[key] = value

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def get_int(self, key: str) -> int:
        return self._read(key, PreferenceType.INTEGER)

    def set_int(self, key: str, value: int) -> None:
        self._write(key, PreferenceType.INTEGER, value)

    def get_bool(self, key: str) -> bool:
        return self._read(key, PreferenceType.BOOLEAN)

    def set_bool(self, key: str, value: bool) -> None:
        self._write(key, PreferenceType.BOOLEAN, value)

    def get_string(self, key: str) -> str:
        return self._read(key, PreferenceType.STRING)

    def set_string(self, key: str, value: str) -> None:
        self._write(key, PreferenceType.STRING, value)

    def list_keys(self) -> List[Tuple[str, Any]]:
        if not self.available:
            raise StoreUnavailable(None, "cannot enumerate keys")
        return [(key, declared) for key, (declared, _default) in self._schema.items()]

    def subscribe_to_changes(self, handler: ChangeHandler) -> None:
        self._handlers.append(handler)

    # ------------------------------------------------------------------
    # External writers
    # ------------------------------------------------------------------

    def write_external(self, key: str, value: Any) -> None:
        """Store ``value`` as another process would, then notify."""
        self._values[key] = value
        self._notify(key)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read(self, key: str, pref_type: PreferenceType) -> Any:
        if not self.available:
            raise StoreUnavailable(key, "read failed")
        try:
            if key in self._values:
                raw = self._values[key]
            elif key in self._schema:
                raw = schema_default(*self._schema[key])
            else:
                raw = pref_type.default
            return pref_type.coerce(raw)
        except (TypeError, ValueError) as e:
            raise StoreUnavailable(key, f"stored value is not {pref_type.value}") from e

    def _write(self, key: str, pref_type: PreferenceType, value: Any) -> None:
        if not self.available:
            raise StoreUnavailable(key, "write failed")
        self._values[key] = pref_type.coerce(value)
        if is_verbose_logging():
            logger.debug("Memory store write: %s=%r", key, value)
        self._notify(key)

    def _notify(self, key: str) -> None:
        for handler in list(self._handlers):
            handler(key)
