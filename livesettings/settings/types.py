"""
Preference types and value coercion.
"""
from enum import Enum
from typing import Any, Optional


class PreferenceType(Enum):
    """Declared type of a preference key."""
    INTEGER = "int"
    BOOLEAN = "bool"
    STRING = "string"

    @property
    def default(self) -> Any:
        """Type default used before the first successful read."""
        return _TYPE_DEFAULTS[self]

    def coerce(self, value: Any) -> Any:
        """Convert ``value`` to this type.

        Raises:
            TypeError, ValueError: when the value has no sensible
                representation in this type.
        """
        if self is PreferenceType.BOOLEAN:
            if isinstance(value, (bool, int, str)) or value is None:
                result = to_bool(value, default=None)
                if result is not None:
                    return result
            raise ValueError(f"cannot interpret {value!r} as a boolean")
        if self is PreferenceType.INTEGER:
            if isinstance(value, bool):
                # bool is a subclass of int; preserve intent.
                return int(value)
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"{value!r} is not an integral value")
            return int(value)
        if value is None:
            raise TypeError("None is not a string value")
        return str(value)

    @classmethod
    def classify(cls, declared: Any) -> Optional['PreferenceType']:
        """Map a declared schema type to a member, or None if unsupported."""
        if isinstance(declared, PreferenceType):
            return declared
        if isinstance(declared, type):
            return _PYTHON_TYPES.get(declared)
        if isinstance(declared, str):
            return _TYPE_NAMES.get(declared.strip().lower())
        return None


_TYPE_DEFAULTS = {
    PreferenceType.INTEGER: 0,
    PreferenceType.BOOLEAN: False,
    PreferenceType.STRING: "",
}

_PYTHON_TYPES = {
    int: PreferenceType.INTEGER,
    bool: PreferenceType.BOOLEAN,
    str: PreferenceType.STRING,
}

_TYPE_NAMES = {
    "int": PreferenceType.INTEGER,
    "integer": PreferenceType.INTEGER,
    "i": PreferenceType.INTEGER,
    "bool": PreferenceType.BOOLEAN,
    "boolean": PreferenceType.BOOLEAN,
    "b": PreferenceType.BOOLEAN,
    "str": PreferenceType.STRING,
    "string": PreferenceType.STRING,
    "s": PreferenceType.STRING,
}


def to_bool(value: Any, default: Optional[bool] = False) -> Optional[bool]:
    """Normalize a stored setting value to bool.

    Accepts common string forms ("true", "1", "yes", "on") as True and
    ("false", "0", "no", "off") as False. Falls back to the provided default
    when the value cannot be interpreted.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.strip().lower()
        if v in ("true", "1", "yes", "on"):
            return True
        if v in ("false", "0", "no", "off"):
            return False
        return default
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return bool(value)
    return default
