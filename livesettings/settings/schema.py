"""
JSON schema documents describing a settings namespace.

Format::

    {
        "namespace": "org.example.app",
        "keys": {
            "enabled": {"type": "bool", "default": false},
            "retries": {"type": "int"},
            "label":   "string"
        }
    }
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union
import json

from livesettings.logging.logger import get_logger
from livesettings.errors import SchemaError
from livesettings.settings.types import PreferenceType

logger = get_logger(__name__)


@dataclass
class SettingsSchema:
    """Namespace plus ``{key: (declared_type, default)}``."""
    namespace: str
    keys: Dict[str, Tuple[Any, Any]] = field(default_factory=dict)

    def as_store_schema(self) -> Dict[str, Tuple[Any, Any]]:
        return dict(self.keys)


def parse_schema(document: Mapping[str, Any]) -> SettingsSchema:
    """Validate a decoded schema document."""
    if not isinstance(document, Mapping):
        raise SchemaError(f"schema root must be an object, got {type(document).__name__}")

    namespace = document.get("namespace", "")
    if not isinstance(namespace, str):
        raise SchemaError("'namespace' must be a string")

    raw_keys = document.get("keys", {})
    if not isinstance(raw_keys, Mapping):
        raise SchemaError("'keys' must be an object")

    keys: Dict[str, Tuple[Any, Any]] = {}
    for name, entry in raw_keys.items():
        if isinstance(entry, str):
            keys[name] = (entry, None)
        elif isinstance(entry, Mapping) and isinstance(entry.get("type"), str):
            keys[name] = (entry["type"], _checked_default(name, entry["type"], entry.get("default")))
        else:
            raise SchemaError(f"key {name!r} needs a type string or {{'type': ...}} object")
    return SettingsSchema(namespace=namespace, keys=keys)


def _checked_default(name: str, declared: str, default: Any) -> Any:
    pref_type = PreferenceType.classify(declared)
    if pref_type is None or default is None:
        return default
    try:
        return pref_type.coerce(default)
    except (TypeError, ValueError) as e:
        raise SchemaError(f"default {default!r} of key {name!r} is not a {pref_type.value} value") from e


def load_schema(path: Union[str, Path]) -> SettingsSchema:
    """Read and validate a schema file."""
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise SchemaError(f"cannot read schema {path}: {e}") from e

    schema = parse_schema(document)
    logger.debug("Loaded schema %s (namespace=%s, keys=%d)", path, schema.namespace, len(schema.keys))
    return schema
