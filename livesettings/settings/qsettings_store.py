"""
QSettings-backed preference store.

Keys live under a fixed namespace group (``<namespace>/<key>``) of a
QSettings file. Writes made through this store are echoed synchronously on
``signals.changed``; writes made by other processes are picked up by
watching the settings file and diffing the namespace against a snapshot.
"""
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from PySide6.QtCore import QFileSystemWatcher, QObject, QSettings, Signal

from livesettings.logging.logger import get_logger, is_verbose_logging
from livesettings.errors import StoreUnavailable, SubscriptionSetupFailure
from livesettings.settings.store import ChangeHandler, PreferenceStore, normalize_schema, schema_default
from livesettings.settings.types import PreferenceType

logger = get_logger(__name__)


class _StoreSignals(QObject):
    changed = Signal(str)  # key


class QSettingsStore(PreferenceStore):
    """
    Preference store on top of QSettings.

    The schema maps each key to its declared type, optionally paired with a
    default: ``{"enabled": ("bool", False), "retries": "int"}``.
    """

    def __init__(
        self,
        schema: Mapping[str, Any],
        namespace: str = "",
        organization: str = "livesettings",
        application: str = "livesettings",
        settings: Optional[QSettings] = None,
        watch_file: bool = True,
    ):
        """
        Args:
            schema: Declared keys and their types.
            namespace: Group prefix scoping the keys inside the settings file.
            organization: Organization name for QSettings.
            application: Application name for QSettings.
            settings: Use this QSettings instead of creating one.
            watch_file: Watch the settings file for writes by other processes.
        """
        self._settings = settings if settings is not None else QSettings(organization, application)
        self._namespace = namespace.strip("/")
        self._schema = normalize_schema(schema)
        self._watch_file = watch_file
        self._watcher: Optional[QFileSystemWatcher] = None
        self.signals = _StoreSignals()
        self._snapshot: Dict[str, Any] = {key: self._normalized(key) for key in self._schema}

        logger.info(
            "QSettingsStore initialized (file=%s, namespace=%s, keys=%d)",
            self._settings.fileName(),
            self._namespace or "<root>",
            len(self._schema),
        )

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def settings(self) -> QSettings:
        return self._settings

    def file_name(self) -> str:
        """Return the backing settings file (or registry path)."""
        return self._settings.fileName()

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
        return [(key, declared) for key, (declared, _default) in self._schema.items()]

    # ------------------------------------------------------------------
    # Change notifications
    # ------------------------------------------------------------------

    def subscribe_to_changes(self, handler: ChangeHandler) -> None:
        self.signals.changed.connect(handler)
        if not self._watch_file or self._watcher is not None:
            return
        path = Path(self._settings.fileName())
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SubscriptionSetupFailure(f"cannot create settings directory {path.parent}: {e}") from e

        watcher = QFileSystemWatcher()
        if not watcher.addPath(str(path.parent)):
            watcher.deleteLater()
            raise SubscriptionSetupFailure(f"cannot watch settings location {path.parent}")
        if path.exists():
            watcher.addPath(str(path))
        watcher.fileChanged.connect(self._on_file_changed)
        watcher.directoryChanged.connect(self._on_directory_changed)
        self._watcher = watcher
        logger.debug("Watching %s for external changes", path)

    def check_external_changes(self) -> List[str]:
        """Reload the settings file and emit ``changed`` for differing keys.

        Returns:
            The keys whose value differed from the last known snapshot.
        """
        self._settings.sync()
        changed: List[str] = []
        for key in self._schema:
            current = self._normalized(key)
            if current != self._snapshot.get(key):
                self._snapshot[key] = current
                changed.append(key)
        for key in changed:
            logger.debug("External change detected: %s", key)
            self.signals.changed.emit(key)
        return changed

    def _on_file_changed(self, path: str) -> None:
        # Atomic saves replace the file, which drops it from the watcher.
        if self._watcher is not None and path not in self._watcher.files() and Path(path).exists():
            self._watcher.addPath(path)
        self.check_external_changes()

    def _on_directory_changed(self, _path: str) -> None:
        path = self._settings.fileName()
        if self._watcher is None or not Path(path).exists():
            return
        if path not in self._watcher.files():
            self._watcher.addPath(path)
            self.check_external_changes()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _qualified(self, key: str) -> str:
        return f"{self._namespace}/{key}" if self._namespace else key

    def _missing_value(self, key: str, pref_type: PreferenceType) -> Any:
        if key not in self._schema:
            return pref_type.default
        declared, default = self._schema[key]
        try:
            return schema_default(declared, default)
        except (TypeError, ValueError) as e:
            raise StoreUnavailable(key, f"schema default {default!r} is not {pref_type.value}") from e

    def _read(self, key: str, pref_type: PreferenceType) -> Any:
        if self._settings.status() != QSettings.Status.NoError:
            raise StoreUnavailable(key, f"settings status {self._settings.status()}")
        raw = self._settings.value(self._qualified(key), None)
        if raw is None:
            return self._missing_value(key, pref_type)
        try:
            return pref_type.coerce(raw)
        except (TypeError, ValueError) as e:
            raise StoreUnavailable(key, f"stored value {raw!r} is not {pref_type.value}") from e

    def _write(self, key: str, pref_type: PreferenceType, value: Any) -> None:
        if not self._settings.isWritable():
            raise StoreUnavailable(key, "settings file is not writable")
        value = pref_type.coerce(value)
        self._settings.setValue(self._qualified(key), value)
        # QSettings keeps the value in memory even if sync fails.
        self._snapshot[key] = value
        self._settings.sync()
        if self._settings.status() != QSettings.Status.NoError:
            raise StoreUnavailable(key, f"write failed with status {self._settings.status()}")

        if is_verbose_logging():
            logger.debug("QSettings write: %s=%r", key, value)
        else:
            logger.debug("QSettings write: %s", key)
        self.signals.changed.emit(key)

    def _normalized(self, key: str) -> Any:
        declared, default = self._schema[key]
        pref_type = PreferenceType.classify(declared)
        raw = self._settings.value(self._qualified(key), None)
        if pref_type is None:
            return raw
        if raw is None:
            try:
                return self._missing_value(key, pref_type)
            except StoreUnavailable:
                return default
        try:
            return pref_type.coerce(raw)
        except (TypeError, ValueError):
            return raw
