"""Settings layer: stores, bindings and the live settings facade."""

from .types import PreferenceType, to_bool
from .guard import WriteGuard
from .store import MemoryStore, PreferenceStore
from .qsettings_store import QSettingsStore
from .bindings import PropertyBinding, PropertyRegistry
from .schema import SettingsSchema, load_schema, parse_schema
from .live_settings import LiveSettings, SettingsSignals, SettingsState

__all__ = [
    'LiveSettings',
    'MemoryStore',
    'PreferenceStore',
    'PreferenceType',
    'PropertyBinding',
    'PropertyRegistry',
    'QSettingsStore',
    'SettingsSchema',
    'SettingsSignals',
    'SettingsState',
    'WriteGuard',
    'load_schema',
    'parse_schema',
    'to_bool',
]
