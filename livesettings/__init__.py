"""
livesettings - live, observable settings properties backed by a preference store.
"""
from livesettings.errors import (
    ListenerFailure,
    SchemaError,
    SettingsError,
    StoreUnavailable,
    SubscriptionSetupFailure,
)
from livesettings.settings import (
    LiveSettings,
    MemoryStore,
    PreferenceStore,
    PreferenceType,
    QSettingsStore,
    load_schema,
)
from livesettings.versioning import APP_VERSION as __version__

__all__ = [
    'ListenerFailure',
    'LiveSettings',
    'MemoryStore',
    'PreferenceStore',
    'PreferenceType',
    'QSettingsStore',
    'SchemaError',
    'SettingsError',
    'StoreUnavailable',
    'SubscriptionSetupFailure',
    'load_schema',
]
