"""
Shared pytest fixtures for livesettings tests.
"""
import logging
import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QSettings
from PySide6.QtWidgets import QApplication

from livesettings.settings import LiveSettings, MemoryStore


SCENARIO_SCHEMA = {
    "enabled": ("bool", False),
    "retries": ("int", 0),
    "label": ("string", "default label"),
    "show-icon": ("b", True),
    "ratio": ("double", 0.5),
}


@pytest.fixture(scope='session')
def qt_app():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app
    # Don't quit - causes issues with pytest


@pytest.fixture
def memory_store():
    """In-memory store declaring the scenario keys."""
    return MemoryStore(SCENARIO_SCHEMA)


@pytest.fixture
def live_settings(memory_store):
    """Started LiveSettings facade over memory_store."""
    settings = LiveSettings(memory_store)
    settings.startup()
    yield settings
    settings.shutdown()


@pytest.fixture
def ini_path(tmp_path):
    """Path of a scratch INI settings file."""
    return tmp_path / "settings" / "livesettings.ini"


@pytest.fixture
def ini_settings(qt_app, ini_path):
    """QSettings on a scratch INI file."""
    ini_path.parent.mkdir(parents=True, exist_ok=True)
    settings = QSettings(str(ini_path), QSettings.Format.IniFormat)
    yield settings
    settings.clear()
    settings.sync()


@pytest.fixture
def restore_logging():
    """Undo handlers and levels installed by setup_logging()."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
