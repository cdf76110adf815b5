"""Name and version of livesettings."""

APP_NAME: str = "livesettings"
APP_VERSION: str = "0.3.0"
