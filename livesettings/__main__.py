"""
livesettings command line.

    python -m livesettings --schema app.json list
    python -m livesettings --schema app.json get retries
    python -m livesettings --schema app.json set retries 3
    python -m livesettings --schema app.json --ini ./app.ini watch
"""
from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QCoreApplication, QSettings, QTimer

from livesettings.errors import SchemaError
from livesettings.logging.logger import get_logger, setup_logging
from livesettings.settings.live_settings import LiveSettings
from livesettings.settings.qsettings_store import QSettingsStore
from livesettings.settings.schema import load_schema
from livesettings.versioning import APP_NAME, APP_VERSION

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Inspect and edit settings declared by a schema file.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("--schema", required=True, type=Path, help="JSON schema file")
    parser.add_argument("--organization", default=APP_NAME, help="QSettings organization name")
    parser.add_argument("--application", default=APP_NAME, help="QSettings application name")
    parser.add_argument("--ini", type=Path, default=None, help="Use this INI file instead of the native store")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for the rotating log file")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log setting values, implies --debug")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="Print every setting with its type and value")
    get_cmd = commands.add_parser("get", help="Print one setting")
    get_cmd.add_argument("key")
    set_cmd = commands.add_parser("set", help="Change one setting")
    set_cmd.add_argument("key")
    set_cmd.add_argument("value")
    commands.add_parser("watch", help="Print settings as they change until interrupted")
    return parser


def open_settings(args: argparse.Namespace) -> LiveSettings:
    """Build and start a LiveSettings facade from parsed arguments."""
    schema = load_schema(args.schema)
    qsettings = None
    if args.ini is not None:
        qsettings = QSettings(str(args.ini), QSettings.Format.IniFormat)
    store = QSettingsStore(
        schema.as_store_schema(),
        namespace=schema.namespace,
        organization=args.organization,
        application=args.application,
        settings=qsettings,
        watch_file=args.command == "watch",
    )
    settings = LiveSettings(store)
    settings.startup()
    return settings


def _format_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _cmd_list(settings: LiveSettings) -> int:
    for key in settings.keys():
        print(f"{key}\t{settings.type_of(key).value}\t{_format_value(settings.get(key))}")
    return EXIT_OK


def _cmd_get(settings: LiveSettings, key: str) -> int:
    if key not in settings:
        print(f"unknown setting: {key}", file=sys.stderr)
        return EXIT_USAGE
    print(_format_value(settings.get(key)))
    return EXIT_OK


def _cmd_set(settings: LiveSettings, key: str, raw_value: str) -> int:
    if key not in settings:
        print(f"unknown setting: {key}", file=sys.stderr)
        return EXIT_USAGE
    pref_type = settings.type_of(key)
    try:
        value = pref_type.coerce(raw_value)
    except (TypeError, ValueError):
        print(f"invalid {pref_type.value} value for {key}: {raw_value!r}", file=sys.stderr)
        return EXIT_USAGE
    settings.set(key, value)
    print(_format_value(settings.get(key)))
    return EXIT_OK


def _cmd_watch(settings: LiveSettings) -> int:
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])

    def on_change(key: str) -> None:
        print(f"{key}\t{_format_value(settings.get(key))}", flush=True)

    settings.add_listener(on_change)
    if not settings.subscribed:
        logger.warning("Watching without external change notifications")

    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # Give the interpreter a chance to run the SIGINT handler.
    ticker = QTimer()
    ticker.timeout.connect(lambda: None)
    ticker.start(250)

    try:
        app.exec()
    finally:
        ticker.stop()
        settings.remove_listener(on_change)
        settings.shutdown()
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(debug=args.debug, verbose=args.verbose, log_dir=args.log_dir)

    try:
        settings = open_settings(args)
    except SchemaError as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    if args.command == "list":
        return _cmd_list(settings)
    if args.command == "get":
        return _cmd_get(settings, args.key)
    if args.command == "set":
        return _cmd_set(settings, args.key, args.value)
    return _cmd_watch(settings)


if __name__ == "__main__":
    sys.exit(main())
