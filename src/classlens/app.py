"""Command-line entry point for the classlens browser core."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO, get_args, get_origin, get_type_hints

from .browser import BrowserSession
from .errors import ClasslensError
from .services.settings import Settings, SettingsStore
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}
_LOGGER = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""

    logging_utils.setup_logging(debug)


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except OSError as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the ``classlens`` console script."""

    args = _parse_cli_args(argv)

    settings_path = args.settings_path or os.environ.get("CLASSLENS_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings_store = SettingsStore(resolved_path)
    try:
        cli_overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2

    settings = load_settings(resolved_path, store=settings_store, overrides=cli_overrides or None)
    configure_logging(settings.debug_logging or _env_flag("CLASSLENS_DEBUG", default=False))

    if args.dump_settings:
        _dump_settings(settings, settings_store, overrides=cli_overrides)
        return 0

    session = BrowserSession(settings=settings, settings_store=settings_store)
    session.open_paths(args.paths)
    for directory in args.classpath:
        session.config.add_directory(directory)
    for archive in args.archive:
        session.config.add_archive(archive)

    status = 0
    if args.find:
        location = session.config.find_class(args.find, args.module_path)
        if location is None:
            print(f"Class not found: {args.find}", file=sys.stderr)
            status = 1
        else:
            print(location.file_name)

    if args.save_workspace:
        try:
            written = session.save_workspace(args.save_workspace)
        except ClasslensError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        print(f"Workspace saved to {written}")

    session.close_window()
    return status


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="classlens",
        description="Open class files, archives and workspaces and resolve classes on their classpath.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Class files, JAR files or workspace files to open.",
    )
    parser.add_argument(
        "--classpath",
        "-c",
        action="append",
        default=[],
        metavar="DIR",
        help="Add a directory to the classpath (repeatable).",
    )
    parser.add_argument(
        "--archive",
        "-a",
        action="append",
        default=[],
        metavar="JAR",
        help="Add an archive to the classpath (repeatable).",
    )
    parser.add_argument(
        "--find",
        metavar="CLASS",
        help="Resolve CLASS on the classpath and print its location.",
    )
    parser.add_argument(
        "--module-path",
        action="store_true",
        help="Treat the --find name as a module path selection (module/pkg/Class).",
    )
    parser.add_argument(
        "--save-workspace",
        metavar="PATH",
        help="Write the resulting workspace to PATH.",
    )
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.classlens/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings for this run (repeatable).",
    )
    return parser.parse_args(argv)


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if not items:
        return overrides

    fields = Settings.__dataclass_fields__  # type: ignore[attr-defined]
    type_hints = get_type_hints(Settings)
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Override is missing a field name.")
        if key not in fields:
            raise ValueError(f"Unknown setting '{key}'.")
        annotation = type_hints.get(key, fields[key].type)
        overrides[key] = _coerce_value(annotation, raw_value.strip())
    return overrides


def _coerce_value(annotation: Any, raw_value: str) -> Any:
    target = _resolve_annotation(annotation)
    normalized = raw_value.strip()

    if target is str or target is Any:
        return normalized
    if target is bool:
        return _parse_bool(normalized)
    if target is int:
        return int(normalized, 10)
    if normalized.lower() in {"none", "null"}:
        return None
    if is_dataclass(target) and isinstance(target, type):
        try:
            payload = json.loads(normalized or "{}")
        except json.JSONDecodeError as exc:
            raise ValueError("Dataclass overrides must be valid JSON") from exc
        return target(**payload)
    if target is list:
        try:
            return json.loads(normalized or "[]")
        except json.JSONDecodeError as exc:
            raise ValueError("List overrides must be valid JSON arrays") from exc
    return normalized


def _resolve_annotation(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is None:
        return annotation
    if origin is list:
        return origin
    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    if not args:
        return origin
    return args[0]


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    metadata = {
        "path": str(store.path),
        "log_path": str(
            logging_utils.get_log_path()
            or logging_utils.resolve_log_dir() / logging_utils.LOG_FILE_NAME
        ),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": sorted(
            name for name in os.environ if name.startswith("CLASSLENS_")
        ),
    }
    json.dump({"settings": asdict(settings), "meta": metadata}, destination, indent=2)
    destination.write("\n")


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
