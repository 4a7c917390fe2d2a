"""Logging setup for the classlens command line.

Records go to a rotating ``classlens.log`` under ``~/.classlens/logs`` (or
``CLASSLENS_LOG_DIR``) and, unless disabled, to stderr. The level follows the
``debug_logging`` setting.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

__all__ = ["LOG_FILE_NAME", "setup_logging", "resolve_log_dir", "get_log_path"]

LOG_FILE_NAME = "classlens.log"
_DEFAULT_LOG_DIR = Path.home() / ".classlens" / "logs"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 1_000_000
_BACKUP_COUNT = 3
# Third-party loggers kept at WARNING even when classlens logs at DEBUG.
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio", "jsonschema")
_LOG_PATH: Path | None = None


def setup_logging(
    debug: bool = False,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
) -> Path:
    """Route root logging to the classlens log file and return its path.

    Each call replaces the handlers installed by the previous one.
    """

    global _LOG_PATH
    level = logging.DEBUG if debug else logging.INFO
    target_dir = resolve_log_dir(log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / LOG_FILE_NAME

    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    handlers: list[logging.Handler] = [file_handler]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _LOG_PATH = log_path
    logging.getLogger(__name__).debug(
        "Logging to %s (level=%s)", log_path, logging.getLevelName(level)
    )
    return log_path


def resolve_log_dir(log_dir: Path | str | None = None) -> Path:
    """Return ``log_dir``, else ``CLASSLENS_LOG_DIR``, else ``~/.classlens/logs``."""

    env_override = os.environ.get("CLASSLENS_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()


def get_log_path() -> Path | None:
    return _LOG_PATH
