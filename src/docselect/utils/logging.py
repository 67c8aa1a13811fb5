"""Package-scoped logging for docselect.

Every module logs through ``get_logger(__name__)``, which places it under the
``docselect`` logger. The package never touches the root logger: by default
records only reach whatever the host application configured, and
:func:`configure_logging` can attach docselect's own rotating file and console
handlers to the ``docselect`` logger alone.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

__all__ = ["PACKAGE_LOGGER", "configure_logging", "get_logger", "get_log_path", "reset_logging"]

PACKAGE_LOGGER = "docselect"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_DIR_ENV = "DOCSELECT_LOG_DIR"
_LOG_FILE_NAME = "docselect.log"

_package_logger = logging.getLogger(PACKAGE_LOGGER)
_package_logger.addHandler(logging.NullHandler())

# Handlers attached by configure_logging, removed again on reconfiguration.
_installed: list[logging.Handler] = []
_log_path: Path | None = None


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name``, nested under the package logger."""

    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = False,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path | None:
    """Attach docselect's own handlers to the ``docselect`` logger.

    A rotating ``docselect.log`` is written when ``log_dir`` is given or
    ``DOCSELECT_LOG_DIR`` is set; ``console`` adds a stderr handler. Calling
    again replaces the handlers installed by the previous call. Returns the
    log file path, or ``None`` when no file is written.
    """

    global _log_path
    reset_logging()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    target_dir = log_dir or os.environ.get(_LOG_DIR_ENV)
    if target_dir:
        directory = Path(target_dir).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        _log_path = directory / _LOG_FILE_NAME
        _install(
            logging.handlers.RotatingFileHandler(
                _log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            ),
            level,
            formatter,
        )
    if console:
        _install(logging.StreamHandler(), level, formatter)

    _package_logger.setLevel(level)
    _package_logger.debug(
        "Logging configured: level=%s file=%s console=%s",
        logging.getLevelName(level),
        _log_path,
        console,
    )
    return _log_path


def reset_logging() -> None:
    """Remove and close the handlers added by :func:`configure_logging`."""

    global _log_path
    while _installed:
        handler = _installed.pop()
        _package_logger.removeHandler(handler)
        handler.close()
    _package_logger.setLevel(logging.NOTSET)
    _log_path = None


def get_log_path() -> Path | None:
    """Return the file docselect currently logs to, if any."""

    return _log_path


def _install(handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    _package_logger.addHandler(handler)
    _installed.append(handler)
