"""Runtime configuration: logging and change-notification verbosity.

Settings come from three layers, each overriding the previous one: the JSON
file handled by :class:`SettingsStore`, explicit overrides passed by the
caller, and ``DOCSELECT_*`` environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Mapping

from .events import SelectionChanged, set_event_quiet
from .utils.logging import configure_logging, get_logger

__all__ = ["Settings", "SettingsStore", "apply_settings"]

LOGGER = get_logger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".docselect" / "settings.json"
SETTINGS_VERSION = 1
_TRUE_VALUES = frozenset({"1", "true", "yes", "on", "debug"})


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in _TRUE_VALUES


# Environment variable -> (settings field, parser).
_ENV_FIELDS: Mapping[str, tuple[str, Callable[[str], Any]]] = {
    "DOCSELECT_LOG_LEVEL": ("log_level", str),
    "DOCSELECT_LOG_DIR": ("log_dir", str),
    "DOCSELECT_LOG_CONSOLE": ("log_console", _parse_bool),
    "DOCSELECT_LOG_MAX_BYTES": ("log_max_bytes", int),
    "DOCSELECT_LOG_BACKUP_COUNT": ("log_backup_count", int),
    "DOCSELECT_DEBUG_EVENT_LOGGING": ("debug_event_logging", _parse_bool),
}


@dataclass(slots=True)
class Settings:
    """Logging destination and verbosity for the docselect loggers.

    ``log_dir`` of ``None`` means no log file; ``debug_event_logging``
    makes the event bus log every ``SelectionChanged`` delivery.
    """

    log_level: str = "INFO"
    log_dir: str | None = None
    log_console: bool = False
    log_max_bytes: int = 1_000_000
    log_backup_count: int = 3
    debug_event_logging: bool = False

    @property
    def level(self) -> int:
        """``log_level`` as a :mod:`logging` level number; unknown names mean INFO."""

        value = logging.getLevelName(str(self.log_level).upper())
        if isinstance(value, int):
            return value
        LOGGER.warning("Unknown log level %r, using INFO", self.log_level)
        return logging.INFO


class SettingsStore:
    """Reads and writes :class:`Settings` as a JSON document."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DEFAULT_SETTINGS_PATH

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Return the stored settings with caller, then environment, overrides applied."""

        settings = _merge(Settings(), self._read(), source=str(self.path))
        if overrides:
            settings = _merge(settings, overrides, source="caller")
        return _merge(settings, _environment_values(), source="environment")

    def save(self, settings: Settings) -> Path:
        """Write ``settings``; the file is replaced in one step."""

        document = {**asdict(settings), "version": SETTINGS_VERSION}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        staging = self.path.with_suffix(".tmp")
        staging.write_text(json.dumps(document, indent=2, sort_keys=True), encoding="utf-8")
        staging.replace(self.path)
        LOGGER.debug("Settings saved to %s", self.path)
        return self.path

    def _read(self) -> dict[str, Any]:
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self.path, exc)
            return {}
        if not isinstance(document, dict):
            LOGGER.warning("Settings file %s does not contain an object", self.path)
            return {}
        document.pop("version", None)
        return document


def apply_settings(settings: Settings) -> Path | None:
    """Configure the docselect loggers and event verbosity; return the log file, if any."""

    set_event_quiet(SelectionChanged, not settings.debug_event_logging)
    return configure_logging(
        settings.level,
        log_dir=settings.log_dir,
        console=settings.log_console,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )


def _environment_values() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_name, (field_name, parse) in _ENV_FIELDS.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        try:
            values[field_name] = parse(raw)
        except ValueError:
            LOGGER.warning("Ignoring %s=%r: not a valid value", env_name, raw)
    return values


def _merge(settings: Settings, values: Mapping[str, Any], *, source: str) -> Settings:
    known = {field.name for field in fields(Settings)}
    accepted: dict[str, Any] = {}
    for key, value in values.items():
        if key not in known:
            LOGGER.warning("Ignoring unknown settings key %r from %s", key, source)
        elif value is not None:
            accepted[key] = value
    if not accepted:
        return settings
    LOGGER.debug("Applying %s settings: %s", source, sorted(accepted))
    return replace(settings, **accepted)
