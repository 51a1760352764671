"""Runtime settings for the Quarry command-line tool.

Settings come from three layers, later layers winning:

1. Defaults declared on ``Settings``.
2. An optional YAML mapping file (``--config PATH``).
3. Environment variables ``QUARRY_LOG_LEVEL`` and ``QUARRY_TIMEOUT``.

The core library never reads settings; they only shape how the CLI builds
contexts and configures logging.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from quarry.exceptions import ConfigError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_LOG_LEVEL = "QUARRY_LOG_LEVEL"
ENV_TIMEOUT = "QUARRY_TIMEOUT"


@dataclass(frozen=True)
class Settings:
    """Resolved CLI settings.

    Attributes:
        log_level: Root logging level name.
        timeout: Deadline in seconds for each resolution, None for no deadline.
        show_unread: Default for the demo request's unread-notifications option.
    """

    log_level: str = "WARNING"
    timeout: float | None = None
    show_unread: bool = True


def _parse_log_level(value: Any) -> str:
    level = str(value).upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"invalid log_level {value!r}, expected one of {', '.join(_LOG_LEVELS)}")
    return level


def _parse_timeout(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid timeout {value!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {timeout}")
    return timeout


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(f"invalid show_unread {value!r}, expected true or false")


_PARSERS = {
    "log_level": _parse_log_level,
    "timeout": _parse_timeout,
    "show_unread": _parse_bool,
}


def safe_load_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping from ``path``.

    Raises:
        ConfigError: The file cannot be read, is not valid YAML, or is not
            a mapping. An empty file yields an empty mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
        data = yaml.safe_load(raw)
    except (OSError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot load settings from {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"settings file {path} must contain a mapping")
    return data


def apply_overrides(settings: Settings, values: Mapping[str, Any]) -> Settings:
    """Return ``settings`` with validated ``values`` applied.

    Raises:
        ConfigError: Unknown key or invalid value.
    """
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"unknown settings: {', '.join(unknown)}")
    parsed = {key: _PARSERS[key](value) for key, value in values.items()}
    return replace(settings, **parsed)


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build ``Settings`` from defaults, an optional YAML file and the environment.

    Args:
        path: Optional YAML settings file.
        environ: Environment mapping, ``os.environ`` when None.

    Raises:
        ConfigError: Any layer holds an invalid value.
    """
    settings = Settings()
    if path is not None:
        settings = apply_overrides(settings, safe_load_yaml(path))
        logger.debug("Loaded settings from %s", path)

    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    if env.get(ENV_LOG_LEVEL):
        overrides["log_level"] = env[ENV_LOG_LEVEL]
    if env.get(ENV_TIMEOUT):
        overrides["timeout"] = env[ENV_TIMEOUT]
    if overrides:
        settings = apply_overrides(settings, overrides)
    return settings
