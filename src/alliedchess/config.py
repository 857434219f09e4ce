"""Runtime settings loaded from TOML with environment overrides.

Example ``alliedchess.toml``::

    layout = "standard"
    log_level = "INFO"
    server = "http://localhost:3001"

    [engine]
    depth = 2
    jitter = 10
    seed = 42
    delay_ms = 100
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from alliedchess.core.layouts import LAYOUTS, STANDARD

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "ALLIEDCHESS_"
DEFAULT_CONFIG_FILE = "alliedchess.toml"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_SERVER_SCHEMES = ("http://", "https://")


@dataclass
class EngineSettings:
    depth: int = 2
    jitter: int = 10
    seed: int | None = None  # None seeds from system entropy
    delay_ms: int = 100


@dataclass
class GameSettings:
    engine: EngineSettings = field(default_factory=EngineSettings)
    layout: str = STANDARD
    log_level: str = "INFO"
    server: str | None = None  # relay URL; None plays hot-seat

    def validate(self) -> None:
        """Raise ValueError on settings the game cannot run with."""
        if self.engine.depth < 1:
            raise ValueError(f"engine depth must be >= 1, got {self.engine.depth}")
        if self.engine.jitter < 0:
            raise ValueError(f"engine jitter must be >= 0, got {self.engine.jitter}")
        if self.engine.delay_ms < 0:
            raise ValueError(f"engine delay must be >= 0, got {self.engine.delay_ms}")
        if self.layout not in LAYOUTS:
            raise ValueError(f"Unknown layout: {self.layout!r}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level!r}")
        if self.server is not None and not self.server.startswith(_SERVER_SCHEMES):
            raise ValueError(
                f"Relay URL must start with http:// or https://, got {self.server!r}"
            )


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _merge_engine(engine: EngineSettings, raw: Mapping[str, Any]) -> None:
    known = {f.name for f in fields(EngineSettings)}
    for key, value in raw.items():
        if key not in known:
            _LOGGER.warning("Ignoring unknown engine setting %r", key)
            continue
        if key == "seed" and value is None:
            engine.seed = None
            continue
        setattr(engine, key, _coerce_int(f"engine.{key}", value))


def _merge(settings: GameSettings, raw: Mapping[str, Any]) -> None:
    for key, value in raw.items():
        if key == "engine":
            if not isinstance(value, Mapping):
                raise ValueError("[engine] must be a table")
            _merge_engine(settings.engine, value)
        elif key == "layout":
            settings.layout = str(value)
        elif key == "log_level":
            settings.log_level = str(value).upper()
        elif key == "server":
            settings.server = str(value) if value else None
        else:
            _LOGGER.warning("Ignoring unknown setting %r", key)


def _env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    raw: dict[str, Any] = {}
    engine: dict[str, Any] = {}
    for name in ("layout", "log_level", "server"):
        value = env.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            raw[name] = value
    for name in ("depth", "jitter", "seed", "delay_ms"):
        value = env.get(f"{ENV_PREFIX}ENGINE_{name.upper()}")
        if value:
            engine[name] = value
    if engine:
        raw["engine"] = engine
    return raw


def load_settings(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> GameSettings:
    """Build settings from defaults, then *path*, then ``ALLIEDCHESS_*`` vars.

    A missing file is not an error; an unreadable or invalid one is.
    """
    settings = GameSettings()

    config_path = Path(path) if path is not None else Path(DEFAULT_CONFIG_FILE)
    if config_path.is_file():
        with config_path.open("rb") as fh:
            try:
                raw = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise ValueError(f"Invalid config file {config_path}: {exc}") from exc
        _merge(settings, raw)
        _LOGGER.debug("Loaded settings from %s", config_path)
    elif path is not None:
        _LOGGER.warning("Config file %s not found; using defaults", config_path)

    _merge(settings, _env_overrides(os.environ if env is None else env))
    settings.validate()
    return settings
