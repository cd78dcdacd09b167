# src/geodist/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/geodist/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `GEODIST_LOG_LEVEL`, `GEODIST_OUTPUT_UNITS`)
- an external YAML file via `GEODIST_CONFIG_PATH`

Design rule:
- Tuning knobs live in YAML, not hard-coded in engine logic. The engine itself takes
  plain keyword arguments; only entrypoints read settings.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal
from geodist.core.env import load_dotenv_if_present

import yaml
from pydantic import BaseModel, Field


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `geodist.config`."""
    text = resources.files("geodist.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


DistanceUnits = Literal["kilometers", "meters", "miles", "nauticalmiles", "radians", "degrees"]


class AppSettings(BaseModel):
    name: str = "geodist"
    log_level: str = "INFO"
    # Level for third-party geometry libraries (Shapely).
    library_log_level: str = "WARNING"


class EngineSettings(BaseModel):
    # When true, a point exactly on a polygon edge is not "contained".
    ignore_boundary: bool = False


class OutputSettings(BaseModel):
    units: DistanceUnits = "kilometers"
    precision: int = Field(3, ge=0, le=12)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)  # type: ignore


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)
    log_level = os.getenv("GEODIST_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    units = os.getenv("GEODIST_OUTPUT_UNITS")
    if units:
        data.setdefault("output", {})["units"] = units

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("GEODIST_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
