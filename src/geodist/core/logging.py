"""
Logging configuration.

The packaged YAML (`src/geodist/config/logging.yaml`) is the base. On top of it:
- the root/handler level comes from the CLI (`--log-level`) or settings
  (`app.log_level`, env `GEODIST_LOG_LEVEL`),
- third-party geometry libraries (Shapely) log at `app.library_log_level`, so a
  DEBUG run of the engine is not flooded by GEOS chatter.

Library modules only create loggers; entrypoints call `configure_logging()`.
"""

from __future__ import annotations

import copy
import logging.config

from geodist.config.settings import get_logging_config, get_settings

LIBRARY_LOGGERS = ("shapely",)


def configure_logging(level: str | None = None) -> None:
    """Apply the packaged logging config; `level` overrides the settings level."""
    settings = get_settings()
    # The loaded config is cached; work on a copy so repeated calls start clean.
    config = copy.deepcopy(get_logging_config())

    root_level = (level or settings.app.log_level).upper()
    config.setdefault("root", {})["level"] = root_level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = root_level

    library_level = settings.app.library_log_level.upper()
    loggers = config.setdefault("loggers", {})
    for name in LIBRARY_LOGGERS:
        loggers.setdefault(name, {})["level"] = library_level

    logging.config.dictConfig(config)
