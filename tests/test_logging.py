import logging

import pytest

from geodist.cli import main
from geodist.config.settings import get_logging_config, get_settings
from geodist.core.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch):
    # dictConfig rewires the root logger; put it back so other tests' caplog is unaffected.
    monkeypatch.delenv("GEODIST_CONFIG_PATH", raising=False)
    monkeypatch.delenv("GEODIST_LOG_LEVEL", raising=False)
    get_settings.cache_clear()
    root = logging.getLogger()
    shapely_logger = logging.getLogger("shapely")
    saved = (root.level, list(root.handlers), shapely_logger.level)
    yield
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    shapely_logger.setLevel(saved[2])
    get_settings.cache_clear()


def test_settings_level_applies_to_root_and_library_loggers():
    configure_logging()

    # Packaged defaults: INFO for our code, WARNING for Shapely.
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("shapely").level == logging.WARNING


def test_explicit_level_overrides_settings_but_not_library_level():
    configure_logging("debug")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("shapely").level == logging.WARNING


def test_env_level_is_used_when_no_explicit_level(monkeypatch):
    monkeypatch.setenv("GEODIST_LOG_LEVEL", "ERROR")
    get_settings.cache_clear()

    configure_logging()
    assert logging.getLogger().level == logging.ERROR


def test_configure_logging_does_not_mutate_cached_config():
    configure_logging("DEBUG")

    # The cached YAML payload keeps its packaged level for the next caller.
    assert get_logging_config()["root"]["level"] == "INFO"


def test_cli_log_level_option(tmp_path, capsys):
    path = tmp_path / "point.geojson"
    path.write_text('{"type": "Point", "coordinates": [1, 1]}', encoding="utf-8")

    assert main(["--log-level", "warning", "distance", "--lon", "0", "--lat", "0", str(path)]) == 0
    assert logging.getLogger().level == logging.WARNING
    assert "#0: 157.2" in capsys.readouterr().out
