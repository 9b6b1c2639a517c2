"""Shared fixtures: isolate every test from the user's configuration."""

import pytest

from tasktrace import config as config_module
from tasktrace.ids import reset_default_generator

_ENV_VARS = (
    "TASKTRACE_SEPARATOR",
    "TASKTRACE_ID_PREFIX",
    "TASKTRACE_INCLUDE_OUTCOME",
    "TASKTRACE_LOG_LEVEL",
    "LOG_FORMAT",
    "ENV",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at an empty temp location and reset cached state."""
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "configuration.json")
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    config_module.get_config.cache_clear()
    reset_default_generator()
    yield tmp_path / "configuration.json"
    config_module.get_config.cache_clear()
    reset_default_generator()
