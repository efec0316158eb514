"""pytest plugin: registers the `not_implemented` marker and reads ini options.

ini options (all optional):
  yapara_config          YAML file with expansion options, relative to rootdir
  yapara_max_name_bytes  byte ceiling for generated names
  yapara_on_duplicate    error | defer
"""
from __future__ import annotations

from typing import Any

import pytest

from yapara.core.expand.config import (
    ConfigError,
    ExpandConfig,
    load_and_merge,
    merged_config,
    set_active_config,
)

_previous_config = pytest.StashKey[ExpandConfig]()


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini("yapara_config", help="YAML file with yapara expansion options", default="")
    parser.addini("yapara_max_name_bytes", help="byte ceiling for generated test names", default="")
    parser.addini("yapara_on_duplicate", help="duplicate generated names: error|defer", default="")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "not_implemented: parameterized test declared without a body")
    try:
        cfg = _config_from_ini(config)
    except (ConfigError, OSError) as e:
        raise pytest.UsageError(f"yapara: {e}") from e
    config.stash[_previous_config] = set_active_config(cfg)


def pytest_unconfigure(config: pytest.Config) -> None:
    previous = config.stash.get(_previous_config, None)
    if previous is not None:
        set_active_config(previous)


def _config_from_ini(config: pytest.Config) -> ExpandConfig:
    config_file = config.getini("yapara_config")
    if config_file:
        config_file = str(config.rootpath / config_file)
    cfg = load_and_merge(config_file or None)

    overrides: dict[str, Any] = {}
    max_name_bytes = config.getini("yapara_max_name_bytes")
    if max_name_bytes:
        try:
            overrides["max_name_bytes"] = int(max_name_bytes)
        except ValueError as e:
            raise ConfigError("yapara_max_name_bytes must be an integer") from e
    on_duplicate = config.getini("yapara_on_duplicate")
    if on_duplicate:
        overrides["on_duplicate"] = on_duplicate
    return merged_config(overrides, base=cfg)
