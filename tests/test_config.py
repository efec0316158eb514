from pathlib import Path

import pytest

from yapara.core.expand.config import (
    DEFAULT_CONFIG,
    ConfigError,
    ExpandConfig,
    get_active_config,
    load_and_merge,
    load_config_file,
    merged_config,
    set_active_config,
    validate_overrides,
)
from yapara.core.expand.expand_declaration import expand


def test_defaults():
    assert DEFAULT_CONFIG.to_dict() == {"max_name_bytes": 255, "on_duplicate": "error", "test_prefix": "test "}
    assert load_and_merge(None) == DEFAULT_CONFIG


def test_load_config_file(examples: Path):
    assert load_config_file(examples / "config.yaml") == {"max_name_bytes": 32, "on_duplicate": "defer"}
    cfg = load_and_merge(str(examples / "config.yaml"))
    assert cfg == ExpandConfig(max_name_bytes=32, on_duplicate="defer")


def test_invalid_config_file(examples: Path):
    with pytest.raises(ConfigError, match="max_name_bytes"):
        load_and_merge(str(examples / "config-invalid.yaml"))


def test_empty_config_file_means_defaults(tmp_path: Path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_and_merge(str(p)) == DEFAULT_CONFIG


@pytest.mark.parametrize(
    "raw",
    [
        ["max_name_bytes"],
        {"unknown": 1},
        {"max_name_bytes": 0},
        {"max_name_bytes": True},
        {"on_duplicate": "ignore"},
        {"test_prefix": " "},
    ],
)
def test_invalid_overrides(raw):
    with pytest.raises(ConfigError):
        validate_overrides(raw)


def test_merged_config_layers_on_base():
    base = ExpandConfig(max_name_bytes=64)
    cfg = merged_config({"on_duplicate": "defer"}, base=base)
    assert cfg == ExpandConfig(max_name_bytes=64, on_duplicate="defer")
    assert merged_config(None, base=base) is base


def test_active_config_applies_to_declarations_without_one():
    previous = set_active_config(ExpandConfig(max_name_bytes=8))
    try:
        assert get_active_config().max_name_bytes == 8
        (test,) = expand("long name", None, [{"a": 1}])
        assert test.name == "long name[1]"
    finally:
        set_active_config(previous)
    assert get_active_config() == previous


def test_malformed_yaml_config_is_a_config_error(examples: Path):
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_and_merge(str(examples / "config-malformed.yaml"))
