from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Literal

import yaml


DuplicatePolicy = Literal["error", "defer"]


@dataclass(frozen=True)
class ExpandConfig:
    max_name_bytes: int = 255
    on_duplicate: DuplicatePolicy = "error"
    test_prefix: str = "test "

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = ExpandConfig()

_active: ExpandConfig = DEFAULT_CONFIG


class ConfigError(ValueError):
    pass


def validate_overrides(raw: Any) -> dict[str, Any]:
    """Check a mapping of config keys; returns the cleaned overrides."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("config must be a mapping of option -> value")

    known = set(DEFAULT_CONFIG.to_dict())
    out: dict[str, Any] = {}
    for k, v in raw.items():
        if k not in known:
            raise ConfigError(f"unknown config option '{k}' (choose from: {', '.join(sorted(known))})")
        if k == "max_name_bytes":
            if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
                raise ConfigError("max_name_bytes must be a positive integer")
        elif k == "on_duplicate":
            if v not in ("error", "defer"):
                raise ConfigError("on_duplicate must be one of: error, defer")
        elif k == "test_prefix":
            if not isinstance(v, str) or not v.strip():
                raise ConfigError("test_prefix must be a non-empty string")
        out[k] = v
    return out


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load config overrides from a YAML file.

    Format:
      max_name_bytes: 255
      on_duplicate: error   # or defer
      test_prefix: "test "
    """
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {p}: {e}") from e
    return validate_overrides(raw)


def merged_config(overrides: dict[str, Any] | None = None, base: ExpandConfig | None = None) -> ExpandConfig:
    """Return `base` (DEFAULT_CONFIG by default) with validated overrides applied."""
    cfg = base or DEFAULT_CONFIG
    if overrides:
        cfg = replace(cfg, **validate_overrides(overrides))
    return cfg


def load_and_merge(config_file: str | None) -> ExpandConfig:
    if not config_file:
        return merged_config()
    return merged_config(load_config_file(config_file))


def get_active_config() -> ExpandConfig:
    return _active


def set_active_config(cfg: ExpandConfig) -> ExpandConfig:
    """Install `cfg` for declarations without an explicit config; returns the previous one."""
    global _active
    previous = _active
    _active = cfg
    return previous
