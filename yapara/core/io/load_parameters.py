from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from yapara.core.errors import ParameterLoadError
from yapara.core.model import Named


def load_parameters(path: str | Path) -> list[Any]:
    """Load a parameter list from a YAML/JSON file.

    The document is either the parameter list itself or a mapping with a
    `parameters` key. Entries shaped exactly like `{id: ..., values: ...}` become
    `Named` entries; everything else is handed to the normalizer untouched,
    which owns shape checking.
    """

    p = Path(path)
    if not p.exists():
        raise ParameterLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )

    suffix = p.suffix.lower()
    try:
        raw_text = p.read_text(encoding="utf-8")
    except Exception as e:  # pragma: no cover
        raise ParameterLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(raw_text)
        elif suffix == ".json":
            data = json.loads(raw_text)
        else:
            raise ParameterLoadError(
                code="E_UNSUPPORTED_FORMAT",
                message="supported formats are .yaml/.yml and .json",
                file=str(p),
            )
    except ParameterLoadError:
        raise
    except Exception as e:
        code = "E_YAML_PARSE" if suffix in {".yaml", ".yml"} else "E_JSON_PARSE"
        raise ParameterLoadError(code=code, message=str(e), file=str(p)) from e

    if isinstance(data, dict):
        if "parameters" not in data:
            raise ParameterLoadError(
                code="E_INVALID_TOP_LEVEL",
                message="a mapping document must carry a 'parameters' list",
                file=str(p),
            )
        data = data["parameters"]

    if not isinstance(data, list):
        raise ParameterLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a list of parameter sets",
            file=str(p),
            path="parameters",
        )

    return [_named_or_raw(item) for item in data]


def _named_or_raw(item: Any) -> Any:
    if isinstance(item, dict) and set(item) == {"id", "values"}:
        return Named(id=item["id"], values=item["values"])
    return item
