from __future__ import annotations

import keyword
from collections.abc import Mapping, Sequence
from typing import Any, Literal, Optional

from yapara.core.errors import (
    ArityMismatchError,
    ParameterNameError,
    UnsupportedContainerError,
)
from yapara.core.model import Bare, Named, ParameterEntry, ParameterSet


ParameterForm = Literal["keyed", "positional"]


def is_identifier(name: Any) -> bool:
    return isinstance(name, str) and name.isidentifier() and not keyword.iskeyword(name)


def _is_row(v: Any) -> bool:
    return isinstance(v, (list, tuple))


def detect_form(parameters: Sequence[Any]) -> ParameterForm:
    """Positional form starts with a header row: a non-empty list/tuple of strings."""
    if not parameters:
        return "keyed"
    first = parameters[0]
    if _is_row(first) and first and all(isinstance(x, str) for x in first):
        return "positional"
    return "keyed"


def normalize(
    parameters: Any,
    *,
    file: Optional[str] = None,
    line: Optional[int] = None,
) -> list[ParameterEntry]:
    """Convert an authored parameter list into canonical entries.

    Both the keyed form and the positional (header + rows) form come out as
    `Bare`/`Named` entries holding a name -> value dict, in input order.
    """

    if isinstance(parameters, (str, bytes, Mapping)) or not isinstance(parameters, Sequence):
        raise UnsupportedContainerError(
            code="E_UNSUPPORTED_CONTAINER",
            message=(
                "unsupported parameter container: expected an ordered sequence of parameter sets "
                f"(list or tuple), got {type(parameters).__name__}"
            ),
            file=file,
            line=line,
            path="parameters",
        )

    if detect_form(parameters) == "positional":
        header = list(parameters[0])
        _check_names(header, file=file, line=line, path="parameters[0]")
        return [
            _zip_row(header, row, i, file=file, line=line)
            for i, row in enumerate(parameters[1:], start=1)
        ]

    return [_keyed_entry(raw, i, file=file, line=line) for i, raw in enumerate(parameters)]


def _keyed_entry(raw: Any, i: int, *, file: Optional[str], line: Optional[int]) -> ParameterEntry:
    entry_path = f"parameters[{i}]"

    if isinstance(raw, Named):
        ident, values = raw.id, raw.values
    elif isinstance(raw, tuple) and len(raw) == 2 and isinstance(raw[1], Mapping):
        ident, values = raw
    elif isinstance(raw, Mapping):
        return Bare(values=_to_parameter_set(raw, file=file, line=line, path=entry_path))
    else:
        raise UnsupportedContainerError(
            code="E_UNSUPPORTED_ENTRY",
            message=(
                "parameter set must be a mapping, a Named entry or an (id, mapping) pair, "
                f"got {type(raw).__name__}: {raw!r}"
            ),
            file=file,
            line=line,
            path=entry_path,
        )

    _check_id(ident, file=file, line=line, path=entry_path)
    if not isinstance(values, Mapping):
        raise UnsupportedContainerError(
            code="E_UNSUPPORTED_ENTRY",
            message=f"values of entry '{ident}' must be a mapping, got {type(values).__name__}",
            file=file,
            line=line,
            path=entry_path,
        )
    return Named(id=ident, values=_to_parameter_set(values, file=file, line=line, path=entry_path))


def _zip_row(
    header: list[str], raw: Any, i: int, *, file: Optional[str], line: Optional[int]
) -> ParameterEntry:
    row_path = f"parameters[{i}]"

    ident: Optional[str] = None
    row = raw
    if isinstance(raw, Named):
        _check_id(raw.id, file=file, line=line, path=row_path)
        ident, row = raw.id, raw.values
    elif _is_id_pair(raw, header):
        _check_id(raw[0], file=file, line=line, path=row_path)
        ident, row = raw

    if not _is_row(row):
        raise UnsupportedContainerError(
            code="E_UNSUPPORTED_ENTRY",
            message=f"value row must be a list or tuple, got {type(row).__name__}: {row!r}",
            file=file,
            line=line,
            path=row_path,
        )

    if len(row) != len(header):
        raise ArityMismatchError(
            code="E_ARITY_MISMATCH",
            message=(
                f"parameter arity mismatch: row has {len(row)} values for "
                f"{len(header)} names {header}: {list(row)!r}"
            ),
            file=file,
            line=line,
            path=row_path,
        )

    values: ParameterSet = dict(zip(header, row))
    if ident is None:
        return Bare(values=values)
    return Named(id=ident, values=values)


def _is_id_pair(raw: Any, header: list[str]) -> bool:
    # With a two-name header `(str, row)` is also a valid value row; ids go through Named there.
    return (
        isinstance(raw, tuple)
        and len(raw) == 2
        and len(header) != 2
        and isinstance(raw[0], str)
        and _is_row(raw[1])
    )


def _to_parameter_set(
    raw: Mapping[Any, Any], *, file: Optional[str], line: Optional[int], path: str
) -> ParameterSet:
    _check_names(list(raw.keys()), file=file, line=line, path=path)
    return dict(raw)


def _check_names(names: list[Any], *, file: Optional[str], line: Optional[int], path: str) -> None:
    seen: set[str] = set()
    for name in names:
        if not is_identifier(name):
            raise ParameterNameError(
                code="E_INVALID_PARAMETER_NAME",
                message=f"parameter names must be Python identifiers, got {name!r}",
                file=file,
                line=line,
                path=path,
            )
        if name in seen:
            raise ParameterNameError(
                code="E_INVALID_PARAMETER_NAME",
                message=f"parameter name repeated in header: {name}",
                file=file,
                line=line,
                path=path,
            )
        seen.add(name)


def _check_id(ident: Any, *, file: Optional[str], line: Optional[int], path: str) -> None:
    if not isinstance(ident, str) or not ident.strip():
        raise ParameterNameError(
            code="E_INVALID_ID",
            message=f"explicit id must be a non-empty string, got {ident!r}",
            file=file,
            line=line,
            path=path,
        )
