from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union


ParameterSet = dict[str, Any]

# None or "_" (ignored), an identifier, or a tuple of identifiers to destructure.
ContextPattern = Union[None, str, tuple[str, ...]]

PLACEHOLDER = "_"


@dataclass(frozen=True)
class Bare:
    values: ParameterSet


@dataclass(frozen=True)
class Named:
    """A parameter set carrying an explicit identifier instead of a derived one.

    `values` is a mapping in keyed form, or a row of positional values when the
    parameter list starts with a header row.
    """

    id: str
    values: Any


ParameterEntry = Union[Bare, Named]


def named(id: str, **values: Any) -> Named:
    return Named(id=id, values=dict(values))


@dataclass(frozen=True)
class TestDeclaration:
    __test__ = False

    name: str
    context: ContextPattern
    parameters: Any
    body: Optional[Callable[..., Any]]
    file: Optional[str] = None
    line: Optional[int] = None


@dataclass(frozen=True)
class GeneratedTest:
    name: str
    index: int
    values: ParameterSet
    context: ContextPattern
    function: Callable[..., Any]
    stub: bool = False
