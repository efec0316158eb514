from __future__ import annotations

import inspect
import sys
from pathlib import Path
from types import FrameType
from typing import Any, Callable, MutableMapping, Optional, TypeVar

from yapara.core.errors import DeclarationError
from yapara.core.expand.config import ExpandConfig
from yapara.core.expand.expand_declaration import expand
from yapara.core.io.load_parameters import load_parameters
from yapara.core.model import PLACEHOLDER
from yapara.core.register.register_tests import register


F = TypeVar("F", bound=Callable[..., Any])


def parameterized_test(
    name: str,
    *args: Any,
    namespace: Optional[MutableMapping[str, Any]] = None,
    config: Optional[ExpandConfig] = None,
) -> Callable[[F], F]:
    """Declare one test per parameter set, using the decorated function as the body.

    Accepted shapes::

        @parameterized_test("basic test", [
            {"a": 1, "b": 2, "expected": 3},
            ("one_plus_two", {"a": 1, "b": 2, "expected": 3}),
        ])
        def _():
            assert a + b == expected

        @parameterized_test("with context", "context", [
            ["a", "b", "expected"],
            [1, 2, 3],
            ("one_plus_two", [1, 2, 3]),
        ])
        def _():
            assert context["spam"] == "spam"

    Positional rows take an id as an `(id, row)` pair or `Named(id, row)`. With a
    two-name header only `Named` works, since a pair is a plain row there.

    Tests are registered in the module or class where the decorator is used
    (or in `namespace`) under `test <name>[<id>]`. The parameter names are
    bound as locals before the body runs; declaring them as arguments of the
    body is allowed and keeps linters quiet. Any other argument is requested
    from pytest as a fixture. Marks applied below this decorator are copied onto
    every generated test.

    The decorated function itself is returned with `__test__ = False`.
    """

    if len(args) == 1:
        context, parameters = PLACEHOLDER, args[0]
    elif len(args) == 2 and not callable(args[1]):
        context, parameters = args
    else:
        raise DeclarationError(
            code="E_DECLARATION_SHAPE",
            message=(
                "expected parameterized_test(name, parameters) or "
                "parameterized_test(name, context, parameters) used as a decorator"
            ),
            path="parameterized_test",
        )

    frame = sys._getframe(1)
    file, line = frame.f_code.co_filename, frame.f_lineno
    target = namespace if namespace is not None else _declaring_scope(frame)

    def decorator(body: F) -> F:
        tests = expand(name, context, parameters, body, file=file, line=line, config=config)
        register(tests, target, config=config, file=file, line=line)
        body.__test__ = False  # type: ignore[attr-defined]
        return body

    return decorator


def parameterized_stub(
    name: str,
    parameters: Any,
    *,
    namespace: Optional[MutableMapping[str, Any]] = None,
    config: Optional[ExpandConfig] = None,
) -> list[str]:
    """Register one not-implemented test per parameter set; returns the registered names."""
    frame = sys._getframe(1)
    file, line = frame.f_code.co_filename, frame.f_lineno
    target = namespace if namespace is not None else _declaring_scope(frame)

    tests = expand(name, None, parameters, None, file=file, line=line, config=config)
    return register(tests, target, config=config, file=file, line=line)


def parameters_from_file(path: str | Path) -> list[Any]:
    """Load a parameter list from YAML/JSON, relative paths resolved next to the caller."""
    p = Path(path)
    if not p.is_absolute():
        caller = sys._getframe(1).f_globals.get("__file__")
        if caller:
            p = Path(caller).resolve().parent / p
    return load_parameters(p)


def _declaring_scope(frame: FrameType) -> MutableMapping[str, Any]:
    if frame.f_code.co_flags & inspect.CO_OPTIMIZED:
        raise DeclarationError(
            code="E_UNSUPPORTED_SCOPE",
            message="declare parameterized tests at module or class level, or pass namespace=",
            file=frame.f_code.co_filename,
            line=frame.f_lineno,
        )
    return frame.f_locals
