"""Variable injection for test bodies.

A body is re-parsed from its source and recompiled with one assignment per
parameter prepended to its statements. Authored statements keep their line
numbers, so tracebacks point at (and print) the lines the author wrote; the
injected assignments carry the line of the declaration.
"""
from __future__ import annotations

import __future__
import ast
import copy
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from yapara.core.errors import BodySourceError, DeclarationError
from yapara.core.model import PLACEHOLDER, ContextPattern, ParameterSet
from yapara.core.normalize.normalize_parameters import is_identifier


VALUES_NAME = "__yapara_values__"
CONTEXT_NAME = "__yapara_context__"
FACTORY_NAME = "__yapara_factory__"
REQUEST_FIXTURE = "request"

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


@dataclass(frozen=True)
class BodySource:
    node: FunctionNode
    filename: str
    globals: dict[str, Any]
    freevars: tuple[str, ...]
    closure: tuple[Any, ...]
    flags: int


def normalize_context(
    context: Any, *, file: Optional[str] = None, line: Optional[int] = None
) -> ContextPattern:
    """Validate a context pattern; None and "_" both mean "not bound"."""

    if context is None or context == PLACEHOLDER:
        return None

    if isinstance(context, str):
        names: tuple[Any, ...] = (context,)
    elif isinstance(context, (list, tuple)) and context:
        names = tuple(context)
    else:
        raise DeclarationError(
            code="E_UNSUPPORTED_CONTEXT",
            message=(
                "context pattern must be '_', an identifier, or a non-empty list of identifiers, "
                f"got {context!r}"
            ),
            file=file,
            line=line,
            path="context",
        )

    for name in names:
        if not is_identifier(name):
            raise DeclarationError(
                code="E_UNSUPPORTED_CONTEXT",
                message=f"context pattern names must be identifiers, got {name!r}",
                file=file,
                line=line,
                path="context",
            )

    return context if isinstance(context, str) else names


def parse_body(body: Callable[..., Any]) -> BodySource:
    code = getattr(body, "__code__", None)
    if code is None:
        raise BodySourceError(
            code="E_BODY_NOT_FUNCTION",
            message=f"test body must be a function, got {type(body).__name__}",
        )

    try:
        lines, first = inspect.getsourcelines(body)
    except (OSError, TypeError) as e:
        raise BodySourceError(
            code="E_BODY_SOURCE_UNAVAILABLE",
            message=f"cannot read the source of {body.__qualname__}: {e}",
            file=code.co_filename,
            line=code.co_firstlineno,
        ) from e

    source = "".join(lines)
    offset = first - 1
    # Indented bodies (methods, nested defs) parse inside a dummy block so
    # column offsets stay those of the file.
    if source[:1] in (" ", "\t"):
        source = "if True:\n" + source
        offset -= 1

    try:
        tree = ast.parse(source)
    except SyntaxError as e:
        raise BodySourceError(
            code="E_BODY_SOURCE_UNAVAILABLE",
            message=f"cannot parse the source of {body.__qualname__}: {e.msg}",
            file=code.co_filename,
            line=code.co_firstlineno,
        ) from e

    node = tree.body[0]
    if isinstance(node, ast.If):
        node = node.body[0]
    if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) or node.name != body.__name__:
        raise BodySourceError(
            code="E_BODY_NOT_FUNCTION",
            message=f"test body must be a def statement, got {body.__qualname__}",
            file=code.co_filename,
            line=code.co_firstlineno,
        )
    ast.increment_lineno(node, offset)

    closure: list[Any] = []
    for name, cell in zip(code.co_freevars, body.__closure__ or ()):
        try:
            closure.append(cell.cell_contents)
        except ValueError as e:
            raise BodySourceError(
                code="E_BODY_CLOSURE_UNBOUND",
                message=f"closure variable '{name}' of {body.__qualname__} is not bound yet",
                file=code.co_filename,
                line=code.co_firstlineno,
            ) from e

    return BodySource(
        node=node,
        filename=code.co_filename,
        globals=body.__globals__,
        freevars=tuple(code.co_freevars),
        closure=tuple(closure),
        flags=code.co_flags & __future__.annotations.compiler_flag,
    )


def inject(
    values: ParameterSet,
    source: BodySource,
    *,
    line: int,
    context: ContextPattern = None,
    context_factory: Optional[Callable[[Any], Any]] = None,
) -> Callable[..., Any]:
    """Return a new function running the body with `values` bound as locals.

    Body arguments named like a parameter (or a context target) are removed from
    the signature; every other argument is left for the host to supply.
    """

    node = copy.deepcopy(source.node)
    node.decorator_list = []

    targets = _context_targets(context)
    node.args = _drop_arguments(node.args, set(values) | set(targets))

    prologue: list[str] = []
    if context is not None:
        if context_factory is None:
            raise ValueError("context_factory is required when a context pattern is bound")
        if REQUEST_FIXTURE not in _argument_names(node.args):
            node.args.kwonlyargs.append(ast.arg(arg=REQUEST_FIXTURE))
            node.args.kw_defaults.append(None)
        if isinstance(context, str):
            prologue.append(f"{context} = {CONTEXT_NAME}({REQUEST_FIXTURE})")
        else:
            unpack = ", ".join(targets) + ("," if len(targets) == 1 else "")
            prologue.append(f"{unpack} = {CONTEXT_NAME}({REQUEST_FIXTURE}).pick({targets!r})")

    for name in values:
        prologue.append(f"{name} = {VALUES_NAME}[{name!r}]")

    node.body = [_statement(text, line) for text in prologue] + node.body

    factory = _compile_factory(source, node)
    return factory(dict(values), context_factory, *source.closure)


def _context_targets(context: ContextPattern) -> tuple[str, ...]:
    if context is None:
        return ()
    if isinstance(context, str):
        return (context,)
    return tuple(context)


def _statement(text: str, line: int) -> ast.stmt:
    stmt = ast.parse(text).body[0]
    ast.increment_lineno(stmt, line - 1)
    return stmt


def _argument_names(args: ast.arguments) -> set[str]:
    names = {a.arg for a in args.posonlyargs + args.args + args.kwonlyargs}
    if args.vararg is not None:
        names.add(args.vararg.arg)
    if args.kwarg is not None:
        names.add(args.kwarg.arg)
    return names


def _drop_arguments(args: ast.arguments, names: set[str]) -> ast.arguments:
    positional = args.posonlyargs + args.args
    defaults: list[Optional[ast.expr]] = [None] * (len(positional) - len(args.defaults))
    defaults += list(args.defaults)

    kept = [(a, d) for a, d in zip(positional, defaults) if a.arg not in names]
    posonly_count = sum(1 for a in args.posonlyargs if a.arg not in names)
    kept_args = [a for a, _ in kept]
    kept_defaults = [d for _, d in kept if d is not None]

    kwonly = [(a, d) for a, d in zip(args.kwonlyargs, args.kw_defaults) if a.arg not in names]

    args.posonlyargs = kept_args[:posonly_count]
    args.args = kept_args[posonly_count:]
    args.defaults = kept_defaults
    args.kwonlyargs = [a for a, _ in kwonly]
    args.kw_defaults = [d for _, d in kwonly]
    return args


def _compile_factory(source: BodySource, node: FunctionNode) -> Callable[..., Any]:
    params = ", ".join((VALUES_NAME, CONTEXT_NAME) + source.freevars)
    module = ast.parse(f"def {FACTORY_NAME}({params}):\n    pass\n")
    factory = module.body[0]
    assert isinstance(factory, ast.FunctionDef)
    factory.body = [node, ast.Return(value=ast.Name(id=node.name, ctx=ast.Load()))]
    ast.fix_missing_locations(module)

    code = compile(module, source.filename, "exec", flags=source.flags, dont_inherit=True)
    namespace: dict[str, Any] = {}
    exec(code, source.globals, namespace)
    return namespace[FACTORY_NAME]
