from __future__ import annotations

from typing import Any, Callable, Optional

from loguru import logger

from yapara.core.errors import DeclarationError, DuplicateNameError
from yapara.core.expand.config import ExpandConfig, get_active_config
from yapara.core.inject.inject_bindings import inject, normalize_context, parse_body
from yapara.core.model import GeneratedTest, TestDeclaration
from yapara.core.naming.name_tests import compose_name, is_oversized, resolve_id
from yapara.core.normalize.normalize_parameters import normalize
from yapara.core.register.register_tests import TestContext, make_stub


def expand(
    name: str,
    context: Any,
    parameters: Any,
    body: Optional[Callable[..., Any]] = None,
    *,
    file: Optional[str] = None,
    line: Optional[int] = None,
    config: ExpandConfig | None = None,
) -> list[GeneratedTest]:
    """Expand one parameterized declaration into generated tests.

    Without a body every parameter set yields a not-implemented stub, named
    exactly as the full form would name it.
    """
    if body is not None:
        code = getattr(body, "__code__", None)
        if code is not None:
            file = file or code.co_filename
            line = line or code.co_firstlineno

    decl = TestDeclaration(
        name=name,
        context=context,
        parameters=parameters,
        body=body,
        file=file,
        line=line,
    )
    return expand_declaration(decl, config=config)


def expand_declaration(decl: TestDeclaration, *, config: ExpandConfig | None = None) -> list[GeneratedTest]:
    cfg = config or get_active_config()

    if not isinstance(decl.name, str) or not decl.name.strip():
        raise DeclarationError(
            code="E_INVALID_TEST_NAME",
            message=f"test name must be a non-empty string, got {decl.name!r}",
            file=decl.file,
            line=decl.line,
            path="name",
        )

    context = normalize_context(decl.context, file=decl.file, line=decl.line)
    entries = normalize(decl.parameters, file=decl.file, line=decl.line)
    source = parse_body(decl.body) if decl.body is not None else None
    marks = list(getattr(decl.body, "pytestmark", []))
    line = decl.line or 1

    logger.debug("expanding {!r}: {} parameter sets", decl.name, len(entries))

    tests: list[GeneratedTest] = []
    for index, entry in enumerate(entries, start=1):
        fragment, values = resolve_id(entry)
        test_name = compose_name(decl.name, fragment, index, max_bytes=cfg.max_name_bytes)
        if is_oversized(decl.name, fragment, max_bytes=cfg.max_name_bytes):
            logger.debug("name for parameter set {} exceeds {} bytes; using {!r}", index, cfg.max_name_bytes, test_name)

        if source is None:
            fn = make_stub(test_name)
        else:
            fn = inject(values, source, line=line, context=context, context_factory=TestContext)
            fn.__doc__ = decl.body.__doc__
            if marks:
                fn.pytestmark = list(marks)

        tests.append(
            GeneratedTest(
                name=test_name,
                index=index,
                values=values,
                context=context,
                function=fn,
                stub=source is None,
            )
        )

    _check_duplicates(tests, cfg, decl)
    return tests


def _check_duplicates(tests: list[GeneratedTest], cfg: ExpandConfig, decl: TestDeclaration) -> None:
    first_index: dict[str, int] = {}
    for t in tests:
        if t.name not in first_index:
            first_index[t.name] = t.index
            continue
        if cfg.on_duplicate == "error":
            raise DuplicateNameError(
                code="E_DUPLICATE_TEST_NAME",
                message=(
                    f"parameter sets {first_index[t.name]} and {t.index} both produce the test name "
                    f"{t.name!r}; give one of them an explicit id"
                ),
                file=decl.file,
                line=decl.line,
                path="parameters",
            )
        logger.warning("parameter set {} replaces earlier test {!r}", t.index, t.name)
