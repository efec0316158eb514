from __future__ import annotations

import json
from typing import Any

import typer

from yapara.core.errors import ParameterizeError, ParameterLoadError
from yapara.core.expand.config import ConfigError, ExpandConfig, load_and_merge
from yapara.core.expand.expand_declaration import expand
from yapara.core.io.load_parameters import load_parameters
from yapara.core.model import GeneratedTest
from yapara.core.normalize.normalize_parameters import detect_form
from yapara.core.register.register_tests import registered_name
from yapara.logging import setup_logging

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log expansion details to stderr"),
) -> None:
    """yapara CLI: preview how parameter files expand into tests."""
    if verbose:
        setup_logging(level="DEBUG")


@app.command("names")
def names(
    path: str = typer.Argument(..., help="Path to a parameter file (.yaml/.yml/.json)"),
    name: str = typer.Option(..., "--name", help="Base test name"),
    config_file: str | None = typer.Option(None, "--config", help="Optional YAML file with expansion options"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Print the tests a declaration over PATH would register."""
    _check_format(format)
    cfg = _load_config(config_file)
    _, tests = _expand_file(path, name, cfg, command="names", format=format)

    if format == "text":
        for t in tests:
            typer.echo(registered_name(t.name, cfg.test_prefix))
        return

    _emit_json(
        "names",
        ok=True,
        errors=[],
        exit_code=0,
        tests=[
            {
                "index": t.index,
                "name": t.name,
                "registered_as": registered_name(t.name, cfg.test_prefix),
                "values": t.values,
            }
            for t in tests
        ],
    )


@app.command("check")
def check(
    path: str = typer.Argument(..., help="Path to a parameter file (.yaml/.yml/.json)"),
    config_file: str | None = typer.Option(None, "--config", help="Optional YAML file with expansion options"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Validate a parameter file: container shape, arity, names and duplicates."""
    _check_format(format)
    cfg = _load_config(config_file)
    raw, tests = _expand_file(path, "check", cfg, command="check", format=format)
    form = detect_form(raw)

    if format == "text":
        typer.echo(f"OK: {len(tests)} parameter sets ({form} form)")
        return

    _emit_json(
        "check",
        ok=True,
        errors=[],
        exit_code=0,
        summary={"parameter_sets": len(tests), "form": form},
    )


@app.command("config")
def show_config(
    config_file: str | None = typer.Option(None, "--config", help="Optional YAML file with expansion options"),
) -> None:
    """Print the effective expansion options."""
    cfg = _load_config(config_file)
    for key, value in cfg.to_dict().items():
        typer.echo(f"{key}: {value!r}")


def _expand_file(
    path: str, name: str, cfg: ExpandConfig, *, command: str, format: str
) -> tuple[list[Any], list[GeneratedTest]]:
    try:
        raw = load_parameters(path)
    except ParameterLoadError as e:
        if format == "json":
            _emit_json(command, ok=False, errors=[e], exit_code=1)
        _print_errors([e])
        raise typer.Exit(code=1)

    try:
        return raw, expand(name, None, raw, None, file=path, config=cfg)
    except ParameterizeError as e:
        if format == "json":
            _emit_json(command, ok=False, errors=[e], exit_code=2)
        _print_errors([e])
        raise typer.Exit(code=2)


def _load_config(config_file: str | None) -> ExpandConfig:
    try:
        return load_and_merge(config_file)
    except FileNotFoundError:
        _print_errors(
            [
                ParameterLoadError(
                    code="E_CONFIG_FILE_NOT_FOUND",
                    message=f"config file not found: {config_file}",
                    path="config",
                )
            ]
        )
        raise typer.Exit(code=1)
    except ConfigError as e:
        _print_errors(
            [
                ParameterizeError(
                    code="E_CONFIG_FILE_INVALID",
                    message=str(e),
                    file=config_file,
                    path="config",
                )
            ]
        )
        raise typer.Exit(code=2)


def _check_format(format: str) -> None:
    if format not in ("text", "json"):
        err = ParameterizeError(
            code="E_UNKNOWN_FORMAT",
            message=f"unknown format: {format} (choose one of: text, json)",
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


def _to_item(e: ParameterizeError) -> dict[str, Any]:
    source = "load" if isinstance(e, ParameterLoadError) else "expand"
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "line": e.line,
        "path": e.path,
        "severity": "error",
        "source": source,
    }


def _emit_json(command: str, *, ok: bool, errors: list[ParameterizeError], exit_code: int, **extra: Any) -> None:
    payload = {
        "tool": "yapara",
        "command": command,
        "ok": ok,
        "error_count": len(errors),
        "errors": [_to_item(e) for e in errors],
        **extra,
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))
    raise typer.Exit(code=exit_code)


def _print_errors(errors: list[ParameterizeError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="yapara")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
