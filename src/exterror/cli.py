"""Command-line interface for exterror."""

from __future__ import annotations

import importlib.metadata
import json
from pathlib import Path
from typing import Any

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console

from exterror.config import ConfigError, ExtErrorConfig, configure, load_config, serialize_config
from exterror.entity import ExtError
from exterror.errors import TemplateError
from exterror.rendering import DEFAULT_TEMPLATE_SOURCE, load_template

app = typer.Typer(help="exterror CLI.")
template_app = typer.Typer(help="Inspect and check report templates.")
app.add_typer(template_app, name="template")
console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(importlib.metadata.version("exterror"))
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", callback=_version_callback, is_eager=True),
) -> None:
    pass


def _print_error(code: str, message: str) -> None:
    typer.echo(f"{code}: {message}", err=True)


def _load(config_path: Path | None, overrides: dict[str, Any] | None = None) -> ExtErrorConfig:
    try:
        return load_config(config_path, overrides)
    except ConfigError as exc:
        _print_error(exc.code, str(exc))
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        _print_error(ConfigError.code, str(exc))
        raise typer.Exit(code=1) from exc


@app.command()
def config(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        dir_okay=False,
        resolve_path=True,
    ),
    output_format: str = typer.Option("yaml", "--format", "-f"),
    buffer_size: int | None = typer.Option(None, "--buffer-size"),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Show current configuration."""
    overrides: dict[str, Any] = {}
    if buffer_size is not None:
        overrides["stack"] = {"buffer_size": buffer_size}
    if log_level is not None:
        overrides["logging"] = {"level": log_level.upper()}
    payload = serialize_config(_load(config_path, overrides))
    output_format_normalized = output_format.lower()
    if output_format_normalized == "yaml":
        output = yaml.safe_dump(payload, sort_keys=False)
    elif output_format_normalized == "json":
        output = json.dumps(payload, indent=2)
    else:
        raise typer.BadParameter("Format must be 'yaml' or 'json'.")
    typer.echo(output)


@template_app.command("show")
def show_template() -> None:
    """Print the built-in report template."""
    typer.echo(DEFAULT_TEMPLATE_SOURCE)


def _sample_error() -> ExtError:
    root = ConnectionRefusedError(111, "Connection refused")
    parent = ExtError(1001, "Could not reach the billing service", root)
    return (
        ExtError(2002, "Your invoice could not be saved", parent)
        .with_debug_message("retry budget exhausted")
        .with_debug_field("invoice_id", 17)
        .with_debug_field("attempts", 3)
    )


@template_app.command("check")
def check_template(
    template_path: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        dir_okay=False,
        resolve_path=True,
    ),
) -> None:
    """Compile a template and render a sample error chain with it."""
    configure(_load(config_path))
    try:
        template = load_template(template_path)
        sample = _sample_error()
        sample.with_template(template)
        parent = sample.unwrap()
        if isinstance(parent, ExtError):
            parent.with_template(template)
        report = sample.render()
    except (ConfigError, TemplateError) as exc:
        _print_error(exc.code, str(exc))
        raise typer.Exit(code=1) from exc
    typer.echo(report)
    console.print(f"[green]Template OK:[/green] {template_path}")
