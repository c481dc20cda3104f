"""Typer CLI for the CockroachDB transformer."""

from __future__ import annotations

from dataclasses import dataclass

import typer
from rich.console import Console
from rich.markup import escape

from crdb_transformer.config.defaults import CONFIG_ENV_VAR, REPLICAS_ENV_VAR
from crdb_transformer.config.loader import load_config_text, resolve_config
from crdb_transformer.config.models import ResolvedConfig
from crdb_transformer.config.templates import render_manifests
from crdb_transformer.errors import TransformerError
from crdb_transformer.observability.logging import configure_logging
from crdb_transformer.pipeline.runner import transform

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name="crdb-transform",
    help=(
        "Append CockroachDB manifests to a resource stream. "
        "With no command, copies stdin to stdout and appends the generated "
        "resources."
    ),
)


@dataclass
class _Inputs:
    config: str
    config_file: str | None
    default_replicas: str


def _fail(exc: Exception) -> typer.Exit:
    err_console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
    return typer.Exit(1)


def _config_text(inputs: _Inputs) -> str:
    if inputs.config_file is None:
        return inputs.config
    try:
        return load_config_text(inputs.config_file)
    except (OSError, TransformerError) as exc:
        raise _fail(exc) from exc


def _resolve(inputs: _Inputs) -> ResolvedConfig:
    text = _config_text(inputs)
    try:
        return resolve_config(text, inputs.default_replicas or None)
    except TransformerError as exc:
        raise _fail(exc) from exc


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: str = typer.Option(
        "", "--config", envvar=CONFIG_ENV_VAR, help="Function config YAML"
    ),
    config_file: str | None = typer.Option(
        None, "--config-file", help="Read the function config from a file"
    ),
    default_replicas: str = typer.Option(
        "",
        "--default-replicas",
        envvar=REPLICAS_ENV_VAR,
        help="Replica count used when the config does not set spec.replicas",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    log_json: bool = typer.Option(False, "--log-json", help="Emit JSON logs"),
) -> None:
    """Resolve the config and append the generated manifests to stdin."""
    configure_logging(verbose=verbose, json=log_json)
    inputs = _Inputs(
        config=config, config_file=config_file, default_replicas=default_replicas
    )
    ctx.obj = inputs
    if ctx.invoked_subcommand is not None:
        return

    text = _config_text(inputs)
    source = typer.get_binary_stream("stdin")
    sink = typer.get_binary_stream("stdout")
    try:
        transform(text, inputs.default_replicas or None, source, sink)
    except TransformerError as exc:
        raise _fail(exc) from exc


@app.command()
def validate(ctx: typer.Context) -> None:
    """Resolve the function config and print the values it produces."""
    resolved = _resolve(ctx.obj)
    console.print(
        f"[green]Valid[/green]: name={escape(repr(resolved.name))} "
        f"replicas={resolved.replicas}"
    )


@app.command()
def render(ctx: typer.Context) -> None:
    """Print only the generated manifests, without reading stdin."""
    resolved = _resolve(ctx.obj)
    try:
        rendered = render_manifests(resolved)
    except TransformerError as exc:
        raise _fail(exc) from exc
    sink = typer.get_binary_stream("stdout")
    sink.write(rendered.encode("utf-8"))
    sink.flush()
