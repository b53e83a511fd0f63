"""CLI entry point for ssmedit."""

from __future__ import annotations

import functools
import json
import logging
import sys
from collections.abc import Callable
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ssmedit import __version__
from ssmedit.editor import EditorError
from ssmedit.formats import FormatError
from ssmedit.formatters import render_parameter_list, summaries_to_json
from ssmedit.models import Format
from ssmedit.store import DEFAULT_REGION, ParameterStore, StoreConfig, StoreError
from ssmedit.workflow import (
    EditCancelled,
    create_parameter,
    delete_parameter,
    edit_parameter,
    get_parameter_value,
    list_parameters,
    upload_parameter,
)

console = Console()
err_console = Console(stderr=True)

_FORMAT_CHOICE = click.Choice([f.value for f in Format], case_sensitive=False)

# Failures that end a command with "Error: ..." and exit status 1.
_COMMAND_ERRORS = (StoreError, FormatError, EditorError, EditCancelled, OSError, UnicodeError)


def _abort(msg: str) -> None:
    err_console.print(f"[bold red]Error:[/] {escape(msg)}")
    sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose)],
        force=True,
    )
    if not verbose:
        # botocore is chatty at INFO about credential lookups.
        logging.getLogger("botocore").setLevel(logging.WARNING)


def aws_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add per-command ``--region`` and ``--profile`` options, passed on as ``store_config``."""

    @click.option(
        "--region",
        default=DEFAULT_REGION,
        envvar="AWS_REGION",
        show_default=True,
        help="AWS region.",
    )
    @click.option("--profile", default=None, help="AWS named profile.")
    @functools.wraps(func)
    def wrapper(*args: Any, region: str, profile: str | None, **kwargs: Any) -> Any:
        return func(*args, store_config=StoreConfig(region=region, profile=profile), **kwargs)

    return wrapper


def _report_invalid(exc: FormatError) -> bool:
    console.print(f"[bold yellow]Validation failed:[/] {escape(str(exc))}")
    console.print("[dim]Please try again (Ctrl-C to give up).[/]")
    return True


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.version_option(__version__, "--version", "-V")
def main(verbose: bool) -> None:
    """Edit AWS SSM Parameter Store values in your $EDITOR.

    \b
    Examples:
      ssmedit list --prefix /app/prod
      ssmedit edit /app/prod/config --format json
      ssmedit create /app/staging/config --from /app/prod/config
      ssmedit upload /app/prod/env ./prod.env --format env
    """
    _configure_logging(verbose)


@main.command("list")
@click.option("--prefix", default=None, help="Only list names beginning with this prefix.")
@click.option(
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table).",
)
@aws_options
def list_cmd(prefix: str | None, output: str, store_config: StoreConfig) -> None:
    """List parameters with their version and last-modified time."""
    try:
        store = ParameterStore.from_config(store_config)
        summaries = list_parameters(store, prefix)
    except StoreError as exc:
        _abort(str(exc))
        return

    if output == "json":
        click.echo(json.dumps(summaries_to_json(summaries), indent=2))
        return
    if not summaries:
        where = f" under {escape(prefix)}" if prefix else ""
        console.print(f"[yellow]No parameters found{where}[/]")
        return
    console.print(render_parameter_list(summaries, prefix))


@main.command("get")
@click.argument("key")
@aws_options
def get_cmd(key: str, store_config: StoreConfig) -> None:
    """Print the (decrypted) value of KEY."""
    try:
        store = ParameterStore.from_config(store_config)
        value = get_parameter_value(store, key)
    except StoreError as exc:
        _abort(str(exc))
        return
    click.echo(value)


@main.command("edit")
@click.argument("key")
@click.option(
    "--format",
    "fmt",
    type=_FORMAT_CHOICE,
    default=None,
    help="Validate content as this format (default: detected from the current value).",
)
@aws_options
def edit_cmd(key: str, fmt: str | None, store_config: StoreConfig) -> None:
    """Edit the value of KEY in $EDITOR and save it back if it changed.

    Invalid content reopens the editor until it validates.
    """
    try:
        store = ParameterStore.from_config(store_config)
        result = edit_parameter(store, key, fmt, on_invalid=_report_invalid)
    except _COMMAND_ERRORS as exc:
        _abort(str(exc))
        return

    if result.committed:
        console.print(f"[bold green]Updated[/] {escape(key)} (version {result.version})")
    else:
        console.print("[dim]No changes detected, parameter not updated.[/]")


@main.command("create")
@click.argument("key")
@click.option("--from", "source", default=None, help="Seed the editor with this parameter's value.")
@click.option(
    "--format",
    "fmt",
    type=_FORMAT_CHOICE,
    default=None,
    help="Validate content as this format (default: detected from --from, else none).",
)
@aws_options
def create_cmd(
    key: str, source: str | None, fmt: str | None, store_config: StoreConfig
) -> None:
    """Create KEY from content written in $EDITOR."""
    try:
        store = ParameterStore.from_config(store_config)
        result = create_parameter(store, key, source, fmt, on_invalid=_report_invalid)
    except _COMMAND_ERRORS as exc:
        _abort(str(exc))
        return

    console.print(f"[bold green]Created[/] {escape(key)} ({result.format.value})")


@main.command("delete")
@click.argument("key")
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt.")
@aws_options
def delete_cmd(key: str, yes: bool, store_config: StoreConfig) -> None:
    """Delete KEY."""
    if not yes and not click.confirm(f"Delete {key}?"):
        console.print("[dim]Aborted.[/]")
        return

    try:
        store = ParameterStore.from_config(store_config)
        delete_parameter(store, key)
    except StoreError as exc:
        _abort(str(exc))
        return
    console.print(f"[bold green]Deleted[/] {escape(key)}")


@main.command("upload")
@click.argument("key")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format",
    "fmt",
    type=_FORMAT_CHOICE,
    default=None,
    help="Refuse to upload unless FILE validates as this format.",
)
@aws_options
def upload_cmd(key: str, file: str, fmt: str | None, store_config: StoreConfig) -> None:
    """Set KEY to the contents of FILE, creating or overwriting it."""
    try:
        store = ParameterStore.from_config(store_config)
        result = upload_parameter(store, key, file, fmt)
    except _COMMAND_ERRORS as exc:
        _abort(str(exc))
        return
    console.print(f"[bold green]Uploaded[/] {escape(file)} → {escape(key)} (version {result.version})")


@main.command("version")
def version_cmd() -> None:
    """Print the ssmedit version."""
    click.echo(f"ssmedit {__version__}")
