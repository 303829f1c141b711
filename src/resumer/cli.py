# src/resumer/cli.py
"""resumer Command Line Interface.

Entry point for the resumer CLI tool:
- check: validate a job type's contract
- run: run one slice (or every slice with --until-done) and print the outcome
"""

from __future__ import annotations

import importlib
import json
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from resumer import __version__
from resumer.contracts import (
    ArgumentError,
    CursorDecodeError,
    CursorEncodeError,
    CursorSerializationError,
    DeprecationMode,
    OutcomeStatus,
)
from resumer.core.canonical import cursor_loads
from resumer.core.config import ResumerSettings, SliceSettings, load_settings
from resumer.core.cursor import DeprecationState
from resumer.engine import IterationRunner, SliceDriver, SliceLimits, shutdown_signal_context
from resumer.jobs import JobRegistry

__all__ = ["app"]

app = typer.Typer(
    name="resumer",
    help="resumer: resumable, interruptible iteration for background jobs.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"resumer version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """resumer: resumable, interruptible iteration for background jobs."""
    from resumer.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "WARNING")


def _import_job(target: str) -> type:
    """Resolve ``package.module:ClassName``."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        typer.secho(f"Error: expected module:Class, got {target!r}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        typer.secho(f"Error: cannot import {module_name}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from None
    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            typer.secho(f"Error: {module_name} has no attribute {attr}", fg=typer.colors.RED, err=True)
            raise typer.Exit(2) from None
    if not isinstance(obj, type):
        typer.secho(f"Error: {target} is not a class", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    return obj


def _load_settings(settings: Path | None) -> ResumerSettings:
    if settings is None:
        return ResumerSettings()
    try:
        return load_settings(settings)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.secho(f"Configuration errors:\n{e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None


@app.command()
def check(
    job: str = typer.Argument(..., help="Job class as module:Class."),
) -> None:
    """Validate that a job type satisfies the job contract."""
    job_cls = _import_job(job)
    registry = JobRegistry()
    try:
        spec = registry.ensure(job_cls)
    except ArgumentError as e:
        typer.secho(f"Invalid job: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None
    typer.secho(f"{spec.name}: OK (cursor accepted as {spec.cursor_binding})", fg=typer.colors.GREEN)


@app.command()
def run(
    job: str = typer.Argument(..., help="Job class as module:Class."),
    params: str = typer.Option("{}", "--params", "-p", help="Job params as JSON."),
    cursor: str | None = typer.Option(None, "--cursor", "-c", help="Resumption cursor as JSON."),
    max_iterations: int | None = typer.Option(None, "--max-iterations", min=1, help="Stop after N iterations."),
    max_runtime: float | None = typer.Option(None, "--max-runtime", min=0.001, help="Stop after N seconds."),
    settings: Path | None = typer.Option(None, "--settings", "-s", help="Path to settings YAML file."),
    strict: bool = typer.Option(False, "--strict", help="Reject non-primitive cursors instead of warning."),
    until_done: bool = typer.Option(False, "--until-done", help="Re-run interrupted slices until the job finishes."),
    max_slices: int | None = typer.Option(None, "--max-slices", min=1, help="With --until-done, give up after N slices."),
) -> None:
    """Run a job slice and print the outcome as JSON."""
    job_cls = _import_job(job)
    config = _load_settings(settings)

    try:
        job_params = json.loads(params)
    except json.JSONDecodeError as e:
        typer.secho(f"Error: --params is not valid JSON: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from None
    try:
        start_cursor = None if cursor is None else cursor_loads(cursor)
    except CursorDecodeError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from None

    cursor_settings = config.cursor
    if strict:
        cursor_settings = cursor_settings.model_copy(update={"mode": DeprecationMode.RAISE})
    slice_settings = SliceSettings(
        max_runtime_seconds=max_runtime if max_runtime is not None else config.slice.max_runtime_seconds,
        max_iterations=max_iterations if max_iterations is not None else config.slice.max_iterations,
    )

    registry = JobRegistry()
    runner = IterationRunner(registry=registry, deprecation=DeprecationState.from_settings(cursor_settings))

    try:
        registry.register(job_cls)
        with shutdown_signal_context() as shutdown_event:

            def _limits() -> SliceLimits:
                return SliceLimits.from_settings(slice_settings, shutdown_event=shutdown_event)

            if until_done:
                driver = SliceDriver(runner, stop_factory=_limits, max_slices=max_slices)
                outcomes = driver.drive(job_cls, job_params, start_cursor).outcomes
            else:
                outcomes = [runner.run(job_cls(), job_params, start_cursor, _limits())]
    except (ArgumentError, CursorSerializationError, CursorEncodeError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None

    final = outcomes[-1]
    summary = final.to_dict()
    summary["slices"] = len(outcomes)
    typer.echo(json.dumps(summary, default=repr))
    if final.status == OutcomeStatus.FAILED:
        raise typer.Exit(1)
