# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Main CLI entry point for blip-utils.

Runs a bot script locally with the emulated host objects injected,
then prints its output and the final context variables.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer

from blip_utils import __version__
from blip_utils.config import load_config
from blip_utils.errors import BlipError
from blip_utils.runtime import ScriptResult, format_exception, run_script


app = typer.Typer(
    name="blip-utils",
    help="Run bot scripts locally against emulated host objects",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _parse_kv_args(args: Optional[List[str]]) -> dict:
    """Parse name=value arguments into a dict.

    Supports:
    - Booleans: true, false
    - Nulls: null, none
    - Numbers: integers and floats
    - JSON: values starting with { or [ are parsed as JSON
    - Strings: everything else
    """
    if not args:
        return {}
    result = {}
    for arg in args:
        if "=" in arg:
            key, value = arg.split("=", 1)
            if value.lower() == "true":
                result[key] = True
            elif value.lower() == "false":
                result[key] = False
            elif value.lower() == "null" or value.lower() == "none":
                result[key] = None
            elif value.startswith("{") or value.startswith("["):
                try:
                    result[key] = json.loads(value)
                except json.JSONDecodeError:
                    result[key] = value
            else:
                try:
                    result[key] = int(value)
                except ValueError:
                    try:
                        result[key] = float(value)
                    except ValueError:
                        result[key] = value
        else:
            raise typer.BadParameter(f"expected name=value, got: {arg}")
    return result


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def _render_result(result: ScriptResult, format_type: str) -> None:
    if format_type == "json":
        typer.echo(
            json.dumps(
                {
                    "success": result.success,
                    "output": result.output,
                    "error": result.error,
                    "variables": result.variables,
                    "duration_ms": result.duration_ms,
                },
                default=str,
                indent=2,
            )
        )
        return

    if result.success:
        typer.echo(f"Output: {_render_value(result.output)}")
    else:
        typer.echo(f"Captured: {result.error}")
    typer.echo(f"Duration: {result.duration_ms} ms")
    if result.variables:
        typer.echo("Variables:")
        for name, value in sorted(result.variables.items()):
            typer.echo(f"  {name} = {_render_value(value)}")


@app.command()
def run(
    script: Path = typer.Argument(..., help="Script file defining run()"),
    args: Optional[List[str]] = typer.Argument(None, help="name=value variables to seed the context"),
    inputs: Optional[List[str]] = typer.Option(None, "--input", "-i", help="Variable passed to run(), in order"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Variable that receives run()'s result"),
    time_zone: Optional[str] = typer.Option(None, "--timezone", "-t", help="Bot timezone (enables it)"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
    capture: Optional[bool] = typer.Option(None, "--capture/--no-capture", help="Store script errors in a variable"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: text, json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run a script in a fresh session."""
    _configure_logging(verbose)
    if format not in ("text", "json"):
        typer.echo(f"Error: unknown format '{format}' (use text or json)", err=True)
        raise typer.Exit(1)

    variables = _parse_kv_args(args)

    try:
        config = load_config(config_path)
        if time_zone:
            config.bot_timezone = time_zone
            config.use_bot_timezone = True
        if capture is not None:
            config.capture_exceptions = capture
        config.validate()

        result = run_script(
            script,
            config=config,
            variables=variables,
            inputs=inputs or [],
            output_variable=output,
        )
    except (BlipError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except Exception as e:
        typer.echo(f"Script error: {format_exception(e)}", err=True)
        raise typer.Exit(1)

    _render_result(result, format)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    typer.echo(f"blip-utils version {__version__}")


# Static commands (config, time)
from blip_utils.commands import config, dates

app.add_typer(config.app, name="config")
app.add_typer(dates.app, name="time")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
