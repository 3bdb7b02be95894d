# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Time command for blip-utils.

Previews how the emulated ``time`` object parses and renders dates.
"""

from datetime import datetime, timezone
from typing import Optional

import typer

from blip_utils.config import load_config
from blip_utils.dates import Time
from blip_utils.errors import BlipError

app = typer.Typer(help="Preview date parsing and formatting")


def _time_for(config_path: Optional[str], time_zone: Optional[str]) -> Time:
    if time_zone:
        return Time(time_zone)
    return Time.from_config(load_config(config_path))


@app.command()
def parse(
    date: str = typer.Argument(..., help="Date string to parse"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Input format, e.g. dd/MM/yyyy"),
    culture: Optional[str] = typer.Option(None, "--culture", help="Culture for names (default en-US)"),
    time_zone: Optional[str] = typer.Option(None, "--timezone", "-t", help="Target timezone"),
    output_format: Optional[str] = typer.Option(None, "--output-format", "-o", help="Output format"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """
    Parse a date the way time.parse_date does.

    Examples:
        blip-utils time parse 15/01/2024 --format dd/MM/yyyy
        blip-utils time parse 2024-01-15T10:00:00Z -t UTC -o "dddd, DD MMMM YYYY"
    """
    try:
        time = _time_for(config_path, time_zone)
        zoned = time.parse_date(date, format=format, culture=culture)
        typer.echo(time.date_to_string(zoned, format=output_format))
    except (BlipError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def now(
    time_zone: Optional[str] = typer.Option(None, "--timezone", "-t", help="Timezone to render in"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Print the current time as a script would see it."""
    try:
        time = _time_for(config_path, time_zone)
        typer.echo(time.date_to_string(datetime.now(timezone.utc), format=format))
    except (BlipError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
