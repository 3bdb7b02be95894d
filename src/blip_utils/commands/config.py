# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Config command for blip-utils.

Validates and displays the host configuration.
"""

import typer
import yaml

from blip_utils.config import get_config_path, load_config
from blip_utils.dates import Time
from blip_utils.errors import ConfigError

app = typer.Typer(help="Manage and validate host configuration")


@app.command()
def validate(
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """
    Validate configuration file.

    Checks that the config file is valid YAML with known keys and a
    known timezone.
    """
    typer.echo(f"Validating configuration: {get_config_path(config_path)}")
    typer.echo()

    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except ConfigError as e:
        typer.echo(f"Validation failed: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("Configuration structure is valid")
    typer.echo(f"Effective timezone: {Time.from_config(config).default_time_zone}")
    typer.echo()
    typer.echo("Configuration validation complete!")


@app.command()
def show(
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Print the effective configuration as YAML."""
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(yaml.safe_dump(config.to_dict(), sort_keys=False).rstrip())
