#!/usr/bin/env python3
"""Freckle introspection CLI - Entry point."""
import logging
from pathlib import Path

import click
from colorama import Fore, Style, init

from config import app_config
from freckle.cli.console import IntrospectionConsole

# Initialize colorama
init(autoreset=True)


def print_banner():
    """Print application banner."""
    click.echo(f"{Fore.CYAN}{'=' * 44}")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}Freckle Introspection{Fore.CYAN}                ║")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}Generic admin API discovery{Fore.CYAN}          ║")
    click.echo(f"{Fore.CYAN}{'=' * 44}{Style.RESET_ALL}")
    click.echo()


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """Freckle - Discover dashboards in any OpenAPI-described admin API."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--spec-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a local OpenAPI document (JSON or YAML)",
)
@click.option("--spec-url", help="Explicit spec URL (skips location discovery)")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Export the discovery result to a JSON file",
)
@click.option("--save", is_flag=True, help="Export to the configured output directory")
@click.option("--product", default="default", help="Product identifier")
def discover(spec_file, spec_url, output, save, product):
    """Discover and rank dashboard endpoints."""
    print_banner()

    if save and not output:
        output = Path(app_config.output_dir) / f"{product}_endpoints.json"

    console = IntrospectionConsole(product_id=product)
    console.discover(spec_file=spec_file, spec_url=spec_url, output=output)


@cli.command()
@click.argument("path")
@click.option(
    "--spec-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="OpenAPI document used to seed field detection with the response schema",
)
def inspect(path, spec_file):
    """Fetch an admin endpoint and detect its field roles."""
    print_banner()

    console = IntrospectionConsole()
    console.inspect(path, spec_file=spec_file)


@cli.command()
def config_api():
    """Configure product API credentials for this session."""
    print_banner()

    click.echo(f"{Fore.YELLOW}Product API Configuration")
    click.echo(f"{Fore.YELLOW}{'=' * 30}")

    base_url = click.prompt("Admin API Base URL", default=app_config.product_api.base_url)
    api_key = click.prompt("API Key (token)", hide_input=True, default="")

    app_config.product_api.base_url = base_url
    app_config.product_api.api_key = api_key

    click.echo(f"{Fore.GREEN}✅ Configuration set for this session (not saved to disk)")


if __name__ == "__main__":
    cli()
