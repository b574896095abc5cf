"""CLI command for App Store lookups."""

import json

import typer

from appmeta.core.store import get_app_store_url
from appmeta.utils.config import get_config_value
from appmeta.utils.output import console, setup_logging


def show_store_url(
    bundle_id: str = typer.Argument(
        ..., help="Bundle identifier, e.g. com.example.app."
    ),
    region: str = typer.Option(
        None,
        "--region",
        "-r",
        help="Storefront to rewrite the URL for (default: store_region config, 'cn').",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON.",
    ),
) -> None:
    """Look up the App Store page of a bundle ID."""
    console.set_json_mode(json_output)
    setup_logging(False)

    region = region or get_config_value("store_region")
    url = get_app_store_url(bundle_id)
    regional = url.for_region(region) if url else url

    if json_output:
        output = {"bundle_id": bundle_id, "url": url, "regional_url": regional}
        typer.echo(json.dumps(output, indent=2))
        if not url:
            raise typer.Exit(1)
        return

    if not url:
        console.print_error(f"No App Store entry found for {bundle_id}")
        raise typer.Exit(1)

    console.print(f"[bold]App Store:[/bold] {url}")
    console.print(f"[bold]{region}:[/bold] {regional}")
