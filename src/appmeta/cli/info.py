"""CLI commands for package metadata and icons."""

import json
from pathlib import Path

import typer
from rich.table import Table

from appmeta.core.extractor import extract
from appmeta.core.store import get_app_store_url
from appmeta.exceptions import AppMetaError, NoIconError
from appmeta.models.app import AppInfo, Platform
from appmeta.utils.output import console, setup_logging


def _package_argument():
    return typer.Argument(
        ...,
        help="Path to the .apk or .ipa file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    )


def _display_info(info: AppInfo, store_url: str | None) -> None:
    """Display extracted metadata as a two-column table."""
    table = Table(show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Platform", info.platform.value)
    table.add_row("Name", info.name or "[dim]-[/dim]")
    table.add_row("Bundle ID", info.bundle_id)
    table.add_row("Version", info.version or "[dim]-[/dim]")
    table.add_row("Build", info.build or "[dim]-[/dim]")
    table.add_row("Size", f"{info.size:,} bytes")
    if info.icon is not None:
        width, height = info.icon.size
        table.add_row("Icon", f"{width}x{height} {info.icon.mode}")
    else:
        table.add_row("Icon", f"[yellow]none[/yellow] ({info.icon_error})")
    if store_url is not None:
        table.add_row("App Store", store_url or "[dim]not found[/dim]")

    console.print(table)


def _save_icon(info: AppInfo, output: Path) -> None:
    if info.icon is None:
        raise NoIconError(info.icon_error or "Package has no icon")
    output.parent.mkdir(parents=True, exist_ok=True)
    info.icon.save(output, format="PNG")


def show_info(
    package: Path = _package_argument(),
    icon_out: Path = typer.Option(
        None,
        "--icon-out",
        "-i",
        help="Also save the icon as PNG to this path.",
    ),
    store: bool = typer.Option(
        False,
        "--store",
        "-s",
        help="Look up the App Store page (iOS packages only).",
    ),
    density: int = typer.Option(
        None,
        "--density",
        help="Screen density (dpi) to prefer for Android icons.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log decoding details to stderr.",
    ),
) -> None:
    """Show name, bundle ID, version, build, size and icon of a package."""
    console.set_json_mode(json_output)
    setup_logging(verbose)

    try:
        info = extract(package, density=density)

        store_url = None
        if store and info.platform is Platform.IOS:
            store_url = str(get_app_store_url(info.bundle_id))

        if icon_out is not None:
            _save_icon(info, icon_out)

        if json_output:
            output = info.model_dump(mode="json")
            output["has_icon"] = info.has_icon
            if store_url is not None:
                output["store_url"] = store_url
            typer.echo(json.dumps(output, indent=2))
            return

        _display_info(info, store_url)
        if icon_out is not None:
            console.print_success(f"Icon saved to {icon_out}")

    except AppMetaError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None


def save_icon(
    package: Path = _package_argument(),
    output: Path = typer.Argument(..., help="Destination PNG file."),
    density: int = typer.Option(
        None,
        "--density",
        help="Screen density (dpi) to prefer for Android icons.",
    ),
) -> None:
    """Extract the package icon to a PNG file."""
    console.set_json_mode(False)
    setup_logging(False)

    try:
        info = extract(package, density=density)
        _save_icon(info, output)
    except AppMetaError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    console.print_success(f"Icon saved to {output}")
