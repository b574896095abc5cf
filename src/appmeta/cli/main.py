"""Root CLI application for appmeta."""

import typer

from appmeta import __version__
from appmeta.cli import info, store

app = typer.Typer(
    name="appmeta",
    help="Read name, version, bundle ID and icon from APK and IPA packages.",
    no_args_is_help=True,
)

# Register commands
app.command("info")(info.show_info)
app.command("icon")(info.save_icon)
app.command("store")(store.show_store_url)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"appmeta {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """appmeta - mobile package metadata extraction."""
    pass


if __name__ == "__main__":
    app()
