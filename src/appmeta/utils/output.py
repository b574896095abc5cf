"""Rich console helpers for terminal output."""

import logging
from typing import Any

from rich.console import Console as RichConsole
from rich.logging import RichHandler


class Console:
    """Wrapper around rich.Console with convenience methods."""

    def __init__(self) -> None:
        self._console = RichConsole()
        self._json_mode = False

    def set_json_mode(self, enabled: bool) -> None:
        """Enable or disable JSON mode (suppresses rich output)."""
        self._json_mode = enabled

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console (suppressed in JSON mode)."""
        if not self._json_mode:
            self._console.print(*args, **kwargs)

    def print_success(self, message: str) -> None:
        """Print a success message in green."""
        if not self._json_mode:
            self._console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message in red."""
        if not self._json_mode:
            self._console.print(f"[red]✗[/red] {message}")


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=RichConsole(stderr=True), show_path=False)],
        force=True,
    )
    # pyaxmlparser reports recoverable quirks of real-world APKs at WARNING.
    logging.getLogger("pyaxmlparser").setLevel(
        logging.WARNING if verbose else logging.ERROR
    )


# Global console instance
console = Console()
