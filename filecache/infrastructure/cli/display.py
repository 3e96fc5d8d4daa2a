import logging
from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table

from filecache.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None, error_console: Optional[Console] = None):
        """Initializes the rich consoles (values on stdout, diagnostics on stderr)."""
        self._console = console or Console()
        self._error_console = error_console or Console(stderr=True)

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    @property
    def error_console(self) -> Console:
        return self._error_console

    def display_output(self, output: str, **kwargs: Any) -> None:
        """Prints a cached value verbatim so it can be piped."""
        # Markup and highlighting would alter arbitrary cached text
        self.console.print(str(output), markup=False, highlight=False, soft_wrap=True)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        logger.debug(f"Displaying error: {error_message}")
        self.error_console.print(f"[bold red]Error:[/bold red] {error_message}")

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        self.error_console.print(f"[yellow]Warning:[/yellow] {warning_message}")

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        self.console.print(f"[blue]Info:[/blue] {info_message}")

    def display_details(self, title: str, rows: Dict[str, str]) -> None:
        """Renders `rows` as a two-column table."""
        table = Table(title=title, show_header=False, title_justify="left")
        table.add_column("Field", style="bold cyan", no_wrap=True)
        table.add_column("Value", overflow="fold")
        for field, value in rows.items():
            table.add_row(field, value)
        self.console.print(table)
