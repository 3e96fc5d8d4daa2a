import pytest
from unittest.mock import MagicMock

from rich.table import Table

from filecache.infrastructure.cli.display import ConsoleDisplay


@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock()


@pytest.fixture
def mock_error_console():
    return MagicMock()


@pytest.fixture
def console_display(mock_console: MagicMock, mock_error_console: MagicMock):
    """Fixture to create a ConsoleDisplay instance with mocked consoles."""
    return ConsoleDisplay(console=mock_console, error_console=mock_error_console)


def test_display_output_prints_value_verbatim(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Cached text must not be interpreted as rich markup."""
    console_display.display_output("[bold]not markup[/bold]")
    mock_console.print.assert_called_once_with(
        "[bold]not markup[/bold]", markup=False, highlight=False, soft_wrap=True
    )


def test_display_error(console_display: ConsoleDisplay, mock_console: MagicMock, mock_error_console: MagicMock):
    """Test that display_error goes to the error console with error formatting."""
    error_msg = "Something went wrong"
    console_display.display_error(error_msg)
    mock_error_console.print.assert_called_once_with(f"[bold red]Error:[/bold red] {error_msg}")
    mock_console.print.assert_not_called()


def test_display_warning(console_display: ConsoleDisplay, mock_error_console: MagicMock):
    console_display.display_warning("Cache miss")
    mock_error_console.print.assert_called_once_with("[yellow]Warning:[/yellow] Cache miss")


def test_display_info(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Test that display_info calls console.print with info formatting."""
    info_msg = "Process completed"
    console_display.display_info(info_msg)
    mock_console.print.assert_called_once_with(f"[blue]Info:[/blue] {info_msg}")


def test_display_details_renders_a_table(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_details("Entry", {"key": "k", "state": "fresh"})
    (table,), _ = mock_console.print.call_args
    assert isinstance(table, Table)
    assert table.title == "Entry"
    assert table.row_count == 2
