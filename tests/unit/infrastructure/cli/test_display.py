import io
from unittest.mock import MagicMock

import pytest
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from seaplanecli.infrastructure.cli.display import ConsoleDisplay


@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock()


@pytest.fixture
def mock_err_console():
    return MagicMock()


@pytest.fixture
def console_display(mock_console: MagicMock, mock_err_console: MagicMock):
    """Fixture to create a ConsoleDisplay instance with mocked consoles."""
    display = ConsoleDisplay()
    display.console = mock_console
    display.err_console = mock_err_console
    return display


def test_display_output_prints_plain_text(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_output("[bold]not markup[/bold]")
    args, kwargs = mock_console.print.call_args
    assert isinstance(args[0], Text)
    assert args[0].plain == "[bold]not markup[/bold]"
    assert kwargs["soft_wrap"] is True


def test_display_json(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_json({"token": "abc"})
    mock_console.print_json.assert_called_once_with('{"token": "abc"}')


def test_display_table(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_table(["key", "value"], [{"key": "a", "value": "1"}, {"key": "b"}])
    table = mock_console.print.call_args.args[0]
    assert isinstance(table, Table)
    assert [column.header for column in table.columns] == ["KEY", "VALUE"]
    assert table.row_count == 2


def test_display_error_goes_to_stderr_with_hint(console_display, mock_console, mock_err_console):
    console_display.display_error("Something went wrong", hint="try again")
    mock_console.print.assert_not_called()
    panel = mock_err_console.print.call_args.args[0]
    assert isinstance(panel, Panel)
    assert "Something went wrong" in panel.renderable.plain
    assert "(hint: try again)" in panel.renderable.plain


def test_display_info_suppressed_when_quiet(console_display, mock_err_console):
    console_display.quiet = True
    console_display.display_info("Process completed")
    mock_err_console.print.assert_not_called()

    console_display.quiet = False
    console_display.display_info("Process completed")
    assert mock_err_console.print.call_args.args[0].plain == "Process completed"


def test_display_warning(console_display, mock_err_console):
    console_display.display_warning("certificate checks are disabled")
    assert mock_err_console.print.call_args.args[0].plain == "warn: certificate checks are disabled"


def test_get_prompt_reads_piped_stdin(console_display, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("sk-piped\n"))
    assert console_display.get_prompt("API key: ") == "sk-piped"


def test_table_renders_lists_as_csv():
    display = ConsoleDisplay(color=False)
    buffer = io.StringIO()
    display.console = Console(file=buffer, width=120)
    display.display_table(["regions_allowed"], [{"regions_allowed": ["XE", "XN"]}])
    assert "XE,XN" in buffer.getvalue()
