import json
import logging
import sys
from typing import Any, List, Mapping, Optional, Sequence

from rich.box import HEAVY, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from seaplanecli.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output.

    Results go to stdout, diagnostics (errors, warnings, info) to stderr so
    that command output can be piped.
    """

    def __init__(self, color: Optional[bool] = None, quiet: bool = False):
        """Initializes the rich consoles.

        Args:
            color: Force color on or off. None lets rich detect the terminal.
            quiet: Suppress informational messages.
        """
        no_color = color is False
        self._console = Console(no_color=no_color, force_terminal=True if color else None, highlight=False)
        self._err_console = Console(stderr=True, no_color=no_color, force_terminal=True if color else None)
        self.quiet = quiet

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    @console.setter
    def console(self, value: Console) -> None:
        self._console = value

    @property
    def err_console(self) -> Console:
        return self._err_console

    @err_console.setter
    def err_console(self, value: Console) -> None:
        self._err_console = value

    def display_output(self, output: str, **kwargs: Any) -> None:
        # Plain text; values must round-trip through pipes untouched.
        self.console.print(Text(str(output)), soft_wrap=True)

    def display_json(self, data: Any) -> None:
        self.console.print_json(json.dumps(data))

    def display_table(self, columns: Sequence[str], rows: List[Mapping[str, Any]], **kwargs: Any) -> None:
        """Displays records in a rich table.

        Args:
            columns: Column headers, also used as row keys.
            rows: The records.
            **kwargs: ``title`` for the table.
        """
        table = Table(title=kwargs.get("title"), box=SIMPLE, show_edge=False)
        for column in columns:
            table.add_column(column.upper(), overflow="fold")
        for row in rows:
            table.add_row(*(_cell(row.get(column)) for column in columns))
        logger.debug(f"Rendering table with {len(rows)} rows")
        self.console.print(table)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
            **kwargs: ``hint`` is rendered below the message when given.
        """
        body = Text(error_message, style="white")
        hint = kwargs.get("hint")
        if hint:
            body.append(f"\n(hint: {hint})", style="green")
        panel = Panel(
            body,
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1),
        )
        self.err_console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        if self.quiet:
            return
        self.err_console.print(Text(info_message, style="blue"))

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message with enhanced styling."""
        logger.debug(f"Display warning: {warning_message}")
        self.err_console.print(Text.assemble(("warn: ", "bold yellow"), (warning_message, "white")))

    def get_prompt(self, prompt_message: str = "> ") -> str:
        """Reads a line from stdin, prompting only when attached to a terminal."""
        if sys.stdin.isatty():
            return self.err_console.input(f"[bold green]{prompt_message}[/bold green]")
        line = sys.stdin.readline()
        return line.rstrip("\r\n")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)
