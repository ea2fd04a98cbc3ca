"""Interface for interacting with the user (input/output).

Defines the contract for displaying results, errors, warnings and
informational messages, and for reading input such as an API key, allowing
different UI implementations (e.g., console, test doubles).
"""

import abc
from typing import Any, List, Mapping, Sequence


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays plain command output (tokens, values) to the user.

        Args:
            output: The text to display, unformatted.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_json(self, data: Any) -> None:
        """Displays a JSON-serializable value as JSON."""
        pass

    @abc.abstractmethod
    def display_table(self, columns: Sequence[str], rows: List[Mapping[str, Any]], **kwargs: Any) -> None:
        """Displays rows of records as a table.

        Args:
            columns: Column names, also used as keys into each row.
            rows: The records to display.
            **kwargs: Additional arguments (e.g. title).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting (e.g. hint).
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def get_prompt(self, prompt_message: str = "> ") -> str:
        """Reads one line of input from the user."""
        pass
