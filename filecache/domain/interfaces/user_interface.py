"""Interface for interacting with the user (output only).

Defines the contract for displaying cached values, information and errors,
allowing different UI implementations (e.g., console, tests).
"""

import abc
from typing import Any, Dict


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays standard output (e.g. a cached value) to the user."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_details(self, title: str, rows: Dict[str, str]) -> None:
        """Displays a two-column table of details (e.g. entry metadata).

        Args:
            title: Heading of the table.
            rows: Field name to rendered value.
        """
        pass
