"""Persistence interface for the authored template text.

The sync engine never performs I/O itself; it loads the template once on
start and hands every edit to a store implementation.
"""

from abc import ABC, abstractmethod


class BaseTemplateStore(ABC):
    """Abstract base class for template text persistence strategies."""

    @abstractmethod
    def load_template_text(self) -> str | None:
        """Load the previously saved template text.

        Returns:
            The saved text, or None when nothing has been saved yet.
        """
        ...

    @abstractmethod
    def save_template_text(self, text: str) -> None:
        """Persist the current template text.

        Args:
            text: The raw template text as typed by the user.
        """
        ...
