"""Presentation interface fed by the sync coordinator."""

from abc import ABC, abstractmethod


class BasePresenter(ABC):
    """Abstract base class for views that display the sync state.

    The coordinator pushes the variable list, the rendered output and the
    validation message after every state change.
    """

    @abstractmethod
    def show_variables(self, variables: list[str]) -> None:
        """Display one input per variable identifier, in order."""
        ...

    @abstractmethod
    def show_output(self, output: str) -> None:
        """Display the rendered output."""
        ...

    @abstractmethod
    def show_error(self, message: str | None) -> None:
        """Display or clear the template validation message."""
        ...
