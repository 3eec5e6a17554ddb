"""Abstract base class for template renderers."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class RenderResult:
    """Outcome of a render call.

    Attributes:
        output: The rendered text, or the template source on fallback.
        fell_back: True when the template source was returned unrendered.
        error: Description of the failure that caused the fallback.
    """

    output: str
    fell_back: bool = False
    error: str | None = None


class BaseRenderer(ABC):
    """Abstract base class for rendering strategies.

    Rendering is best-effort: implementations must always produce a string
    and never raise to the caller.
    """

    @abstractmethod
    def render_result(self, template: str, values: Mapping[str, str]) -> RenderResult:
        """Render a template against the given variable values.

        Args:
            template: Raw template text.
            values: Mapping of variable identifier to user supplied value.

        Returns:
            A RenderResult describing the output and any fallback.
        """
        ...

    def render(self, template: str, values: Mapping[str, str]) -> str:
        """Render a template and return only the output text."""
        return self.render_result(template, values).output
