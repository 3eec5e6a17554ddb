"""Placeholder extraction interfaces.

Defines the abstract base class for strategies that read a template and
report which variables its substitution placeholders reference.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


class TemplateParseError(Exception):
    """Raised when template syntax cannot be analyzed for placeholders.

    Attributes:
        message: Human readable description of the problem.
        position: Zero-based offset in the template where parsing stopped.
    """

    def __init__(self, message: str, position: int | None = None) -> None:
        self.message = message
        self.position = position
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at offset {self.position})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and UI payloads."""
        return {"message": self.message, "position": self.position}


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of a placeholder extraction.

    Attributes:
        variables: Identifiers in first-occurrence order, without duplicates.
        error: Parse error message when extraction was unavailable.
    """

    variables: tuple[str, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the template could be analyzed."""
        return self.error is None


class BaseExtractor(ABC):
    """Abstract base class for placeholder extraction strategies.

    Example:
        ```python
        class HandlebarsExtractor(BaseExtractor):
            def extract_variables(self, template: str) -> tuple[str, ...]:
                # Parse and collect top-level placeholders
                pass
        ```
    """

    @abstractmethod
    def extract_variables(self, template: str) -> tuple[str, ...]:
        """Extract the variable identifiers referenced by a template.

        Args:
            template: Raw template text.

        Returns:
            Ordered, de-duplicated variable identifiers.

        Raises:
            TemplateParseError: If the template syntax is malformed.
        """
        ...

    def extract(self, template: str) -> ExtractionResult:
        """Extract variables without raising on malformed syntax.

        Args:
            template: Raw template text.

        Returns:
            An ExtractionResult; ``error`` is set when parsing failed.
        """
        try:
            return ExtractionResult(variables=self.extract_variables(template))
        except TemplateParseError as e:
            return ExtractionResult(error=str(e))

    def placeholder_for(self, name: str) -> str:
        """Return the placeholder markup that references ``name``."""
        return "{{" + name + "}}"

    def path_for(self, name: str) -> tuple[str, ...]:
        """Return the context path segments a variable identifier resolves to.

        Args:
            name: A variable identifier returned by extract_variables.

        Returns:
            Segments from the outermost key inward.
        """
        return tuple(name.split("."))
