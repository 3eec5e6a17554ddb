"""Abstract base classes for template sync strategies."""

from simple_te.interfaces.extractor import BaseExtractor, ExtractionResult, TemplateParseError
from simple_te.interfaces.presenter import BasePresenter
from simple_te.interfaces.renderer import BaseRenderer, RenderResult
from simple_te.interfaces.store import BaseTemplateStore

__all__ = [
    "BaseExtractor",
    "BasePresenter",
    "BaseRenderer",
    "BaseTemplateStore",
    "ExtractionResult",
    "RenderResult",
    "TemplateParseError",
]
