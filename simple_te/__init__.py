"""Template String: live Handlebars template filling.

Extracts the variables of a template, keeps a value per variable across
template edits and renders the result, leaving unfilled placeholders visible.
"""

from collections.abc import Mapping

from simple_te.interfaces.extractor import TemplateParseError
from simple_te.strategies.extractors.handlebars import HandlebarsExtractor
from simple_te.strategies.renderers.handlebars import HandlebarsRenderer
from simple_te.sync.reconciler import reconcile

__version__ = "0.1.0"

_extractor = HandlebarsExtractor()
_renderer = HandlebarsRenderer(extractor=_extractor)


def extract_variables(template: str) -> tuple[str, ...]:
    """Extract top-level variable identifiers using the default rule.

    Raises:
        TemplateParseError: If the template is malformed.
    """
    return _extractor.extract_variables(template)


def render(template: str, values: Mapping[str, str]) -> str:
    """Render a template, keeping unset variables as visible placeholders."""
    return _renderer.render(template, values)


__all__ = [
    "TemplateParseError",
    "extract_variables",
    "reconcile",
    "render",
]
