"""Handlebars renderer strategy.

Renders templates with pybars3 after substituting unset variables with
their own placeholder markup, so unfilled fields stay visible in the output.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from pybars import Compiler

from simple_te.interfaces.extractor import BaseExtractor, TemplateParseError
from simple_te.interfaces.renderer import BaseRenderer, RenderResult
from simple_te.strategies.extractors.handlebars import OPEN, HandlebarsExtractor, find_escapes

logger = logging.getLogger(__name__)


class HandlebarsRenderer(BaseRenderer):
    """Renders Handlebars templates with pybars3.

    Top-level placeholders are resolved from the supplied values; structural
    constructs (``{{#if}}``, ``{{#each}}``, partials, comments) go through the
    normal pybars3 evaluation. Any failure returns the template source.
    """

    def __init__(
        self,
        extractor: BaseExtractor | None = None,
        cache_size: int = 64,
    ) -> None:
        """Initialize the renderer.

        Args:
            extractor: Decides which placeholders are substitution points.
                Defaults to a HandlebarsExtractor with the default rule.
            cache_size: Number of compiled templates to keep.
        """
        self._extractor = extractor or HandlebarsExtractor()
        self._compiler = Compiler()
        self._compile: Callable[[str], Callable[..., Any]] = lru_cache(maxsize=cache_size)(
            self._compiler.compile
        )

    def render_result(self, template: str, values: Mapping[str, str]) -> RenderResult:
        """Render ``template`` with ``values``, falling back to the source.

        Args:
            template: Raw template text.
            values: Variable identifier to user supplied value.

        Returns:
            A RenderResult; ``fell_back`` is True when the source was returned.
        """
        if not template:
            return RenderResult(output="")

        try:
            variables = self._extractor.extract_variables(template)
        except TemplateParseError as e:
            logger.debug(f"Template not renderable, returning source: {e}")
            return RenderResult(output=template, fell_back=True, error=str(e))

        context = self._build_context(variables, values)

        try:
            source = _rewrite_escapes(template) if "\\" + OPEN in template else template
            compiled = self._compile(source)
            output = str(compiled(context, helpers=_HELPERS))
        except Exception as e:
            logger.warning(f"Template evaluation failed, returning source: {e}")
            return RenderResult(output=template, fell_back=True, error=str(e))

        return RenderResult(output=output)

    def _build_context(
        self,
        variables: tuple[str, ...],
        values: Mapping[str, str],
    ) -> dict[str, Any]:
        """Map each variable to its value, or to its placeholder when unset."""
        root = _ContextNode()

        for name in variables:
            value = values.get(name)
            root.insert(
                self._extractor.path_for(name),
                value if value else self._extractor.placeholder_for(name),
            )

        # Values for names outside the substitution set (e.g. block
        # conditions) pass through where no variable claimed the slot.
        for name, value in values.items():
            if value and name not in variables:
                if not root.insert(self._extractor.path_for(name), value):
                    logger.debug(f"Ignored pass-through value for '{name}'")

        return root.members_dict()


# =============================================================================
# Context
# =============================================================================


class _ScalarWithMembers(str):
    """A string value that also has named members.

    Lets ``{{person}}`` and ``{{person.name}}`` both resolve in one template.
    """

    def __new__(cls, value: str, members: dict[str, Any]) -> "_ScalarWithMembers":
        instance = super().__new__(cls, value)
        instance.members = members
        return instance

    def __getitem__(self, key):
        if isinstance(key, str):
            return self.members.get(key)
        return str.__getitem__(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        return self.members.get(key, default)


@dataclass
class _ContextNode:
    value: str | None = None
    members: dict[str, "_ContextNode"] = field(default_factory=dict)

    def insert(self, path: tuple[str, ...], value: str) -> bool:
        """Set ``value`` at ``path``; False if that slot already has one."""
        node = self
        for part in path:
            node = node.members.setdefault(part, _ContextNode())
        if node.value is not None:
            return False
        node.value = value
        return True

    def members_dict(self) -> dict[str, Any]:
        return {name: child.build() for name, child in self.members.items()}

    def build(self) -> Any:
        if self.value is None:
            return self.members_dict()
        if not self.members:
            return self.value
        return _ScalarWithMembers(self.value, self.members_dict())


# =============================================================================
# Escapes
# =============================================================================

# pybars3 has no backslash escapes; a literal "{{" is emitted through a helper.
_OPEN_BRACES_HELPER = "simple-te:open-braces"
_OPEN_BRACES_TAG = "{{[" + _OPEN_BRACES_HELPER + "]}}"
_HELPERS = {_OPEN_BRACES_HELPER: lambda this: OPEN}


def _rewrite_escapes(template: str) -> str:
    """Translate Handlebars backslash escapes into pybars3 source.

    ``\\{{`` becomes a tag that prints ``{{``; ``\\\\{{`` keeps one backslash
    in front of the real tag.
    """
    pieces = []
    pos = 0
    for escape in find_escapes(template):
        pieces.append(template[pos : escape.start])
        pieces.append(_OPEN_BRACES_TAG if escape.literal else "\\")
        pos = escape.end
    pieces.append(template[pos:])
    return "".join(pieces)
