"""Concrete strategy implementations."""

from simple_te.strategies.extractors import (
    ExtractionRule,
    HandlebarsExtractor,
)
from simple_te.strategies.renderers import (
    HandlebarsRenderer,
)
from simple_te.strategies.stores import (
    JsonFileTemplateStore,
    MemoryTemplateStore,
)

__all__ = [
    "ExtractionRule",
    "HandlebarsExtractor",
    "HandlebarsRenderer",
    "JsonFileTemplateStore",
    "MemoryTemplateStore",
]
