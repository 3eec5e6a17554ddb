"""Concrete placeholder extractor implementations."""

from simple_te.strategies.extractors.handlebars import (
    ExtractionRule,
    HandlebarsExtractor,
    HandlebarsParser,
)

__all__ = [
    "ExtractionRule",
    "HandlebarsExtractor",
    "HandlebarsParser",
]
