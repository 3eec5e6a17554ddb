"""Concrete renderer implementations."""

from simple_te.strategies.renderers.handlebars import HandlebarsRenderer

__all__ = [
    "HandlebarsRenderer",
]
