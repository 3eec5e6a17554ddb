"""Concrete template store implementations."""

from simple_te.strategies.stores.json_file import JsonFileTemplateStore
from simple_te.strategies.stores.memory import MemoryTemplateStore

__all__ = [
    "JsonFileTemplateStore",
    "MemoryTemplateStore",
]
