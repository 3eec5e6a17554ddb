"""Core configuration and factory components."""

from simple_te.core.config import Settings, get_settings
from simple_te.core.factory import ComponentFactory, get_factory

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
    "get_factory",
]
