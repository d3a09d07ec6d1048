"""Output formatters for DepBatcher."""

from .formatters import ConsoleFormatter, JSONFormatter, YAMLFormatter

__all__ = [
    "ConsoleFormatter",
    "JSONFormatter",
    "YAMLFormatter",
]
