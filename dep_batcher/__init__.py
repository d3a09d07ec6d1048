"""DepBatcher - Framework-aware dependency update configuration for multi-language projects."""

__version__ = "0.1.0"
__author__ = "DepBatcher Team"

from .core.orchestrator import ProjectScanner, UpdateSchedule, build_project_config
from .core.parsers import DependencyParser
from .output.formatters import ConsoleFormatter, JSONFormatter, YAMLFormatter

__all__ = [
    "ProjectScanner",
    "UpdateSchedule",
    "build_project_config",
    "DependencyParser",
    "ConsoleFormatter",
    "JSONFormatter",
    "YAMLFormatter",
]
