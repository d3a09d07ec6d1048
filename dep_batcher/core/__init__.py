"""Core parsing, detection and grouping logic for DepBatcher."""

from .detector import DetectionResult, FrameworkDetector, FrameworkMatch
from .grouping import GroupSpec, generate_ecosystem_groups
from .orchestrator import (
    EcosystemConfig,
    ProjectConfig,
    ProjectScanner,
    ScanConfig,
    UpdateSchedule,
    build_project_config,
)
from .parsers import DependencyParser, Ecosystem, ParsedDependencies

__all__ = [
    "DependencyParser",
    "DetectionResult",
    "Ecosystem",
    "EcosystemConfig",
    "FrameworkDetector",
    "FrameworkMatch",
    "GroupSpec",
    "ParsedDependencies",
    "ProjectConfig",
    "ProjectScanner",
    "ScanConfig",
    "UpdateSchedule",
    "build_project_config",
    "generate_ecosystem_groups",
]
