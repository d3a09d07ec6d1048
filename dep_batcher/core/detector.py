"""Framework detection over parsed dependency maps."""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ..utils.logging import get_logger
from .parsers.base import Ecosystem
from .signatures import SIGNATURE_TABLES, SignatureTable

CORE_CATEGORY = "core"
WILDCARD = "*"


def matches_pattern(name: str, pattern: str) -> bool:
    """Check if a package name matches a signature pattern.

    Without a ``*`` the pattern must equal the name. Otherwise the pattern is
    split on ``*``: the name must start with the first piece, end with the
    last, and contain the middle pieces in order between them. The whole name
    is always covered, so ``@storybook/*`` does not match
    ``my-@storybook/react-wrapper``.

    Args:
        name: Package name
        pattern: Exact name or wildcard pattern

    Returns:
        True if the name matches
    """
    if WILDCARD not in pattern:
        return name == pattern

    pieces = pattern.split(WILDCARD)
    prefix, suffix = pieces[0], pieces[-1]
    if len(name) < len(prefix) + len(suffix):
        return False
    if not name.startswith(prefix) or not name.endswith(suffix):
        return False

    position = len(prefix)
    end = len(name) - len(suffix)
    for piece in pieces[1:-1]:
        found = name.find(piece, position, end)
        if found == -1:
            return False
        position = found + len(piece)
    return True


@dataclass
class FrameworkMatch:
    """Packages that identified one framework."""

    packages: List[str] = field(default_factory=list)
    version: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.packages)

    def add_package(self, name: str) -> None:
        if name not in self.packages:
            self.packages.append(name)


@dataclass
class DetectionResult:
    """Frameworks detected for one ecosystem."""

    primary: Optional[str] = None
    detected: Dict[str, FrameworkMatch] = field(default_factory=dict)

    @property
    def total_packages(self) -> int:
        return sum(match.count for match in self.detected.values())

    def framework_names(self) -> List[str]:
        return list(self.detected)

    def to_dict(self) -> Dict[str, object]:
        return {
            "primary": self.primary,
            "detected": {
                name: {"packages": list(match.packages), "count": match.count, "version": match.version}
                for name, match in self.detected.items()
            },
        }


def detect(dependencies: Mapping[str, str], table: SignatureTable) -> DetectionResult:
    """Detect the frameworks a dependency map uses.

    Args:
        dependencies: Package name to version constraint
        table: Signature table for the dependencies' ecosystem

    Returns:
        Detection result; empty when no pattern matches
    """
    result = DetectionResult()

    for framework, categories in table.signatures.items():
        match = FrameworkMatch()

        for category, patterns in categories.items():
            for pattern in patterns:
                for name, version_spec in dependencies.items():
                    if not matches_pattern(name, pattern):
                        continue
                    match.add_package(name)
                    if category == CORE_CATEGORY and match.version is None:
                        match.version = version_spec

        if not match.packages:
            continue

        result.detected[framework] = match
        if result.primary is None and framework in table.primary_eligible:
            result.primary = framework

    return result


class FrameworkDetector:
    """Detects frameworks for one ecosystem using its signature table."""

    def __init__(self, ecosystem: Ecosystem, table: Optional[SignatureTable] = None) -> None:
        """Initialize the detector.

        Args:
            ecosystem: Ecosystem whose dependencies will be inspected
            table: Signature table override; defaults to the built-in table
        """
        self.ecosystem = ecosystem
        self.table = table or SIGNATURE_TABLES[ecosystem]
        self.logger = get_logger("FrameworkDetector")

    def detect(self, dependencies: Mapping[str, str]) -> DetectionResult:
        """Detect frameworks in a dependency map.

        Args:
            dependencies: Package name to version constraint

        Returns:
            Detection result
        """
        result = detect(dependencies, self.table)
        self.logger.debug(
            f"{self.ecosystem.value}: detected {', '.join(result.detected) or 'no frameworks'}"
            f" (primary: {result.primary or 'none'})"
        )
        return result
