"""Base parser class and data models for manifest parsing."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from ...utils.logging import get_logger

# Sentinel stored when a manifest declares a package without a constraint
ANY_VERSION = "*"


class Ecosystem(str, Enum):
    """Package ecosystems understood by DepBatcher, in processing order."""

    NPM = "npm"
    PIP = "pip"
    CARGO = "cargo"
    BUNDLER = "bundler"


class ManifestUnreadableError(Exception):
    """Raised when a manifest exists but cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read manifest {path}: {reason}")


def read_manifest(file_path: Path) -> str:
    """Read a manifest file as UTF-8 text, dropping a leading byte order mark.

    Args:
        file_path: Path to the manifest

    Returns:
        File contents

    Raises:
        ManifestUnreadableError: If the file cannot be opened or decoded
    """
    try:
        with open(file_path, 'r', encoding='utf-8-sig') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestUnreadableError(file_path, str(e)) from e


@dataclass
class ParsedDependencies:
    """Container for the dependency map parsed from one or more manifests."""

    dependencies: Dict[str, str] = field(default_factory=dict)
    source_file: Optional[Path] = None
    ecosystem: str = ""
    parser_type: str = ""

    def add_dependency(self, name: str, version_spec: str) -> bool:
        """Add a dependency unless the name was already declared.

        Args:
            name: Package name
            version_spec: Version constraint or ANY_VERSION

        Returns:
            True if the dependency was added
        """
        if name in self.dependencies:
            return False
        self.dependencies[name] = version_spec
        return True

    def merge(self, other: "ParsedDependencies") -> None:
        """Merge another manifest's dependencies; ``other`` wins on collision."""
        self.dependencies.update(other.dependencies)

    def __len__(self) -> int:
        return len(self.dependencies)


class BaseParser(ABC):
    """Abstract base class for manifest parsers.

    Subclasses implement ``parse_text`` as a pure function of the manifest
    contents; ``parse`` only adds the file I/O around it.
    """

    def __init__(self) -> None:
        """Initialize the parser."""
        self.filenames: List[str] = []
        self.ecosystem: str = ""
        self.parser_type: str = ""
        self.logger = get_logger(self.__class__.__name__)

    def can_parse(self, file_path: Path) -> bool:
        """Check if this parser can handle the given file.

        Args:
            file_path: Path to the file to check

        Returns:
            True if parser can handle the file
        """
        return file_path.name in self.filenames

    @abstractmethod
    def parse_text(self, content: str) -> Dict[str, str]:
        """Convert manifest text into a dependency map.

        Never raises on malformed content; unrecognised entries are skipped.

        Args:
            content: Raw manifest text

        Returns:
            Ordered mapping of package name to version constraint
        """
        pass

    def parse(self, file_path: Path) -> ParsedDependencies:
        """Parse a manifest file.

        Args:
            file_path: Path to the file to parse

        Returns:
            Parsed dependencies from the file

        Raises:
            ManifestUnreadableError: If the file cannot be read
        """
        self.validate_file(file_path)
        content = read_manifest(file_path)

        result = ParsedDependencies(
            source_file=file_path,
            ecosystem=self.ecosystem,
            parser_type=self.parser_type,
        )
        for name, version_spec in self.parse_text(content).items():
            result.add_dependency(name, version_spec)

        self.logger.debug(f"Parsed {len(result)} dependencies from {file_path}")
        return result

    def validate_file(self, file_path: Path) -> None:
        """Validate that the file exists and is readable.

        Args:
            file_path: Path to validate

        Raises:
            ManifestUnreadableError: If the path is missing, not a file or not readable
        """
        if not file_path.exists():
            raise ManifestUnreadableError(file_path, "file disappeared during scan")

        if not file_path.is_file():
            raise ManifestUnreadableError(file_path, "path is not a file")

        if not os.access(file_path, os.R_OK):
            raise ManifestUnreadableError(file_path, "permission denied")
