"""Manifest discovery for the supported ecosystems."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..core.parsers.base import Ecosystem


@dataclass
class ManifestFile:
    """A manifest found in a project root.

    ``parser_type`` is None for marker manifests that only signal the
    ecosystem is in use (``setup.py``, ``Pipfile``) and are not parsed.
    """

    path: Path
    ecosystem: Ecosystem
    parser_type: Optional[str]

    @property
    def is_marker(self) -> bool:
        return self.parser_type is None


class ManifestFinder:
    """Finds the manifests of each ecosystem in a project root."""

    # Per ecosystem, in merge order: later manifests win on key collisions
    MANIFEST_PATTERNS: Dict[Ecosystem, List[Tuple[str, Optional[str]]]] = {
        Ecosystem.NPM: [
            ("package.json", "package"),
        ],
        Ecosystem.PIP: [
            ("requirements.txt", "requirements"),
            ("pyproject.toml", "pyproject"),
            ("Pipfile", None),
            ("setup.py", None),
        ],
        Ecosystem.CARGO: [
            ("Cargo.toml", "cargo"),
        ],
        Ecosystem.BUNDLER: [
            ("Gemfile", "gemfile"),
        ],
    }

    def find_manifests(self, root_path: Path, ecosystem: Ecosystem) -> List[ManifestFile]:
        """Find the manifests of one ecosystem.

        Args:
            root_path: Project root directory
            ecosystem: Ecosystem to look for

        Returns:
            Existing manifests in merge order; empty if the ecosystem is absent
        """
        manifests = []
        for filename, parser_type in self.MANIFEST_PATTERNS.get(ecosystem, []):
            file_path = root_path / filename
            if file_path.exists():
                manifests.append(ManifestFile(path=file_path, ecosystem=ecosystem, parser_type=parser_type))
        return manifests

    def find_all(self, root_path: Path) -> Dict[Ecosystem, List[ManifestFile]]:
        """Find manifests for every ecosystem that is present.

        Args:
            root_path: Project root directory

        Returns:
            Mapping of present ecosystems to their manifests, in ecosystem order
        """
        found = {}
        for ecosystem in Ecosystem:
            manifests = self.find_manifests(root_path, ecosystem)
            if manifests:
                found[ecosystem] = manifests
        return found

    def get_supported_manifests(self) -> List[str]:
        return [filename for patterns in self.MANIFEST_PATTERNS.values() for filename, _ in patterns]


def find_manifests(root_path: Path, ecosystem: Ecosystem) -> List[ManifestFile]:
    """Convenience function to find one ecosystem's manifests.

    Args:
        root_path: Project root directory
        ecosystem: Ecosystem to look for

    Returns:
        Existing manifests in merge order
    """
    return ManifestFinder().find_manifests(root_path, ecosystem)
