"""Rust (cargo) manifest parser."""

import re
from typing import Any, Dict, Optional

from .base import BaseParser, Ecosystem
from .toml_scan import inline_table, load_document, parse_string, scan_sections

CRATE_NAME_PATTERN = re.compile(r'^[A-Za-z0-9_][\w-]*$')

DEPENDENCIES_SECTION = "dependencies"
DEPENDENCY_TABLE_PREFIX = "dependencies."


class RustCargoParser(BaseParser):
    """Parser for Cargo.toml files.

    Only the top-level ``[dependencies]`` table is read, together with the
    ``[dependencies.<crate>]`` form of the same table.
    """

    def __init__(self) -> None:
        """Initialize the Cargo.toml parser."""
        super().__init__()
        self.ecosystem = Ecosystem.CARGO.value
        self.parser_type = "cargo"
        self.filenames = ["Cargo.toml"]

    def parse_text(self, content: str) -> Dict[str, str]:
        """Parse Cargo.toml content.

        Args:
            content: Cargo.toml text

        Returns:
            Dependency map of crates that declare a version
        """
        document = load_document(content)
        if document is None:
            self.logger.debug("Cargo.toml is not valid TOML; scanning it line by line")
            return self._parse_scanned(content)

        dependencies: Dict[str, str] = {}
        table = document.get(DEPENDENCIES_SECTION)
        if not isinstance(table, dict):
            return dependencies

        for name, value in table.items():
            version_spec = self._document_version(value)
            if version_spec is None or not CRATE_NAME_PATTERN.match(name):
                self.logger.debug(f"Skipping crate entry without a version: {name}")
                continue
            dependencies[name] = version_spec

        return dependencies

    def _parse_scanned(self, content: str) -> Dict[str, str]:
        dependencies: Dict[str, str] = {}

        for section in scan_sections(content):
            if section.name == DEPENDENCIES_SECTION:
                for name, value in section.entries:
                    version_spec = self._crate_version(value)
                    if version_spec is None or not CRATE_NAME_PATTERN.match(name):
                        self.logger.debug(f"Skipping crate entry without a version: {name}")
                        continue
                    dependencies.setdefault(name, version_spec)

            elif section.name.startswith(DEPENDENCY_TABLE_PREFIX):
                name = section.name[len(DEPENDENCY_TABLE_PREFIX):]
                entries = dict(section.entries)
                version_spec = parse_string(entries.get("version", ""))
                if version_spec and CRATE_NAME_PATTERN.match(name):
                    dependencies.setdefault(name, version_spec)

        return dependencies

    @staticmethod
    def _document_version(value: Any) -> Optional[str]:
        if isinstance(value, dict):
            value = value.get("version")
        return value if isinstance(value, str) and value else None

    @staticmethod
    def _crate_version(value: str) -> Optional[str]:
        # serde = "1.0"
        version_spec = parse_string(value)
        if version_spec:
            return version_spec

        # tokio = { version = "1", features = ["full"] }
        table = inline_table(value)
        return parse_string(table.get("version", "")) or None
