"""Python (pip) manifest parsers."""

import re
from typing import Any, Dict, List, Optional, Tuple

from .base import ANY_VERSION, BaseParser, Ecosystem
from .toml_scan import (
    Section,
    array_strings,
    document_table,
    inline_table,
    load_document,
    parse_string,
    scan_sections,
)

# Pattern: package[extras]>=version
# Dotted names (zope.interface, google.cloud-storage) are kept whole
REQUIREMENT_PATTERN = re.compile(
    r'^(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)\s*'
    r'(?:\[(?P<extras>[^\]]*)\])?\s*'
    r'(?P<operator>[<>=!~]+)?\s*'
    r'(?P<version>.*)$'
)
NAME_WITH_EXTRAS_PATTERN = re.compile(r'^(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?$')

# Key reserved for the interpreter constraint in Poetry-style tables
PYTHON_KEY = "python"

LIST_SECTIONS = ("", "project")
GROUPED_LIST_SECTIONS = ("project.optional-dependencies", "dependency-groups")
LEGACY_SECTIONS = (
    "project.dependencies",
    "tool.poetry.dependencies",
    "tool.poetry.dev-dependencies",
)


def parse_requirement(spec: str) -> Optional[Tuple[str, str]]:
    """Parse a single PEP 508 style requirement string.

    Args:
        spec: Requirement such as ``fastapi[all]>=0.110.0``

    Returns:
        ``(name, version constraint)`` or None if the string is not a requirement
    """
    # Environment markers do not affect grouping
    spec = spec.split(";", 1)[0].strip()
    if not spec or spec.startswith("-"):
        return None

    # Direct references: name @ https://...
    if "@" in spec:
        name_part = spec.split("@", 1)[0].strip()
        match = NAME_WITH_EXTRAS_PATTERN.match(name_part)
        return (match.group("name"), ANY_VERSION) if match else None

    if "://" in spec:
        return None

    match = REQUIREMENT_PATTERN.match(spec)
    if not match:
        return None

    operator = match.group("operator")
    # Trailing pip options (--hash=...) are not part of the constraint
    version = match.group("version").split(" --", 1)[0].strip()
    if not operator:
        # Anything left without an operator is not a version constraint
        return (match.group("name"), ANY_VERSION) if not version else None

    return match.group("name"), f"{operator}{version}" if version else ANY_VERSION


class PythonRequirementsParser(BaseParser):
    """Parser for Python requirements.txt files."""

    def __init__(self) -> None:
        """Initialize the requirements parser."""
        super().__init__()
        self.ecosystem = Ecosystem.PIP.value
        self.parser_type = "requirements"
        self.filenames = ["requirements.txt"]

    def parse_text(self, content: str) -> Dict[str, str]:
        """Parse requirements.txt content.

        Args:
            content: Requirements file text

        Returns:
            Dependency map
        """
        dependencies: Dict[str, str] = {}

        for line_num, line in enumerate(content.splitlines(), 1):
            # Everything after the first '#' is a comment
            line = line.split("#", 1)[0]
            line = line.strip().rstrip("\\").strip()
            if not line:
                continue

            parsed = parse_requirement(line)
            if parsed is None:
                self.logger.debug(f"Skipping unrecognised requirement on line {line_num}: {line}")
                continue

            name, version_spec = parsed
            dependencies.setdefault(name, version_spec)

        return dependencies


class PythonPyProjectParser(BaseParser):
    """Parser for pyproject.toml files.

    Understands PEP 621 ``dependencies`` arrays, optional-dependency and
    PEP 735 dependency groups, and legacy ``name = "spec"`` tables such as
    ``[tool.poetry.dependencies]``. Metadata tables like ``[project.urls]``
    share the ``key = "value"`` shape and are deliberately ignored.
    """

    def __init__(self) -> None:
        """Initialize the pyproject parser."""
        super().__init__()
        self.ecosystem = Ecosystem.PIP.value
        self.parser_type = "pyproject"
        self.filenames = ["pyproject.toml"]

    def parse_text(self, content: str) -> Dict[str, str]:
        """Parse pyproject.toml content.

        List-style declarations are read first, then optional groups, then
        legacy tables; the first value seen for a name is kept.

        Args:
            content: pyproject.toml text

        Returns:
            Dependency map
        """
        document = load_document(content)
        if document is not None:
            list_specs = self._document_list_dependencies(document)
            grouped_specs = self._document_grouped_dependencies(document)
            legacy_pairs = self._document_legacy_dependencies(document)
        else:
            self.logger.debug("pyproject.toml is not valid TOML; scanning it line by line")
            sections = scan_sections(content)
            list_specs = self._list_dependencies(sections)
            grouped_specs = self._grouped_dependencies(sections)
            legacy_pairs = self._legacy_dependencies(sections)

        dependencies: Dict[str, str] = {}

        for spec in list_specs:
            self._add_requirement(dependencies, spec)

        for spec in grouped_specs:
            self._add_requirement(dependencies, spec)

        for name, version_spec in legacy_pairs:
            dependencies.setdefault(name, version_spec)

        return dependencies

    @staticmethod
    def _string_items(value: Any) -> List[str]:
        # Include-group tables and other non-string items are ignored
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    def _document_list_dependencies(self, document: Dict[str, Any]) -> List[str]:
        specs = self._string_items(document.get("dependencies"))
        specs.extend(self._string_items(document_table(document, "project").get("dependencies")))
        return specs

    def _document_grouped_dependencies(self, document: Dict[str, Any]) -> List[str]:
        specs = []
        for table_name in GROUPED_LIST_SECTIONS:
            for group in document_table(document, table_name).values():
                specs.extend(self._string_items(group))
        return specs

    def _document_legacy_dependencies(self, document: Dict[str, Any]) -> List[Tuple[str, str]]:
        tables = [document_table(document, name) for name in LEGACY_SECTIONS]
        for group in document_table(document, "tool.poetry.group").values():
            if isinstance(group, dict):
                tables.append(document_table(group, "dependencies"))

        pairs = []
        for table in tables:
            for name, value in table.items():
                if name == PYTHON_KEY:
                    continue
                if isinstance(value, str):
                    pairs.append((name, value.strip() or ANY_VERSION))
                elif isinstance(value, dict):
                    version_spec = value.get("version")
                    if not isinstance(version_spec, str):
                        version_spec = ""
                    pairs.append((name, version_spec.strip() or ANY_VERSION))
                else:
                    self.logger.debug(f"Skipping unrecognised entry {name}")
        return pairs

    def _add_requirement(self, dependencies: Dict[str, str], spec: str) -> None:
        parsed = parse_requirement(spec)
        if parsed is None:
            self.logger.debug(f"Skipping unrecognised requirement: {spec}")
            return
        name, version_spec = parsed
        dependencies.setdefault(name, version_spec)

    def _list_dependencies(self, sections: List[Section]) -> List[str]:
        specs = []
        for section in sections:
            if section.name not in LIST_SECTIONS:
                continue
            for key, value in section.entries:
                if key == "dependencies":
                    specs.extend(array_strings(value))
        return specs

    def _grouped_dependencies(self, sections: List[Section]) -> List[str]:
        specs = []
        for section in sections:
            if section.name not in GROUPED_LIST_SECTIONS:
                continue
            # Group names may contain hyphens or dots (lint-tools, test.suite)
            for _group, value in section.entries:
                specs.extend(array_strings(value))
        return specs

    def _legacy_dependencies(self, sections: List[Section]) -> List[Tuple[str, str]]:
        pairs = []
        for section in sections:
            if not self._is_legacy_section(section.name):
                continue
            for name, value in section.entries:
                if name == PYTHON_KEY:
                    continue
                version_spec = self._legacy_version(value)
                if version_spec is None:
                    self.logger.debug(f"Skipping unrecognised entry {name} in [{section.name}]")
                    continue
                pairs.append((name, version_spec))
        return pairs

    @staticmethod
    def _is_legacy_section(name: str) -> bool:
        if name in LEGACY_SECTIONS:
            return True
        return name.startswith("tool.poetry.group.") and name.endswith(".dependencies")

    @staticmethod
    def _legacy_version(value: str) -> Optional[str]:
        version_spec = parse_string(value)
        if version_spec is not None:
            return version_spec.strip() or ANY_VERSION

        table = inline_table(value)
        if table:
            version_spec = parse_string(table.get("version", ""))
            return version_spec.strip() if version_spec else ANY_VERSION

        return None
