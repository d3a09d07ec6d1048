"""Node.js (npm) manifest parser."""

import json
from typing import Any, Dict

from .base import BaseParser, Ecosystem

# Production first, then development
DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")


class NodeJSPackageParser(BaseParser):
    """Parser for Node.js package.json files."""

    def __init__(self) -> None:
        """Initialize the package.json parser."""
        super().__init__()
        self.ecosystem = Ecosystem.NPM.value
        self.parser_type = "package"
        self.filenames = ["package.json"]

    def parse_text(self, content: str) -> Dict[str, str]:
        """Parse package.json content.

        Args:
            content: package.json text

        Returns:
            Dependency map built from the production and development sections
        """
        try:
            data = json.loads(content)
        except (json.JSONDecodeError, RecursionError) as e:
            self.logger.warning(f"package.json is not valid JSON ({e}); no dependencies read")
            return {}

        if not isinstance(data, dict):
            self.logger.warning("package.json must contain a JSON object; no dependencies read")
            return {}

        return self._extract_dependencies(data)

    def _extract_dependencies(self, data: Dict[str, Any]) -> Dict[str, str]:
        """Extract dependencies from package.json data.

        Args:
            data: Parsed JSON data

        Returns:
            Dependency map
        """
        dependencies: Dict[str, str] = {}

        for section_name in DEPENDENCY_SECTIONS:
            section = data.get(section_name)
            if not isinstance(section, dict):
                continue
            for name, version_spec in section.items():
                name = name.strip()
                if not name or not isinstance(version_spec, str):
                    self.logger.debug(f"Skipping malformed entry in {section_name}: {name!r}")
                    continue
                dependencies.setdefault(name, version_spec.strip())

        return dependencies
