"""Ruby (bundler) manifest parser."""

import re
from typing import Dict, List

from .base import ANY_VERSION, BaseParser, Ecosystem

# gem 'rails', '~> 7.0'   or   gem("rails")
GEM_PATTERN = re.compile(r'''^gem(?:\s+|\s*\(\s*)(['"])([^'"]+)\1(.*)$''')
CONSTRAINT_PATTERN = re.compile(r'''^\s*,\s*(['"])([^'"]*)\1''')


class RubyGemfileParser(BaseParser):
    """Parser for Ruby Gemfile manifests."""

    def __init__(self) -> None:
        """Initialize the Gemfile parser."""
        super().__init__()
        self.ecosystem = Ecosystem.BUNDLER.value
        self.parser_type = "gemfile"
        self.filenames = ["Gemfile"]

    def parse_text(self, content: str) -> Dict[str, str]:
        """Parse Gemfile content.

        Args:
            content: Gemfile text

        Returns:
            Dependency map
        """
        dependencies: Dict[str, str] = {}

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            match = GEM_PATTERN.match(line)
            if not match:
                continue

            name = match.group(2).strip()
            if not name:
                continue

            constraints = self._constraints(match.group(3))
            dependencies.setdefault(name, ", ".join(constraints) if constraints else ANY_VERSION)

        return dependencies

    @staticmethod
    def _constraints(rest: str) -> List[str]:
        """Collect the quoted version arguments that follow the gem name."""
        constraints = []
        while True:
            match = CONSTRAINT_PATTERN.match(rest)
            if not match:
                break
            if match.group(2).strip():
                constraints.append(match.group(2).strip())
            rest = rest[match.end():]
        return constraints
