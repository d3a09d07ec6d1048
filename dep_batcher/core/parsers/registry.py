"""Registry of manifest parsers keyed by ecosystem and parser type."""

from pathlib import Path
from typing import Dict, List, Optional

from .base import BaseParser, ParsedDependencies


class ParserRegistry:
    """Manifest parsers grouped per ecosystem.

    Registration order within an ecosystem is the order its manifests are
    merged in, so parsers registered later win on key collisions.
    """

    def __init__(self) -> None:
        self._ecosystems: Dict[str, Dict[str, BaseParser]] = {}

    def register(self, ecosystem: str, parser_type: str, parser: BaseParser) -> None:
        """Register a parser for an ecosystem and type.

        Args:
            ecosystem: Ecosystem name (e.g., 'pip', 'npm')
            parser_type: Parser type (e.g., 'requirements', 'package')
            parser: Parser instance to register

        Raises:
            ValueError: If the parser belongs to a different ecosystem
        """
        if parser.ecosystem and parser.ecosystem != ecosystem:
            raise ValueError(f"{type(parser).__name__} parses {parser.ecosystem} manifests, not {ecosystem}")
        self._ecosystems.setdefault(ecosystem, {})[parser_type] = parser

    def get_parser(self, ecosystem: str, parser_type: Optional[str]) -> Optional[BaseParser]:
        """Look up the parser for a manifest kind.

        Args:
            ecosystem: Ecosystem name
            parser_type: Parser type; None for marker-only manifests

        Returns:
            Registered parser, or None
        """
        if parser_type is None:
            return None
        return self._ecosystems.get(ecosystem, {}).get(parser_type)

    def get_ecosystem_parsers(self, ecosystem: str) -> List[BaseParser]:
        return list(self._ecosystems.get(ecosystem, {}).values())

    def find_parser_for_file(self, file_path: Path) -> Optional[BaseParser]:
        """Find the parser whose manifest name matches ``file_path``."""
        for parsers in self._ecosystems.values():
            for parser in parsers.values():
                if parser.can_parse(file_path):
                    return parser
        return None

    def get_supported_ecosystems(self) -> List[str]:
        return list(self._ecosystems)

    def get_supported_parser_types(self) -> List[str]:
        return [parser_type for parsers in self._ecosystems.values() for parser_type in parsers]

    def parse_file(self, file_path: Path) -> Optional[ParsedDependencies]:
        """Parse a single manifest with whichever parser recognises it.

        Args:
            file_path: Path to the manifest

        Returns:
            Parsed dependencies, or None if no parser recognises the file name

        Raises:
            ManifestUnreadableError: If the file cannot be read
        """
        parser = self.find_parser_for_file(file_path)
        return parser.parse(file_path) if parser else None
