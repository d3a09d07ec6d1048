"""Manifest parsers for the supported ecosystems."""

from .base import (
    ANY_VERSION,
    BaseParser,
    Ecosystem,
    ManifestUnreadableError,
    ParsedDependencies,
    read_manifest,
)
from .python import PythonRequirementsParser, PythonPyProjectParser
from .nodejs import NodeJSPackageParser
from .rust import RustCargoParser
from .ruby import RubyGemfileParser
from .registry import ParserRegistry

# Register built-in parsers
registry = ParserRegistry()

# Node.js parsers
registry.register(Ecosystem.NPM.value, "package", NodeJSPackageParser())

# Python parsers; pyproject.toml is merged after requirements.txt
registry.register(Ecosystem.PIP.value, "requirements", PythonRequirementsParser())
registry.register(Ecosystem.PIP.value, "pyproject", PythonPyProjectParser())

# Rust parsers
registry.register(Ecosystem.CARGO.value, "cargo", RustCargoParser())

# Ruby parsers
registry.register(Ecosystem.BUNDLER.value, "gemfile", RubyGemfileParser())

# Convenience exports
DependencyParser = registry
__all__ = [
    "ANY_VERSION",
    "BaseParser",
    "DependencyParser",
    "Ecosystem",
    "ManifestUnreadableError",
    "NodeJSPackageParser",
    "ParsedDependencies",
    "ParserRegistry",
    "PythonPyProjectParser",
    "PythonRequirementsParser",
    "RubyGemfileParser",
    "RustCargoParser",
    "read_manifest",
    "registry",
]
