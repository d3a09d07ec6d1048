"""Tests for manifest parsers."""

import pytest
from pathlib import Path

from dep_batcher.core.parsers import DependencyParser, ManifestUnreadableError
from dep_batcher.core.parsers.base import ANY_VERSION, ParsedDependencies, read_manifest
from dep_batcher.core.parsers.python import (
    PythonPyProjectParser,
    PythonRequirementsParser,
    parse_requirement,
)
from dep_batcher.core.parsers.nodejs import NodeJSPackageParser
from dep_batcher.core.parsers.rust import RustCargoParser
from dep_batcher.core.parsers.ruby import RubyGemfileParser
from dep_batcher.core.parsers.toml_scan import (
    array_strings,
    document_table,
    inline_table,
    load_document,
    scan_sections,
)


@pytest.fixture
def temp_requirements_file(tmp_path):
    """Create a temporary requirements.txt file."""
    requirements_file = tmp_path / "requirements.txt"
    requirements_file.write_text(
        "fastapi[all]>=0.110.0  # web framework\n"
        "zope.interface==5.4\n"
        "requests\n"
        "# This is a comment\n"
        "-r other-requirements.txt\n"
        "--index-url https://pypi.example.com/simple\n"
        "git+https://github.com/example/tool.git\n"
        "wheelpkg @ https://example.com/wheelpkg-1.0-py3-none-any.whl\n"
        'django>=4.2; python_version >= "3.8"\n'
        "flask ~= 2.0 \\\n"
    )
    return requirements_file


@pytest.fixture
def temp_package_json(tmp_path):
    """Create a temporary package.json file."""
    package_file = tmp_path / "package.json"
    package_file.write_text('''{
        "name": "test-project",
        "version": "1.0.0",
        "dependencies": {
            "react": "^18.2.0",
            "express": "~4.17.1"
        },
        "devDependencies": {
            "react": "^17.0.0",
            "jest": "^29.0.0"
        }
    }''')
    return package_file


class TestPythonRequirementsParser:
    """Test Python requirements.txt parser."""

    def test_can_parse_requirements_file(self, temp_requirements_file):
        parser = PythonRequirementsParser()
        assert parser.can_parse(temp_requirements_file)

    def test_cannot_parse_other_files(self, tmp_path):
        parser = PythonRequirementsParser()
        assert not parser.can_parse(tmp_path / "other.txt")

    def test_parse_requirements_file(self, temp_requirements_file):
        """Test parsing a requirements file with every supported line shape."""
        parser = PythonRequirementsParser()
        result = parser.parse(temp_requirements_file)

        assert isinstance(result, ParsedDependencies)
        assert result.ecosystem == "pip"
        assert result.parser_type == "requirements"
        assert result.source_file == temp_requirements_file
        assert result.dependencies == {
            "fastapi": ">=0.110.0",
            "zope.interface": "==5.4",
            "requests": ANY_VERSION,
            "wheelpkg": ANY_VERSION,
            "django": ">=4.2",
            "flask": "~=2.0",
        }

    def test_key_normalization(self):
        """Extras, inline comments and trailing whitespace never reach the key."""
        parser = PythonRequirementsParser()
        deps = parser.parse_text("uvicorn[standard,watch]>=0.20   # server  \n")
        assert list(deps) == ["uvicorn"]
        assert deps["uvicorn"] == ">=0.20"

    def test_dotted_names_preserved(self):
        parser = PythonRequirementsParser()
        deps = parser.parse_text("google.cloud-storage>=2.0\nbackports.zoneinfo\n")
        assert deps == {"google.cloud-storage": ">=2.0", "backports.zoneinfo": ANY_VERSION}

    def test_first_declaration_wins(self):
        parser = PythonRequirementsParser()
        deps = parser.parse_text("django>=4.2\ndjango==3.2\n")
        assert deps == {"django": ">=4.2"}

    def test_garbage_without_operator_is_skipped(self):
        parser = PythonRequirementsParser()
        deps = parser.parse_text("this is not a requirement\nnumpy\n")
        assert deps == {"numpy": ANY_VERSION}

    def test_empty_content(self):
        parser = PythonRequirementsParser()
        assert parser.parse_text("") == {}
        assert parser.parse_text("# only comments\n\n") == {}


class TestParseRequirement:
    """Test single requirement parsing."""

    @pytest.mark.parametrize("spec,expected", [
        ("fastapi[all]>=0.110.0", ("fastapi", ">=0.110.0")),
        ("requests", ("requests", ANY_VERSION)),
        ("pydantic >= 2, < 3", ("pydantic", ">=2, < 3")),
        ("pkg @ https://example.com/pkg.tar.gz", ("pkg", ANY_VERSION)),
        ("django==4.2 --hash=sha256:abc123", ("django", "==4.2")),
        ("-e .", None),
        ("https://example.com/pkg.tar.gz", None),
        ("", None),
    ])
    def test_parse_requirement(self, spec, expected):
        assert parse_requirement(spec) == expected


class TestPythonPyProjectParser:
    """Test pyproject.toml parser."""

    PYPROJECT = '''
[build-system]
requires = ["setuptools>=61.0", "wheel"]
build-backend = "setuptools.build_meta"

[project]
name = "demo"
version = "1.0.0"
dependencies = [
    "fastapi[all]>=0.110.0",  # web framework
    "pydantic>=2",
]  # end of deps

[project.optional-dependencies]
lint-tools = ["ruff>=0.1"]
"test.suite" = [
    "pytest>=7",
    "pytest-cov",
]

[project.urls]
homepage = "https://example.com"
repository = "https://github.com/example/demo"

[tool.poetry.dependencies]
python = "^3.11"
django = "^4.2"
pydantic = "^1.10"
celery = { version = "^5.3", extras = ["redis"] }
local-lib = { path = "../lib" }

[tool.poetry.group.dev.dependencies]
black = "^23.0"
'''

    def test_parse_pyproject(self, tmp_path):
        """Test that every dependency shape is read and nothing else."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(self.PYPROJECT)

        result = PythonPyProjectParser().parse(pyproject)

        assert result.dependencies == {
            "fastapi": ">=0.110.0",
            "pydantic": ">=2",
            "ruff": ">=0.1",
            "pytest": ">=7",
            "pytest-cov": ANY_VERSION,
            "django": "^4.2",
            "celery": "^5.3",
            "local-lib": ANY_VERSION,
            "black": "^23.0",
        }

    def test_metadata_sections_excluded(self):
        deps = PythonPyProjectParser().parse_text(self.PYPROJECT)
        for key in ("homepage", "repository", "name", "version", "requires", "build-backend", "python"):
            assert key not in deps

    def test_comment_terminated_array(self):
        content = (
            "[project]\n"
            "dependencies = [\n"
            '    "requests>=2.31",\n'
            "]  # end of deps\n"
            'readme = "README.md"\n'
        )
        deps = PythonPyProjectParser().parse_text(content)
        assert deps == {"requests": ">=2.31"}

    def test_dependencies_before_any_header(self):
        deps = PythonPyProjectParser().parse_text('dependencies = ["httpx>=0.27"]\n')
        assert deps == {"httpx": ">=0.27"}

    def test_dependency_groups_ignore_include_tables(self):
        content = (
            "[dependency-groups]\n"
            'test = ["pytest>=8"]\n'
            'dev = [{include-group = "test"}, "mypy"]\n'
        )
        deps = PythonPyProjectParser().parse_text(content)
        assert deps == {"pytest": ">=8", "mypy": ANY_VERSION}

    def test_list_declaration_wins_over_legacy_table(self):
        content = (
            "[project]\n"
            'dependencies = ["django>=5.0"]\n'
            "[tool.poetry.dependencies]\n"
            'django = "^4.2"\n'
        )
        deps = PythonPyProjectParser().parse_text(content)
        assert deps == {"django": ">=5.0"}

    def test_header_inside_multiline_string(self):
        """A bracketed line inside a multi-line string is not a table header."""
        content = (
            "[project]\n"
            'description = """\n'
            "Demo tool.\n"
            "[beta]\n"
            '"""\n'
            'dependencies = ["requests>=2.31"]\n'
        )
        deps = PythonPyProjectParser().parse_text(content)
        assert deps == {"requests": ">=2.31"}

    def test_invalid_toml_still_scanned(self):
        """Files that are not valid TOML fall back to the line scanner."""
        content = (
            "[project]\n"
            'dependencies = ["requests>=2.31"]\n'
            'dependencies = ["httpx"]\n'
        )
        assert load_document(content) is None
        deps = PythonPyProjectParser().parse_text(content)
        assert deps == {"requests": ">=2.31", "httpx": ANY_VERSION}


class TestNodeJSPackageParser:
    """Test Node.js package.json parser."""

    def test_can_parse_package_json(self, temp_package_json):
        assert NodeJSPackageParser().can_parse(temp_package_json)

    def test_parse_package_json(self, temp_package_json):
        """Production dependencies come first and win over devDependencies."""
        result = NodeJSPackageParser().parse(temp_package_json)

        assert result.ecosystem == "npm"
        assert result.dependencies == {
            "react": "^18.2.0",
            "express": "~4.17.1",
            "jest": "^29.0.0",
        }
        assert list(result.dependencies) == ["react", "express", "jest"]

    def test_missing_sections(self):
        assert NodeJSPackageParser().parse_text('{"name": "bare"}') == {}

    def test_non_string_versions_skipped(self):
        content = '{"dependencies": {"react": "^18.0.0", "weird": 42, "nested": {"a": 1}}}'
        assert NodeJSPackageParser().parse_text(content) == {"react": "^18.0.0"}

    def test_invalid_json(self):
        assert NodeJSPackageParser().parse_text('{"dependencies": {') == {}

    def test_non_object_document(self):
        assert NodeJSPackageParser().parse_text('["react"]') == {}

    def test_deeply_nested_json(self):
        """Nesting too deep for the JSON decoder is treated as invalid JSON."""
        content = "[" * 200000 + "]" * 200000
        assert NodeJSPackageParser().parse_text(content) == {}


class TestRustCargoParser:
    """Test Cargo.toml parser."""

    CARGO = '''
[package]
name = "svc"
version = "0.1.0"

[dependencies]
serde = "1.0"  # serialization
tokio = { version = "1", features = [
    "full",
] }
local = { path = "../local" }
actix-web = { version = "4" }

[dependencies.reqwest]
version = "0.11"
features = ["json"]

[dev-dependencies]
criterion = "0.5"
'''

    def test_parse_cargo(self, tmp_path):
        cargo = tmp_path / "Cargo.toml"
        cargo.write_text(self.CARGO)

        result = RustCargoParser().parse(cargo)

        assert result.ecosystem == "cargo"
        assert result.dependencies == {
            "serde": "1.0",
            "tokio": "1",
            "actix-web": "4",
            "reqwest": "0.11",
        }

    def test_package_metadata_excluded(self):
        deps = RustCargoParser().parse_text(self.CARGO)
        assert "name" not in deps
        assert "version" not in deps
        assert "criterion" not in deps

    def test_path_only_dependency_skipped(self):
        deps = RustCargoParser().parse_text('[dependencies]\nlocal = { path = "../local" }\n')
        assert deps == {}

    def test_header_inside_multiline_string(self):
        content = (
            "[package]\n"
            'description = """\n'
            "[dependencies]\n"
            'fake = "1"\n'
            '"""\n'
            "[dependencies]\n"
            'serde = "1.0"\n'
        )
        assert RustCargoParser().parse_text(content) == {"serde": "1.0"}

    def test_invalid_toml_still_scanned(self):
        content = '[dependencies]\nserde = "1.0"\nserde = "2.0"\nrand = { version = "0.8" }\n'
        assert RustCargoParser().parse_text(content) == {"serde": "1.0", "rand": "0.8"}


class TestRubyGemfileParser:
    """Test Gemfile parser."""

    def test_parse_gemfile(self, tmp_path):
        gemfile = tmp_path / "Gemfile"
        gemfile.write_text(
            "source 'https://rubygems.org'\n"
            "gem 'rails', '~> 7.0'\n"
            'gem "puma", ">= 5.0", "< 7"\n'
            "gem 'rspec-rails', group: :test\n"
            "# gem 'commented-out'\n"
            "gem('sidekiq')\n"
            "gem 'rails', '~> 6.1'\n"
        )

        result = RubyGemfileParser().parse(gemfile)

        assert result.ecosystem == "bundler"
        assert result.dependencies == {
            "rails": "~> 7.0",
            "puma": ">= 5.0, < 7",
            "rspec-rails": ANY_VERSION,
            "sidekiq": ANY_VERSION,
        }

    def test_non_gem_lines_ignored(self):
        content = "group :development do\n  gem 'pry'\nend\nruby '3.2.0'\n"
        assert RubyGemfileParser().parse_text(content) == {"pry": ANY_VERSION}


class TestTomlScanner:
    """Test the text-based TOML scanner."""

    def test_sections_and_multiline_values(self):
        sections = scan_sections('top = 1\n[a.b]\nx = [\n  "1",\n  "2"\n]\n["quoted.name"]\ny = "z"\n')
        assert [s.name for s in sections] == ["", "a.b", "quoted.name"]
        assert sections[1].entries == [("x", '[ "1", "2" ]')]

    def test_hash_inside_string_is_not_a_comment(self):
        sections = scan_sections('[s]\nurl = "https://example.com/#frag"  # trailing\n')
        assert sections[1].entries == [("url", '"https://example.com/#frag"')]

    def test_unterminated_array_kept(self):
        sections = scan_sections('dependencies = [\n  "requests",\n')
        assert array_strings(sections[0].entries[0][1]) == ["requests"]

    def test_inline_table(self):
        assert inline_table('{ version = "1", features = ["a", "b"] }') == {
            "version": '"1"',
            "features": '["a", "b"]',
        }
        assert inline_table('"1.0"') == {}

    def test_load_document(self):
        document = load_document('[tool.poetry.dependencies]\ndjango = "^4.2"\n')
        assert document_table(document, "tool.poetry.dependencies") == {"django": "^4.2"}
        assert document_table(document, "tool.poetry.group") == {}
        assert load_document("[unterminated\n") is None

    def test_document_table_non_table_value(self):
        assert document_table({"project": {"dependencies": ["a"]}}, "project.dependencies") == {}


class TestUnreadableManifests:
    """Test that unreadable manifests surface as ManifestUnreadableError."""

    def test_directory_named_like_manifest(self, tmp_path):
        (tmp_path / "Cargo.toml").mkdir()
        with pytest.raises(ManifestUnreadableError, match="not a file"):
            RustCargoParser().parse(tmp_path / "Cargo.toml")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestUnreadableError):
            RubyGemfileParser().parse(tmp_path / "Gemfile")

    def test_invalid_utf8(self, tmp_path):
        requirements = tmp_path / "requirements.txt"
        requirements.write_bytes(b"django==4.2\n\xff\xfe\xfa\n")
        with pytest.raises(ManifestUnreadableError) as exc_info:
            read_manifest(requirements)
        assert exc_info.value.path == requirements


class TestByteOrderMark:
    """Test manifests saved with a UTF-8 byte order mark."""

    BOM = b"\xef\xbb\xbf"

    def test_requirements_with_bom(self, tmp_path):
        requirements = tmp_path / "requirements.txt"
        requirements.write_bytes(self.BOM + b"django>=4.2\nrequests\n")

        result = PythonRequirementsParser().parse(requirements)

        assert result.dependencies == {"django": ">=4.2", "requests": ANY_VERSION}

    def test_package_json_with_bom(self, tmp_path):
        package_json = tmp_path / "package.json"
        package_json.write_bytes(self.BOM + b'{"dependencies": {"react": "^18.2.0"}}')

        result = NodeJSPackageParser().parse(package_json)

        assert result.dependencies == {"react": "^18.2.0"}

    def test_pyproject_header_on_first_line(self, tmp_path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_bytes(self.BOM + b'[tool.poetry.dependencies]\ndjango = "^4.2"\n')

        result = PythonPyProjectParser().parse(pyproject)

        assert result.dependencies == {"django": "^4.2"}

    def test_read_manifest_strips_bom(self, tmp_path):
        gemfile = tmp_path / "Gemfile"
        gemfile.write_bytes(self.BOM + b"gem 'rails'\n")
        assert read_manifest(gemfile) == "gem 'rails'\n"


class TestParserRegistry:
    """Test the built-in parser registry."""

    def test_supported_ecosystems(self):
        assert DependencyParser.get_supported_ecosystems() == ["npm", "pip", "cargo", "bundler"]

    def test_find_parser_for_file(self):
        assert isinstance(DependencyParser.find_parser_for_file(Path("pyproject.toml")), PythonPyProjectParser)
        assert isinstance(DependencyParser.find_parser_for_file(Path("Gemfile")), RubyGemfileParser)
        assert DependencyParser.find_parser_for_file(Path("go.mod")) is None

    def test_pip_parsers_in_merge_order(self):
        parsers = DependencyParser.get_ecosystem_parsers("pip")
        assert [p.parser_type for p in parsers] == ["requirements", "pyproject"]

    def test_parse_file(self, temp_package_json):
        result = DependencyParser.parse_file(temp_package_json)
        assert result is not None
        assert "jest" in result.dependencies

    def test_parse_unknown_file(self, tmp_path):
        unknown = tmp_path / "go.mod"
        unknown.write_text("module example.com/x\n")
        assert DependencyParser.parse_file(unknown) is None
