"""Reading TOML manifests.

Well-formed files are loaded with ``tomllib`` (``tomli`` before Python
3.11). Files the TOML parser rejects fall back to a lightweight line
scanner that understands only the subset needed to find dependency
declarations: ``[section]`` headers, ``key = value`` statements whose value
may span several lines while a bracket or brace is open, and ``#`` comments
outside string literals. Anything else is skipped rather than rejected.
"""

import re
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

HEADER_PATTERN = re.compile(r'^\[\[?([^\[\]]+)\]\]?$')
KEY_VALUE_PATTERN = re.compile(r'''^("[^"]*"|'[^']*'|[\w.-]+)\s*=\s*(.*)$''', re.DOTALL)
SECTION_PART_PATTERN = re.compile(r'"[^"]*"|\'[^\']*\'|[^.]+')

OPENERS = "[{"
CLOSERS = "]}"


@dataclass
class Section:
    """A manifest section and the ``key = value`` statements it holds."""

    name: str
    entries: List[Tuple[str, str]] = field(default_factory=list)


def _outside_strings(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(index, char)`` for characters that are not part of a string literal."""
    quote = None
    escaped = False
    for i, ch in enumerate(text):
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\" and quote == '"':
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ('"', "'"):
            quote = ch
            continue
        yield i, ch


def strip_comment(line: str) -> str:
    """Remove a trailing ``#`` comment that is not inside a string."""
    for i, ch in _outside_strings(line):
        if ch == "#":
            return line[:i]
    return line


def bracket_depth(text: str) -> int:
    """Net number of brackets and braces left open by ``text``."""
    depth = 0
    for _, ch in _outside_strings(text):
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
    return depth


def unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        return text[1:-1]
    return text


def _section_name(raw: str) -> str:
    return ".".join(unquote(part) for part in SECTION_PART_PATTERN.findall(raw.strip()))


def scan_sections(content: str) -> List[Section]:
    """Split manifest text into sections of ``(key, raw value)`` statements.

    Statements before the first header belong to a section named ``""``.
    A value that leaves a bracket or brace open is continued on the following
    lines until it closes, so multi-line arrays and inline tables arrive as a
    single statement.
    """
    sections = [Section(name="")]
    pending_key: Optional[str] = None
    pending_value = ""
    depth = 0

    for raw_line in content.splitlines():
        line = strip_comment(raw_line).strip()

        if pending_key is not None:
            pending_value = f"{pending_value} {line}" if line else pending_value
            depth += bracket_depth(line)
            if depth <= 0:
                sections[-1].entries.append((pending_key, pending_value.strip()))
                pending_key = None
            continue

        if not line:
            continue

        header = HEADER_PATTERN.match(line)
        if header:
            sections.append(Section(name=_section_name(header.group(1))))
            continue

        statement = KEY_VALUE_PATTERN.match(line)
        if not statement:
            continue

        key = unquote(statement.group(1))
        value = statement.group(2).strip()
        depth = bracket_depth(value)
        if depth > 0:
            pending_key, pending_value = key, value
        else:
            sections[-1].entries.append((key, value))

    # An unterminated value at end of file is kept; value parsers skip what they cannot read
    if pending_key is not None:
        sections[-1].entries.append((pending_key, pending_value.strip()))

    return sections


def parse_string(raw: str) -> Optional[str]:
    """Return the contents of a leading string literal, or None."""
    raw = raw.strip()
    if not raw or raw[0] not in ('"', "'"):
        return None
    end = raw.find(raw[0], 1)
    if end == -1:
        return None
    return raw[1:end]


def array_strings(raw: str) -> List[str]:
    """Return the string items of an array value.

    Only strings directly inside the outer array are returned; strings
    nested in inline tables or inner arrays are ignored.
    """
    raw = raw.strip()
    if not raw.startswith("["):
        return []

    items: List[str] = []
    depth = 0
    quote = None
    start = 0
    escaped = False
    for i, ch in enumerate(raw):
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\" and quote == '"':
                escaped = True
            elif ch == quote:
                if depth == 1:
                    items.append(raw[start:i])
                quote = None
            continue
        if ch in ('"', "'"):
            quote = ch
            start = i + 1
        elif ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
            if depth == 0:
                break
    return items


def _split_top_level(text: str, separator: str = ",") -> List[str]:
    pieces = []
    depth = 0
    start = 0
    for i, ch in _outside_strings(text):
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
        elif ch == separator and depth == 0:
            pieces.append(text[start:i])
            start = i + 1
    pieces.append(text[start:])
    return [piece.strip() for piece in pieces if piece.strip()]


def inline_table(raw: str) -> Dict[str, str]:
    """Return the ``key -> raw value`` pairs of an inline table value."""
    raw = raw.strip()
    if not raw.startswith("{"):
        return {}

    end = None
    depth = 0
    for i, ch in _outside_strings(raw):
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
            if depth == 0:
                end = i
                break
    if end is None:
        return {}

    table: Dict[str, str] = {}
    for piece in _split_top_level(raw[1:end]):
        key, sep, value = piece.partition("=")
        if sep:
            table[unquote(key)] = value.strip()
    return table


def load_document(content: str) -> Optional[Dict[str, Any]]:
    """Load well-formed TOML text.

    Args:
        content: Manifest text

    Returns:
        Parsed document, or None if the text is not valid TOML
    """
    try:
        return tomllib.loads(content)
    except (tomllib.TOMLDecodeError, RecursionError):
        return None


def document_table(document: Dict[str, Any], dotted_name: str) -> Dict[str, Any]:
    """Return the table at ``dotted_name``, or an empty dict if any level is missing."""
    table: Any = document
    for part in dotted_name.split("."):
        if not isinstance(table, dict):
            return {}
        table = table.get(part, {})
    return table if isinstance(table, dict) else {}
