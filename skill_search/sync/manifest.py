"""SKILL.md frontmatter parsing.

The parser is line-based rather than a YAML load so that hand-written
manifests with stray colons or unbalanced quotes still yield usable fields.
It never raises: anything it cannot read degrades to empty values.
"""

from __future__ import annotations

FRONTMATTER_DELIMITER = "---"
_QUOTES = ('"', "'")


def parse_skill_frontmatter(content: str) -> tuple[str, str, str | None]:
    """Extract ``(name, description, version)`` from a SKILL.md document.

    Falls back to the first ``# `` heading for the name when the frontmatter
    is missing or has no name.
    """
    name = ""
    description = ""
    version = None

    block = _frontmatter_block(content)
    if block is not None:
        for line in block.splitlines():
            line = line.strip()
            if line.startswith("name:"):
                name = _clean_value(line[len("name:"):])
            elif line.startswith("description:"):
                description = _clean_value(line[len("description:"):])
            elif line.startswith("version:"):
                version = _clean_value(line[len("version:"):])

    if not name:
        name = _first_heading(content)

    return name, description, version


def _frontmatter_block(content: str) -> str | None:
    if not content.startswith(FRONTMATTER_DELIMITER):
        return None
    start = len(FRONTMATTER_DELIMITER)
    end = content.find(FRONTMATTER_DELIMITER, start)
    if end == -1:
        return None
    return content[start:end]


def _clean_value(raw: str) -> str:
    """Strip whitespace and one layer of matching surrounding quotes."""
    value = raw.strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        value = value[1:-1]
    return value


def _first_heading(content: str) -> str:
    for line in content.splitlines():
        if line.startswith("# "):
            return line[2:].strip()
    return ""
