"""
Frontmatter handling for transcluded notes.

A note may open with a YAML block fenced by ``---`` lines. It carries note
metadata (tags, aliases, ...) and never belongs to transcluded content.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

_yaml = YAML(typ="safe")

# Blank lines allowed before it, then a line that is exactly "---", anything,
# and the next line that is exactly "---".
# The newline after the closing rule is left in place.
_FRONTMATTER_PATTERN = re.compile(
    r'\A(?:[ \t]*\r?\n)*---\r?\n(?:(.*?)\r?\n)?---(?=\r?\n|\Z)',
    re.DOTALL
)


def strip_frontmatter(text: str) -> str:
    """
    Remove a leading frontmatter block, returning only content.

    The YAML inside is not validated: whatever sits between the rules goes.
    Text without a closing rule is returned untouched.

    Examples:
        >>> strip_frontmatter("---\\ntags: [a]\\n---\\n# Content")
        '\\n# Content'
    """
    return _FRONTMATTER_PATTERN.sub("", text, count=1)


def parse_frontmatter(text: str) -> Tuple[Optional[Dict[str, Any]], str]:
    """
    Parse YAML frontmatter.

    Args:
        text: Full text of the note

    Returns:
        Tuple of (data, remaining_text):
        - data: Parsed mapping, {} for an empty block, None if there is
          no block or it is not a YAML mapping
        - remaining_text: Text with the block removed (or the original text)
    """
    match = _FRONTMATTER_PATTERN.match(text)
    if not match:
        return None, text

    yaml_content = match.group(1) or ""
    remaining_text = text[match.end():]

    try:
        data = _yaml.load(yaml_content)
    except YAMLError:
        # broken YAML is still a frontmatter block for stripping purposes,
        # but there is nothing to report
        return None, remaining_text

    if data is None:
        return {}, remaining_text
    if not isinstance(data, dict):
        return None, remaining_text
    return dict(data), remaining_text


def frontmatter_end_line(text: str) -> Optional[int]:
    """
    0-based index of the line right after the closing rule, None when text
    does not open with a frontmatter block.
    """
    match = _FRONTMATTER_PATTERN.match(text)
    if not match:
        return None
    return text.count("\n", 0, match.end()) + 1


__all__ = [
    "parse_frontmatter",
    "strip_frontmatter",
    "frontmatter_end_line",
]
