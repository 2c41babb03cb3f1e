from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


# ---------- Store-facing metadata ----------

@dataclass(frozen=True)
class Heading:
    text: str
    level: int          # 1..6
    start_line: int     # 0-based


@dataclass(frozen=True)
class BlockSpan:
    start_line: int     # 0-based, inclusive
    end_line: int       # 0-based, inclusive


@dataclass
class DocMetadata:
    """
    Structural metadata of one document as the expander sees it.

    Headings are kept in document order. Block keys are anchor slugs
    (see slug.slugify); a document never maps one slug twice.
    """
    headings: List[Heading] = field(default_factory=list)
    blocks: Dict[str, BlockSpan] = field(default_factory=dict)

    def find_heading(self, text: str) -> Optional[int]:
        """Index of the first heading whose text equals `text` exactly."""
        for i, h in enumerate(self.headings):
            if h.text == text:
                return i
        return None

    def section_end(self, index: int) -> Optional[int]:
        """
        Line where the section of heading `index` stops (exclusive):
        start line of the next heading with level <= its own, None for end-of-document.
        """
        level = self.headings[index].level
        for h in self.headings[index + 1:]:
            if h.level <= level:
                return h.start_line
        return None


# ---------- Parser Intermediate Representation ----------

@dataclass
class HeadingNode:
    """Heading node in a parsed document."""
    level: int                 # 1..6
    title: str                 # heading text (no '#', no setext underline)
    slug: str                  # github-style slug
    start_line: int            # line index of the heading (0-based)


@dataclass
class ParsedDoc:
    """
    Markdown parse result:
      • source lines;
      • headings;
      • fenced-block ranges;
      • block anchors (slug → inclusive line span);
      • frontmatter range (if any).
    """
    lines: List[str]
    headings: List[HeadingNode]
    fenced_ranges: List[Tuple[int, int]]        # [start, end_excl]
    blocks: Dict[str, BlockSpan] = field(default_factory=dict)
    frontmatter_range: Optional[Tuple[int, int]] = None

    def metadata(self) -> DocMetadata:
        return DocMetadata(
            headings=[Heading(text=h.title, level=h.level, start_line=h.start_line) for h in self.headings],
            blocks=dict(self.blocks),
        )
