"""
Lightweight markdown structure: headings, block anchors, frontmatter.
"""

from .frontmatter import frontmatter_end_line, parse_frontmatter, strip_frontmatter
from .model import BlockSpan, DocMetadata, Heading, HeadingNode, ParsedDoc
from .parser import parse_markdown
from .slug import slugify, slugify_github

__all__ = [
    "BlockSpan",
    "DocMetadata",
    "Heading",
    "HeadingNode",
    "ParsedDoc",
    "parse_markdown",
    "parse_frontmatter",
    "strip_frontmatter",
    "frontmatter_end_line",
    "slugify",
    "slugify_github",
]
