from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from .frontmatter import frontmatter_end_line
from .model import BlockSpan, HeadingNode, ParsedDoc
from .slug import slugify, slugify_github

_ATX = re.compile(r"^(?P<indent>[ ]{0,3})(?P<marks>#{1,6})[ \t]+(?P<title>.+?)\s*$")
_ATX_CLOSING = re.compile(r"[ \t]+#+$")
_SETEXT_U = re.compile(r"^(?P<underline>={2,})\s*$")
_SETEXT_L = re.compile(r"^(?P<underline>-{2,})\s*$")
_FENCE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<lang>[A-Za-z0-9_\-+]*)")
# "^id" at the end of a line, either alone or after whitespace
_BLOCK_ANCHOR = re.compile(r"(?:^|[ \t])\^(?P<id>[A-Za-z0-9][A-Za-z0-9\-_]*)[ \t]*\r?$")
_ANCHOR_ONLY = re.compile(r"^[ \t]*\^[A-Za-z0-9][A-Za-z0-9\-_]*[ \t]*\r?$")
_LIST_ITEM = re.compile(r"^[ \t]*(?:[-*+]|\d+[.)])[ \t]+")
# blockquote or table row
_NON_PARAGRAPH = re.compile(r"^[ ]{0,3}[>|]")


def _scan_fenced(lines: List[str], start: int = 0) -> List[Tuple[int, int]]:
    """Returns fenced-block ranges [start, end_excl], scanning from line `start`."""
    out: List[Tuple[int, int]] = []
    i = start
    n = len(lines)
    while i < n:
        m = _FENCE.match(lines[i])
        if not m:
            i += 1
            continue
        open_marks = m.group("fence")              # e.g. "```" or "~~~~"
        tick = open_marks[0]                       # '`' or '~'
        need = len(open_marks)                     # minimal closing length
        # Closing fence: same char, at least `need` times, optional trailing spaces.
        fence_pat = re.compile(rf"^(?: {{0,3}}){re.escape(tick)}{{{need},}}\s*$")
        begin = i
        i += 1
        while i < n and not fence_pat.match(lines[i]):
            i += 1
        if i < n:
            end = i + 1
            out.append((begin, end))
            i = end
        else:
            # unclosed block runs to the end
            out.append((begin, n))
            break
    return out


def _range_of(i: int, ranges: List[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
    for a, b in ranges:
        if a <= i < b:
            return (a, b)
    return None


def _in_any_range(i: int, ranges: List[Tuple[int, int]]) -> bool:
    return _range_of(i, ranges) is not None


def _scan_frontmatter(text: str, lines: List[str]) -> Optional[Tuple[int, int]]:
    """
    YAML front matter, recognized by the same rule strip_frontmatter uses.
    The block is taken whole (both rules included) together with the blank
    lines that follow the closing rule.
    Returns (0, end_excl).
    """
    end_excl = frontmatter_end_line(text)
    if end_excl is None:
        return None
    while end_excl < len(lines) and not lines[end_excl].strip():
        end_excl += 1
    return (0, end_excl)


def _is_setext_title(line: str) -> bool:
    """A Setext underline only turns a plain paragraph line into a heading."""
    if not line.strip():
        return False
    if _SETEXT_U.match(line) or _SETEXT_L.match(line) or _LIST_ITEM.match(line) or _ANCHOR_ONLY.match(line):
        return False
    return not _NON_PARAGRAPH.match(line)


def _block_start(
    lines: List[str],
    anchor_line: int,
    *,
    heading_lines: set[int],
    fenced: List[Tuple[int, int]],
    floor: int,
) -> int:
    """
    First line of the block an anchor on `anchor_line` belongs to.

    A trailing "text ^id" closes the paragraph it sits in; a list item or a
    heading carrying the anchor is a block on its own. A bare "^id" line
    names the block right above it, even across blank lines.
    """
    line = lines[anchor_line]
    if anchor_line in heading_lines or (_LIST_ITEM.match(line) and not _ANCHOR_ONLY.match(line)):
        return anchor_line

    i = anchor_line
    if _ANCHOR_ONLY.match(line):
        i -= 1
        while i >= floor and not lines[i].strip():
            i -= 1
        if i < floor:
            return anchor_line

    start = i
    while i >= floor:
        fence = _range_of(i, fenced)
        if fence is not None:
            # take the whole fenced block and continue above it
            start = fence[0]
            i = fence[0] - 1
            continue
        if not lines[i].strip() or i in heading_lines:
            break
        start = i
        i -= 1
    return start


def _scan_blocks(
    lines: List[str],
    *,
    heading_lines: set[int],
    fenced: List[Tuple[int, int]],
    floor: int,
) -> Dict[str, BlockSpan]:
    blocks: Dict[str, BlockSpan] = {}
    for i in range(floor, len(lines)):
        if _in_any_range(i, fenced):
            continue
        m = _BLOCK_ANCHOR.search(lines[i])
        if not m:
            continue
        key = slugify(m.group("id"))
        if not key or key in blocks:
            continue
        start = _block_start(lines, i, heading_lines=heading_lines, fenced=fenced, floor=floor)
        blocks[key] = BlockSpan(start_line=start, end_line=i)
    return blocks


def parse_markdown(text: str) -> ParsedDoc:
    """
    Lightweight markdown parser:
      • YAML front matter
      • fenced blocks (``` / ~~~) below it
      • ATX (#..######) and Setext (====/----) headings
      • block anchors (trailing ^id)

    Lines are split on '\\n' only, so line numbers line up with
    ``text.split("\\n")`` slicing done by the expander. Section boundaries
    are left to DocMetadata.section_end.
    """
    lines = text.split("\n")
    front = _scan_frontmatter(text, lines)
    floor = front[1] if front else 0
    fenced = _scan_fenced(lines, floor)

    headings: List[HeadingNode] = []

    # ATX headings (lines inside fenced blocks are ignored)
    for i in range(floor, len(lines)):
        if _in_any_range(i, fenced):
            continue
        m = _ATX.match(lines[i])
        if m:
            level = len(m.group("marks"))
            title = _ATX_CLOSING.sub("", m.group("title")).strip()
            headings.append(HeadingNode(level=level, title=title, slug=slugify_github(title), start_line=i))

    atx_lines = {h.start_line for h in headings}

    # Setext: paragraph line X followed by ==== or ---- (neither of them fenced)
    i = floor
    n = len(lines)
    while i + 1 < n:
        if _in_any_range(i, fenced) or _in_any_range(i + 1, fenced) or i in atx_lines:
            i += 1
            continue
        under = lines[i + 1]
        if (_SETEXT_U.match(under) or _SETEXT_L.match(under)) and _is_setext_title(lines[i]):
            level = 1 if _SETEXT_U.match(under) else 2
            title = lines[i].strip()
            headings.append(HeadingNode(level=level, title=title, slug=slugify_github(title), start_line=i))
            i += 2
        else:
            i += 1

    headings.sort(key=lambda h: h.start_line)

    blocks = _scan_blocks(
        lines,
        heading_lines={h.start_line for h in headings},
        fenced=fenced,
        floor=floor,
    )

    return ParsedDoc(lines=lines, headings=headings, fenced_ranges=fenced,
                     blocks=blocks, frontmatter_range=front)
