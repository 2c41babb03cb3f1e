"""
Embed marker scanner.

Finds ``![[target]]`` / ``![[target|alias]]`` markers in a text span.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from ..docstore.linkpath import get_linkpath, split_subpath

# "!" + "[[" + shortest target + "]]"; a marker never spans lines
_EMBED = re.compile(r"!\[\[(?P<inner>.+?)\]\]")


def target_block_id(target: str) -> Optional[str]:
    """Anchor of a "Note#^id" target, as written."""
    if "#^" not in target:
        return None
    return target.split("#^")[1]


def target_heading(target: str) -> Optional[str]:
    """Heading of a "Note#Header" target: text between the first '#' and the next one."""
    if "#^" in target or "#" not in target:
        return None
    return target.split("#")[1]


@dataclass(frozen=True)
class EmbedRef:
    raw: str                    # marker exactly as written
    target: str                 # "Note", "Note#Header", "Note#^block", "dir/Note.md"
    alias: Optional[str]        # text after the first '|', informational only
    start: int                  # offset of '!' in the scanned text
    end: int                    # offset right after ']]'

    @property
    def link(self) -> str:
        """Link path: target without its subpath."""
        return get_linkpath(self.target)

    @property
    def subpath(self) -> Optional[str]:
        return split_subpath(self.target)[1]

    @property
    def block_id(self) -> Optional[str]:
        return target_block_id(self.target)

    @property
    def heading(self) -> Optional[str]:
        return target_heading(self.target)


def scan_embeds(text: str) -> List[EmbedRef]:
    """
    All markers of `text` in order of appearance, duplicates included.
    """
    out: List[EmbedRef] = []
    for m in _EMBED.finditer(text):
        target, sep, alias = m.group("inner").partition("|")
        out.append(EmbedRef(
            raw=m.group(0),
            target=target,
            alias=alias if sep else None,
            start=m.start(),
            end=m.end(),
        ))
    return out


def has_embeds(text: str) -> bool:
    return _EMBED.search(text) is not None


__all__ = ["EmbedRef", "scan_embeds", "has_embeds", "target_block_id", "target_heading"]
