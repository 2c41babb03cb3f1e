"""
Reference resolver.

Turns the target of an embed marker into the text it stands for:
the whole note, the section under a heading, or a block-anchored span.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from .scanner import EmbedRef, target_block_id, target_heading
from ..docstore.linkpath import get_linkpath
from ..docstore.types import Document, DocumentStore
from ..markdown.model import DocMetadata
from ..markdown.slug import slugify

logger = logging.getLogger(__name__)

# "^id" closing a line, together with the whitespace (blank lines included) before it
_ANCHOR_TOKEN = re.compile(r"(?:\s+|^)\^(?P<id>[A-Za-z0-9][A-Za-z0-9\-_]*)[ \t]*\r?$", re.MULTILINE)


class Outcome(Enum):
    EXPANDED = "expanded"
    UNRESOLVED = "unresolved"             # no document matches the link
    NOT_EXPANDABLE = "not_expandable"     # document is not a text note
    FAILED = "failed"                     # the store raised while resolving


class SectionKind(Enum):
    FULL = "full"
    HEADING = "heading"
    BLOCK = "block"


class Fallback(Enum):
    ANCHOR_NOT_FOUND = "anchor_not_found"
    HEADER_NOT_FOUND = "header_not_found"
    METADATA_UNAVAILABLE = "metadata_unavailable"


@dataclass(frozen=True)
class Resolution:
    """
    Result of resolving one reference.

    Only EXPANDED carries text. A requested section that could not be
    found still resolves (to the full note) and records why in `fallback`.
    """
    outcome: Outcome
    target: str
    document: Optional[Document] = None
    text: Optional[str] = None
    section: SectionKind = SectionKind.FULL
    line_range: Optional[Tuple[int, Optional[int]]] = None   # [start, end_excl), None end = to EOF
    fallback: Optional[Fallback] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.EXPANDED


def strip_anchor_token(text: str, anchor: str) -> str:
    """
    Drop the first "^anchor" token (matched by slug) and the whitespace that
    separates it from the content before it.
    """
    key = slugify(anchor)
    for m in _ANCHOR_TOKEN.finditer(text):
        if slugify(m.group("id")) == key:
            return text[:m.start()] + text[m.end():]
    return text.replace(f"^{anchor}", "", 1)


class Resolver:
    """
    Resolves marker targets against a document store.

    Heading references match the FIRST heading whose text equals the
    reference exactly; later headings with the same text cannot be
    addressed. Block references are matched by anchor slug.
    """

    def __init__(self, store: DocumentStore, *, text_extensions: Iterable[str] = ("md",)):
        self.store = store
        self.text_extensions = tuple(text_extensions)

    async def resolve(self, ref: Union[EmbedRef, str], base_path: str) -> Resolution:
        """
        Resolve a marker (or a bare target string) seen from `base_path`.

        Never raises: store failures come back as Outcome.FAILED.
        """
        target = ref.target if isinstance(ref, EmbedRef) else ref
        try:
            return await self._resolve(target, base_path)
        except Exception as e:
            logger.exception("Failed to resolve embed '%s' from %s", target, base_path)
            return Resolution(outcome=Outcome.FAILED, target=target, error=f"{type(e).__name__}: {e}")

    async def _resolve(self, target: str, base_path: str) -> Resolution:
        document = self.store.resolve_link(get_linkpath(target), base_path)
        if document is None:
            logger.warning("Unresolved embed '%s' in %s", target, base_path)
            return Resolution(outcome=Outcome.UNRESOLVED, target=target)

        if not document.is_text(self.text_extensions):
            logger.info("Embed '%s' points to non-text document %s; left as is", target, document.path)
            return Resolution(outcome=Outcome.NOT_EXPANDABLE, target=target, document=document)

        text = await self.store.read_text(document)

        block_id = target_block_id(target)
        heading = target_heading(target)
        if block_id is None and heading is None:
            return Resolution(outcome=Outcome.EXPANDED, target=target, document=document, text=text)

        metadata = self.store.get_metadata(document)
        if metadata is None:
            logger.info("No metadata for %s; embedding '%s' as the whole note", document.path, target)
            return Resolution(outcome=Outcome.EXPANDED, target=target, document=document, text=text,
                              fallback=Fallback.METADATA_UNAVAILABLE)

        if block_id is not None:
            return self._block(target, document, text, metadata, block_id)
        assert heading is not None
        return self._heading(target, document, text, metadata, heading)

    def _block(self, target: str, document: Document, text: str, metadata: DocMetadata, block_id: str) -> Resolution:
        span = metadata.blocks.get(slugify(block_id))
        if span is None:
            logger.info("Block '^%s' not found in %s; embedding the whole note", block_id, document.path)
            return Resolution(outcome=Outcome.EXPANDED, target=target, document=document, text=text,
                              fallback=Fallback.ANCHOR_NOT_FOUND)
        lines = text.split("\n")
        section = "\n".join(lines[span.start_line:span.end_line + 1])
        return Resolution(
            outcome=Outcome.EXPANDED,
            target=target,
            document=document,
            text=strip_anchor_token(section, block_id),
            section=SectionKind.BLOCK,
            line_range=(span.start_line, span.end_line + 1),
        )

    def _heading(self, target: str, document: Document, text: str, metadata: DocMetadata, heading: str) -> Resolution:
        idx = metadata.find_heading(heading)
        if idx is None:
            logger.info("Heading '%s' not found in %s; embedding the whole note", heading, document.path)
            return Resolution(outcome=Outcome.EXPANDED, target=target, document=document, text=text,
                              fallback=Fallback.HEADER_NOT_FOUND)
        start = metadata.headings[idx].start_line
        end = metadata.section_end(idx)
        lines = text.split("\n")
        section = "\n".join(lines[start:end])
        return Resolution(
            outcome=Outcome.EXPANDED,
            target=target,
            document=document,
            text=section,
            section=SectionKind.HEADING,
            line_range=(start, end),
        )


__all__ = ["Fallback", "Outcome", "Resolution", "Resolver", "SectionKind", "strip_anchor_token"]
