from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .linkpath import LinkIndex
from .types import Document
from ..markdown.model import DocMetadata
from ..markdown.parser import parse_markdown

_PARSE = object()


class MemoryStore:
    """
    Document store over in-memory texts.

    Hosts that already hold their notes in memory (editors, tests) feed them
    with `add`. Metadata is parsed from the text unless given explicitly;
    passing ``metadata=None`` simulates a document without cached structure.
    """

    def __init__(self, *, text_extensions: Iterable[str] = ("md",)):
        self.text_extensions = tuple(text_extensions)
        self._texts: Dict[str, str] = {}
        self._meta: Dict[str, Optional[DocMetadata]] = {}
        self._index = LinkIndex()
        # read log, in call order
        self.reads: List[str] = []

    def add(self, path: str, text: str = "", *, metadata=_PARSE) -> Document:
        doc = Document.from_path(path)
        self._texts[doc.path] = text
        if metadata is _PARSE:
            metadata = parse_markdown(text).metadata() if doc.is_text(self.text_extensions) else None
        self._meta[doc.path] = metadata
        self._index.add(doc.path)
        return doc

    def remove(self, path: str) -> None:
        self._texts.pop(path, None)
        self._meta.pop(path, None)
        self._index.discard(path)

    def resolve_link(self, linkpath: str, from_path: str) -> Optional[Document]:
        hit = self._index.resolve(linkpath, from_path)
        return Document.from_path(hit) if hit is not None else None

    async def read_text(self, document: Document) -> str:
        self.reads.append(document.path)
        try:
            return self._texts[document.path]
        except KeyError:
            raise FileNotFoundError(document.path) from None

    def get_metadata(self, document: Document) -> Optional[DocMetadata]:
        return self._meta.get(document.path)


__all__ = ["MemoryStore"]
