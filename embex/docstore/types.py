"""
Document store boundary.

The expander never touches files directly: it asks a store to resolve a
link, to read a document and to hand out its structural metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, Optional, Protocol, runtime_checkable

from ..markdown.model import DocMetadata


@dataclass(frozen=True)
class Document:
    path: str           # store-relative POSIX path, the identifier
    name: str           # file stem, the logical note name
    extension: str      # lower-case, without the dot ("" when absent)

    @staticmethod
    def from_path(path: str) -> Document:
        p = PurePosixPath(path)
        return Document(path=p.as_posix(), name=p.stem, extension=p.suffix[1:].lower())

    def is_text(self, extensions: Iterable[str]) -> bool:
        return self.extension in {e.lower().lstrip(".") for e in extensions}


@runtime_checkable
class DocumentStore(Protocol):
    """
    Contract consumed by the resolver.

    `read_text` may suspend (disk or cache access); the other two calls are
    expected to answer from memory.
    """

    def resolve_link(self, linkpath: str, from_path: str) -> Optional[Document]:
        ...

    async def read_text(self, document: Document) -> str:
        ...

    def get_metadata(self, document: Document) -> Optional[DocMetadata]:
        ...


__all__ = ["Document", "DocumentStore"]
