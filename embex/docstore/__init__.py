"""
Document stores: the boundary between the expander and where notes live.
"""

from .linkpath import LinkIndex, get_linkpath, split_subpath
from .memory import MemoryStore
from .types import Document, DocumentStore
from .vault import FsVault

__all__ = [
    "Document",
    "DocumentStore",
    "FsVault",
    "LinkIndex",
    "MemoryStore",
    "get_linkpath",
    "split_subpath",
]
