"""
Filesystem-backed document store.

A vault is a directory tree of notes. Files are indexed once (with
.embex.yaml `ignore` patterns applied), texts and parsed metadata are
cached per path and dropped when the file's (mtime_ns, size) changes.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pathspec

from .linkpath import LinkIndex
from .types import Document
from ..config.model import ExpanderCfg
from ..errors import VaultNotFoundError
from ..markdown.model import DocMetadata
from ..markdown.parser import parse_markdown

logger = logging.getLogger(__name__)

# never part of a vault
_SKIP_DIRS = {".git", ".obsidian", ".trash"}


def build_ignore_spec(patterns: Iterable[str]) -> Optional[pathspec.PathSpec]:
    """PathSpec for gitignore-style patterns; None when there are none."""
    lines = [ln.strip() for ln in patterns if ln.strip() and not ln.strip().startswith("#")]
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


def iter_vault_files(root: Path, spec: Optional[pathspec.PathSpec]) -> Iterable[str]:
    """
    Recursive walk yielding vault-relative POSIX paths.
    Ignored directories are pruned before descending.
    """
    root = root.resolve()
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir

        keep: List[str] = []
        for d in dirnames:
            if d in _SKIP_DIRS:
                continue
            rel = f"{rel_dir}/{d}" if rel_dir else d
            if spec and spec.match_file(rel + "/"):
                continue
            keep.append(d)
        dirnames[:] = sorted(keep)

        for fn in sorted(filenames):
            rel = f"{rel_dir}/{fn}" if rel_dir else fn
            if spec and spec.match_file(rel):
                continue
            yield rel


@dataclass
class _Entry:
    fingerprint: Tuple[int, int]
    text: str
    metadata: Optional[DocMetadata] = None
    parsed: bool = False


class FsVault:
    """
    Document store over a directory of notes.

    Usage:
        vault = FsVault(Path("~/notes").expanduser(), cfg)
        doc = vault.resolve_link("Daily", "journal/2024-01-01.md")
    """

    def __init__(self, root: Path, cfg: Optional[ExpanderCfg] = None):
        """
        Args:
            root: Vault root directory
            cfg: Settings (text extensions, ignore patterns); defaults when None

        Raises:
            VaultNotFoundError: root is not a directory
        """
        if not root.is_dir():
            raise VaultNotFoundError(str(root))
        self.root = root.resolve()
        self.cfg = cfg or ExpanderCfg()
        self._spec = build_ignore_spec(self.cfg.ignore)
        self._index: Optional[LinkIndex] = None
        self._cache: Dict[str, _Entry] = {}

    # --------------------------- INDEX --------------------------- #

    @property
    def index(self) -> LinkIndex:
        if self._index is None:
            self._index = LinkIndex(iter_vault_files(self.root, self._spec))
            logger.debug("Indexed %d file(s) under %s", len(self._index), self.root)
        return self._index

    def refresh(self) -> None:
        """Forget the file index and every cached read."""
        self._index = None
        self._cache.clear()

    def relpath(self, path: Path) -> str:
        """Vault-relative POSIX path of a filesystem path (must lie inside the vault)."""
        return path.resolve().relative_to(self.root).as_posix()

    def get_document(self, path: str) -> Optional[Document]:
        """Document for an exact vault path, None if it is not indexed."""
        hit = self.index.lookup(path)
        return Document.from_path(hit) if hit is not None else None

    def is_text(self, document: Document) -> bool:
        return document.is_text(self.cfg.text_extensions)

    # --------------------------- STORE API --------------------------- #

    def resolve_link(self, linkpath: str, from_path: str) -> Optional[Document]:
        hit = self.index.resolve(linkpath, from_path)
        return Document.from_path(hit) if hit is not None else None

    async def read_text(self, document: Document) -> str:
        # text notes are parsed in the worker thread too
        entry = await asyncio.to_thread(self._load, document.path, self.is_text(document))
        return entry.text

    def get_metadata(self, document: Document) -> Optional[DocMetadata]:
        """
        Metadata of the text last returned by read_text; a document that was
        never read is loaded and parsed on the spot.
        """
        if not self.is_text(document):
            return None
        entry = self._cache.get(document.path)
        if entry is None or not entry.parsed:
            try:
                entry = self._load(document.path, parse=True)
            except OSError as e:
                logger.warning("Metadata unavailable for %s: %s", document.path, e)
                return None
        return entry.metadata

    # --------------------------- CACHE --------------------------- #

    def _load(self, rel: str, parse: bool = False) -> _Entry:
        """Cached read (and parse); re-reads when the file fingerprint changed."""
        abs_path = self.root / rel
        st = abs_path.stat()
        fp = (int(st.st_mtime_ns), int(st.st_size))
        entry = self._cache.get(rel)
        if entry is None or entry.fingerprint != fp:
            text = abs_path.read_text(encoding="utf-8", errors="replace")
            entry = _Entry(fingerprint=fp, text=text)
            self._cache[rel] = entry
            logger.debug("Read %s (%d bytes)", rel, fp[1])
        if parse and not entry.parsed:
            entry.metadata = parse_markdown(entry.text).metadata()
            entry.parsed = True
        return entry


__all__ = ["FsVault", "build_ignore_spec", "iter_vault_files"]
