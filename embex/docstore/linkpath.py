"""
Link-path conventions of a note vault.

Link text → link path (subpath dropped, separators normalized) → first
matching document reachable from the linking note.
"""

from __future__ import annotations

import posixpath
from typing import Dict, Iterable, List, Optional, Tuple

DEFAULT_NOTE_EXT = ".md"


def split_subpath(link_text: str) -> Tuple[str, Optional[str]]:
    """
    "Note#Header" → ("Note", "Header"); "Note#^id" → ("Note", "^id"); "Note" → ("Note", None).
    Only the first '#' separates.
    """
    link, sep, sub = link_text.partition("#")
    return link, (sub if sep else None)


def get_linkpath(link_text: str) -> str:
    """Link path of a link text: subpath dropped, backslashes turned into '/', trimmed."""
    link, _ = split_subpath(link_text)
    return link.strip().replace("\\", "/")


def _normalize(path: str) -> Optional[str]:
    """Normalized store path or None if it climbs above the store root."""
    norm = posixpath.normpath(path)
    if norm in (".", "") or norm == ".." or norm.startswith("../"):
        return None
    return norm.lstrip("/")


class LinkIndex:
    """
    Case-insensitive path index answering "first link-path destination".

    Lookup order for a link path L seen from note F:
      1. empty L → F itself;
      2. L starting with './' or '../' → relative to F's folder only;
         L starting with '/' → relative to the store root only;
      3. otherwise F's folder, then the root, then any path ending with '/L'
         (shortest path first, then lexicographic).
    Each step tries L as written, then L + '.md' when L has no '.md' suffix.
    """

    def __init__(self, paths: Iterable[str] = ()):
        self._by_lower: Dict[str, str] = {}
        for p in sorted(paths):
            self.add(p)

    def add(self, path: str) -> None:
        self._by_lower.setdefault(path.lower(), path)

    def discard(self, path: str) -> None:
        if self._by_lower.get(path.lower()) == path:
            del self._by_lower[path.lower()]

    def __contains__(self, path: str) -> bool:
        return path.lower() in self._by_lower

    def __len__(self) -> int:
        return len(self._by_lower)

    def paths(self) -> List[str]:
        return sorted(self._by_lower.values())

    def lookup(self, path: str) -> Optional[str]:
        """Exact (case-insensitive) lookup of a store path."""
        norm = _normalize(path)
        if norm is None:
            return None
        return self._by_lower.get(norm.lower())

    def resolve(self, linkpath: str, from_path: str) -> Optional[str]:
        if not linkpath:
            return self.lookup(from_path)

        candidates = [linkpath]
        if not linkpath.lower().endswith(DEFAULT_NOTE_EXT):
            candidates.append(linkpath + DEFAULT_NOTE_EXT)
        base_dir = posixpath.dirname(from_path)

        if linkpath.startswith("/"):
            return self._first(c.lstrip("/") for c in candidates)
        if linkpath.startswith("./") or linkpath.startswith("../"):
            return self._first(posixpath.join(base_dir, c) for c in candidates)

        hit = self._first(posixpath.join(base_dir, c) for c in candidates) if base_dir else None
        if hit is None:
            hit = self._first(candidates)
        if hit is None:
            hit = self._by_suffix(candidates)
        return hit

    def _first(self, paths: Iterable[str]) -> Optional[str]:
        for p in paths:
            hit = self.lookup(p)
            if hit is not None:
                return hit
        return None

    def _by_suffix(self, candidates: List[str]) -> Optional[str]:
        for cand in candidates:
            norm = _normalize(cand)
            if norm is None:
                continue
            tail = "/" + norm.lower()
            matches = [p for low, p in self._by_lower.items() if low.endswith(tail)]
            if matches:
                return min(matches, key=lambda p: (len(p), p))
        return None


__all__ = ["DEFAULT_NOTE_EXT", "LinkIndex", "get_linkpath", "split_subpath"]
