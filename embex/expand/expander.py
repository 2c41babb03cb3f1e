"""
Recursive embed expander.

Replaces every ``![[...]]`` marker of a text with the content it points to
and descends into that content, depth-first, until no markers remain or
the depth limit is reached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from .resolver import Resolver
from .scanner import EmbedRef, has_embeds, scan_embeds
from ..config.model import DEFAULT_MAX_DEPTH
from ..docstore.types import DocumentStore
from ..markdown.frontmatter import strip_frontmatter

logger = logging.getLogger(__name__)


class Expander:
    """
    Depth-bounded transclusion expander over a document store.

    Markers are resolved strictly in the order they appear and each one
    is replaced at its own position, so two identical markers get two
    independent substitutions and text coming out of one expansion is
    never matched again by a sibling replacement.

    A marker that cannot be expanded (unresolved link, non-text target,
    store failure) is kept byte-for-byte; the reason goes to the log.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        text_extensions: Iterable[str] = ("md",),
        strip_frontmatter: bool = True,
    ):
        self.store = store
        self.max_depth = max_depth
        self.strip_frontmatter = strip_frontmatter
        self.resolver = Resolver(store, text_extensions=text_extensions)

    async def expand(
        self,
        text: str,
        base_path: str,
        current_depth: int = 0,
        max_depth: Optional[int] = None,
    ) -> str:
        """
        Expand markers of `text`, as seen from the note at `base_path`.

        Args:
            text: Selection to expand
            base_path: Store path of the note the selection belongs to
            current_depth: Depth of this call (0 for the caller's selection)
            max_depth: Depth limit for the whole call tree (instance default when None)

        Returns:
            Expanded text; `text` itself when it has no markers or the limit is hit
        """
        limit = self.max_depth if max_depth is None else max_depth
        if current_depth >= limit:
            logger.warning("Embed expansion of %s hit max depth %d", base_path, limit)
            return text

        refs = scan_embeds(text)
        if not refs:
            return text

        parts: List[str] = []
        pos = 0
        for ref in refs:
            parts.append(text[pos:ref.start])
            parts.append(await self._substitute(ref, base_path, current_depth, limit))
            pos = ref.end
        parts.append(text[pos:])
        return "".join(parts)

    async def _substitute(self, ref: EmbedRef, base_path: str, depth: int, limit: int) -> str:
        res = await self.resolver.resolve(ref, base_path)
        if not res.ok:
            return ref.raw
        assert res.text is not None and res.document is not None

        content = strip_frontmatter(res.text) if self.strip_frontmatter else res.text
        if has_embeds(content):
            content = await self.expand(content, res.document.path, depth + 1, limit)
        logger.debug("Expanded '%s' from %s (depth %d)", ref.target, res.document.path, depth)
        return content


async def expand_embeds(
    store: DocumentStore,
    text: str,
    base_path: str,
    *,
    initial_depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
    text_extensions: Iterable[str] = ("md",),
    strip_frontmatter: bool = True,
) -> str:
    """One-shot expansion with a throwaway Expander."""
    expander = Expander(
        store,
        max_depth=max_depth,
        text_extensions=text_extensions,
        strip_frontmatter=strip_frontmatter,
    )
    return await expander.expand(text, base_path, initial_depth)


def expand_embeds_sync(store: DocumentStore, text: str, base_path: str, **kwargs) -> str:
    """expand_embeds for callers without a running event loop."""
    return asyncio.run(expand_embeds(store, text, base_path, **kwargs))


__all__ = ["Expander", "expand_embeds", "expand_embeds_sync"]
