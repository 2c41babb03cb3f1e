"""
Transclusion core: scanner, resolver and the recursive expander.
"""

from .expander import Expander, expand_embeds, expand_embeds_sync
from .resolver import Fallback, Outcome, Resolution, Resolver, SectionKind
from .scanner import EmbedRef, has_embeds, scan_embeds

__all__ = [
    "EmbedRef",
    "Expander",
    "Fallback",
    "Outcome",
    "Resolution",
    "Resolver",
    "SectionKind",
    "expand_embeds",
    "expand_embeds_sync",
    "has_embeds",
    "scan_embeds",
]
