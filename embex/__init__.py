"""
Embed expander: inline ``![[...]]`` transclusions of markdown notes.
"""

from .expand import Expander, expand_embeds, expand_embeds_sync

__all__ = ["Expander", "expand_embeds", "expand_embeds_sync"]
