from __future__ import annotations

import re

import unicodedata

_slug_ws = re.compile(r"\s+")
_slug_keep = re.compile(r"[^a-z0-9\-]+")
_slug_sep = re.compile(r"[\W_]+")


def slugify_github(title: str) -> str:
    """
    Roughly GitHub-style heading slug:
      • NFKD normalization, lower
      • spaces → '-'
      • punctuation removed, except '-'
      • repeated '-' squeezed
      • trimmed at the edges
    """
    t = unicodedata.normalize("NFKD", title).lower()
    t = _slug_ws.sub("-", t.strip())
    t = _slug_keep.sub("", t)
    t = re.sub(r"-{2,}", "-", t).strip("-")
    return t


def slugify(text: str) -> str:
    """
    Lookup key for block anchors.

    Unlike the GitHub flavour, punctuation is not dropped but turned into a
    separator: every run of whitespace/punctuation becomes a single '-'.
    Combining marks are removed after NFKD, so 'Café' and 'cafe' collide.
    """
    t = unicodedata.normalize("NFKD", text)
    t = "".join(ch for ch in t if not unicodedata.combining(ch)).lower()
    return _slug_sep.sub("-", t).strip("-")
