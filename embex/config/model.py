from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..errors import ConfigError

DEFAULT_MAX_DEPTH = 4


# --- helpers ---------------------------------------------------------------
def _assert_only_keys(d: Dict[str, Any] | None, allowed: Iterable[str], *, ctx: str) -> None:
    if d is None:
        return
    allowed_set = set(allowed)
    extra = set(d.keys()) - allowed_set
    if extra:
        raise ConfigError(f"{ctx}: unknown key(s): {', '.join(sorted(extra))}")


def _str_list(value: Any, *, key: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)) and all(isinstance(x, str) for x in value):
        return list(value)
    raise ConfigError(f"{key} must be a string or a list of strings")


@dataclass
class ExpanderCfg:
    """
    Settings of the expander shell (.embex.yaml).
    """
    max_depth: int = DEFAULT_MAX_DEPTH
    # document types that get expanded; others are left as markers
    text_extensions: List[str] = field(default_factory=lambda: ["md"])
    # gitignore-style patterns hidden from the vault
    ignore: List[str] = field(default_factory=list)
    strip_frontmatter: bool = True

    @staticmethod
    def from_dict(d: Optional[Dict[str, Any]]) -> ExpanderCfg:
        if not d:
            return ExpanderCfg()
        if not isinstance(d, dict):
            raise ConfigError("config root must be a mapping")
        _assert_only_keys(d, ["max_depth", "text_extensions", "ignore", "strip_frontmatter"], ctx="ExpanderCfg")

        max_depth = d.get("max_depth", DEFAULT_MAX_DEPTH)
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
            raise ConfigError(f"max_depth must be a non-negative integer, got: {max_depth!r}")

        exts = _str_list(d.get("text_extensions", ["md"]), key="text_extensions")
        exts = [e.strip().lstrip(".").lower() for e in exts if e.strip()]
        if not exts:
            raise ConfigError("text_extensions must not be empty")

        ignore = _str_list(d.get("ignore", []) or [], key="ignore")

        strip_fm = d.get("strip_frontmatter", True)
        if not isinstance(strip_fm, bool):
            raise ConfigError("strip_frontmatter must be a boolean")

        return ExpanderCfg(
            max_depth=max_depth,
            text_extensions=exts,
            ignore=ignore,
            strip_frontmatter=strip_fm,
        )
