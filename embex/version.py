from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """
    Version of the installed distribution.
    Imports nothing else from the package (avoids cycles).
    """
    try:
        return metadata.version("embex")
    except metadata.PackageNotFoundError:
        return "0.0.0"

__all__ = ["tool_version"]
