"""
Base exception for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from EmbexUserError.

Programming errors and bugs should NOT inherit from EmbexUserError:
they will propagate with full tracebacks.
"""

from __future__ import annotations


class EmbexUserError(Exception):
    """
    Base class for all user-facing errors in embex.

    These errors indicate problems that the user can fix:
    a bad config file, a missing vault, a base note that does not exist.
    """
    pass


class ConfigError(EmbexUserError):
    """Invalid .embex.yaml contents."""
    pass


class VaultNotFoundError(EmbexUserError):
    """Raised when the vault root is not a directory."""
    def __init__(self, root: str):
        self.root = root
        super().__init__(f"Vault directory not found: {root}")


class DocumentNotFoundError(EmbexUserError):
    """Raised when the base document given on the command line is missing."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Document not found: {path}")


__all__ = ["EmbexUserError", "ConfigError", "VaultNotFoundError", "DocumentNotFoundError"]
