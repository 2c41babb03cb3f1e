"""
Shared test infrastructure for embex.

Modules:
- file_utils: creating notes and directories
- store_utils: in-memory stores and synchronous expansion helpers
- vault_builders: ready-made vaults on disk
- cli_utils: running the CLI in a subprocess
"""

from .file_utils import write, write_markdown
from .store_utils import make_store, expand, resolve
from .vault_builders import create_basic_vault
from .cli_utils import run_cli, jload

__all__ = [
    "write", "write_markdown",
    "make_store", "expand", "resolve",
    "create_basic_vault",
    "run_cli", "jload",
]
