from __future__ import annotations

from pathlib import Path
from typing import Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .model import ExpanderCfg
from ..errors import ConfigError

_yaml = YAML(typ="safe")

CONFIG_FILE = ".embex.yaml"
# directories that mark a vault root
_VAULT_MARKERS = (CONFIG_FILE, ".obsidian")


def config_path(root: Path) -> Path:
    return root / CONFIG_FILE


def load_config(root: Path) -> ExpanderCfg:
    """
    Read <root>/.embex.yaml. A missing file yields the defaults.

    Raises:
        ConfigError: unreadable YAML or invalid values
    """
    path = config_path(root)
    if not path.is_file():
        return ExpanderCfg()
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8"))
    except YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e
    try:
        return ExpanderCfg.from_dict(raw)
    except ConfigError as e:
        raise ConfigError(f"{path}: {e}") from e


def find_vault_root(start: Path) -> Optional[Path]:
    """Nearest ancestor of `start` (itself included) holding .embex.yaml or .obsidian/."""
    cur = start.resolve()
    if cur.is_file():
        cur = cur.parent
    for d in (cur, *cur.parents):
        if any((d / m).exists() for m in _VAULT_MARKERS):
            return d
    return None
