from .load import CONFIG_FILE, find_vault_root, load_config
from .model import DEFAULT_MAX_DEPTH, ExpanderCfg

__all__ = ["CONFIG_FILE", "DEFAULT_MAX_DEPTH", "ExpanderCfg", "find_vault_root", "load_config"]
