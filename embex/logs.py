from __future__ import annotations

import logging
import os

_FORMAT = "[%(levelname)s] %(message)s"


def setup_logging(verbosity: int = 0) -> None:
    """
    Install one stderr handler on the 'embex' logger.

    0 → WARNING, 1 → INFO, 2+ → DEBUG. EMBEX_DEBUG forces DEBUG.
    Repeated calls only adjust the level.
    """
    log = logging.getLogger("embex")
    if os.environ.get("EMBEX_DEBUG"):
        level = logging.DEBUG
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    log.setLevel(level)
    if not log.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(_FORMAT))
        log.addHandler(h)


__all__ = ["setup_logging"]
