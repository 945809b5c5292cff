import logging
import sys

from ..config import load_config


def get_logger(name: str | None = None):
    """Return the ``keylab`` logger, or a child of it when ``name`` is given.

    Only the top-level logger gets a handler; children propagate to it.
    """
    root = logging.getLogger("keylab")
    if not root.handlers:
        h = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s %(message)s")
        h.setFormatter(fmt)
        root.addHandler(h)
        root.setLevel(load_config().log_level)
    return root.getChild(name) if name else root
