from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


_ROOT = "dse_manifests"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the `dse_manifests` namespace.

    Module names that already start with the namespace are used as-is.
    """
    if not name:
        return logging.getLogger(_ROOT)
    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")


def configure_logging(debug: bool = False) -> logging.Logger:
    """Attach a rich handler to the namespace root. Only entry points call this."""
    logger = logging.getLogger(_ROOT)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True), show_path=False, rich_tracebacks=True
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return logger
