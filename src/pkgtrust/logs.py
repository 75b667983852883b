"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from pkgtrust.config import Settings

# LOG_LEVEL values: 0 silent, 1 informational, 2 debug
LEVELS = {
    0: logging.CRITICAL + 10,
    1: logging.INFO,
    2: logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach a single handler to the ``pkgtrust`` logger.

    Logs go to ``settings.log_file`` when set, otherwise to stderr. Stdout
    is reserved for NDJSON records.
    """
    level = LEVELS[settings.log_level]
    root = logging.getLogger("pkgtrust")

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)

    handler.setLevel(level)
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    return root
