"""
Process-wide logging configuration.

Modules log through `logging.getLogger(__name__)`; this only sets the root
handler and level once on startup.
"""

from __future__ import annotations

import logging

from core import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging() -> None:
    level = logging.getLevelName(settings.log_level())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
