"""
Logging setup for Shortener Platform.

Modules log through `logging.getLogger(__name__)`; this helper only installs a
console handler once, at app start, when nothing else has configured logging.
"""

import logging
from typing import Optional

from shortener_platform.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging unless a handler is already installed (pytest, uvicorn)."""
    resolved = (level or settings.LOG_LEVEL or "INFO").upper()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("shortener_platform").setLevel(resolved)
