"""Process-wide logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root `kaamtrack` logger once; repeated calls only adjust level."""
    logger = logging.getLogger("kaamtrack")
    logger.setLevel(level)
    if not any(getattr(h, "_kaamtrack", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._kaamtrack = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
