"""Process-wide logging configuration."""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger; unknown level names fall back to INFO."""
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger().setLevel(numeric)

    # Suppress verbose third-party library logs
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
