"""fruitstar/debug.py — Debug flag from environment variable, logging setup."""

import logging
import os

DEBUG = os.environ.get("FRUITSTAR_DEBUG", "") == "1"

_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(debug: bool | None = None) -> None:
    """Configure root logging for entry points (app and CLI only)."""
    if debug is None:
        debug = DEBUG
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=_LOG_FORMAT,
    )
