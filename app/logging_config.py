"""Logging setup for the API process.

Modules log through ``logging.getLogger(__name__)``; this only wires the
root handler once at startup.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single stderr handler."""
    root = logging.getLogger()
    root.setLevel(level)

    # Drop handlers from a previous call so reloads don't double every line.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    logging.captureWarnings(True)
