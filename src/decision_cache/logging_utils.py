"""Logging setup shared by the CLI and the HTTP API."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Attach a single stream handler to the package logger.

    Args:
        debug: Log at DEBUG instead of INFO.
    """
    logger = logging.getLogger("decision_cache")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
