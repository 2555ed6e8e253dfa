"""Logging setup for the vault package."""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach one stream handler to the ``document_vault`` logger.

    Repeated calls only adjust the level.
    """
    logger = logging.getLogger("document_vault")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
