"""Logging configuration helpers."""

import logging

_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure the ``brain_gym`` logger tree with one stream handler.

    Award loop outcomes log under ``brain_gym.services`` and request lines
    under ``brain_gym.api``; both inherit the handler and level set here.
    """
    logger = logging.getLogger("brain_gym")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
