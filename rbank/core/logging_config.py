"""Central logging configuration for the rbank client SDK."""

import logging
from typing import Union


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure the root logger once for consistent SDK logs.

    Applications embedding the SDK usually own logging; this only installs a
    handler when nothing else has.
    """
    if logging.getLogger().handlers:
        return
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def get_logger(name: str) -> logging.Logger:
    """Create or retrieve a module logger."""
    return logging.getLogger(name)
