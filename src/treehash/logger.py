"""logger.py - Logger factory shared by all treehash modules."""

from __future__ import annotations

import logging

ROOT_LOGGER_NAME = "treehash"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the ``treehash`` root logger.

    Module names from the src layout (``treehash.table``) are used as-is;
    anything else is prefixed so applications can tune the whole package
    through one logger.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
