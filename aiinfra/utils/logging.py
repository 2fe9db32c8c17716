# -*- coding: utf-8 -*-
import logging
import os
import sys
from typing import Optional, Union

from ..constant import LOG_LEVEL_ENV

_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s: %(message)s"


def setup_logger(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Configure the ``aiinfra`` logger tree.

    ``level`` falls back to ``$AIINFRA_LOG_LEVEL`` and then ``info``.
    Calling it again only updates the level.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "info")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("aiinfra")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    return logger
