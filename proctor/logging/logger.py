from __future__ import annotations

import logging
from typing import Optional


_LOGGER: Optional[logging.Logger] = None


def get_logger(name: str | None = None) -> logging.Logger:
    global _LOGGER
    if _LOGGER is None:
        logger = logging.getLogger("proctor")
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s %(message)s",
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.setLevel(logging.INFO)
        _LOGGER = logger
    if name and name.startswith("proctor."):
        return logging.getLogger(name)
    if name:
        return _LOGGER.getChild(name)
    return _LOGGER
