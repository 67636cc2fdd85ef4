"""Logging setup shared by the Streamlit entry points."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_NAME = "farmbook"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach one stream handler to the ``farmbook`` logger.

    Streamlit re-runs page scripts on every interaction, so calling this more
    than once only updates the level.
    """
    root = logging.getLogger("farmbook")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root


def reset_logging() -> None:
    root = logging.getLogger("farmbook")
    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)
    root.setLevel(logging.NOTSET)
