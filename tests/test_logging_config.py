from __future__ import annotations

import logging

from farmbook.logging_config import configure_logging, reset_logging


def test_configure_logging_is_idempotent():
    try:
        configure_logging("debug")
        logger = configure_logging("WARNING")

        assert logger.name == "farmbook"
        assert logger.level == logging.WARNING
        assert len([h for h in logger.handlers if h.get_name() == "farmbook"]) == 1
    finally:
        reset_logging()

    assert not [h for h in logging.getLogger("farmbook").handlers if h.get_name() == "farmbook"]


def test_unknown_level_falls_back_to_info():
    try:
        assert configure_logging("LOUD").level == logging.INFO
    finally:
        reset_logging()
