from __future__ import annotations

import logging

from opsconsole.utils.logger import configure_logging, get_logger


def test_get_logger_returns_named_logger() -> None:
    logger = get_logger("opsconsole.services.route_service")

    assert logger.name == "opsconsole.services.route_service"


def test_explicit_level_retunes_root_logger_after_setup() -> None:
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = list(root.handlers)
    get_logger(__name__)

    try:
        configure_logging("warning")

        assert root.level == logging.WARNING
        assert root.handlers == previous_handlers
    finally:
        root.setLevel(previous_level)
