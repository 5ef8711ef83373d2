import logging

import pytest

from devnet_sdk.logging import LOG_FORMAT, get_devnet_logger, setup_logging


def test_get_devnet_logger_is_a_singleton():
    logger = get_devnet_logger()

    assert logger is get_devnet_logger()
    assert logger.name == "devnet_sdk"
    assert not logger.propagate
    assert len(logger.handlers) == 1
    assert logger.handlers[0].formatter._fmt == LOG_FORMAT


def test_setup_logging():
    root_level = logging.getLogger().level
    test_logger = logging.getLogger("test_logger")

    try:
        setup_logging(test_logger, "INFO")
        assert test_logger.level == logging.INFO
        assert logging.getLogger().level == logging.INFO

        setup_logging(test_logger, "DEBUG")
        assert test_logger.level == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG

        # case-insensitive
        setup_logging(test_logger, "warning")
        assert test_logger.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in test_logger.handlers)

        with pytest.raises(ValueError) as excinfo:
            setup_logging(test_logger, "INVALID_LEVEL")
        assert "Invalid log level: INVALID_LEVEL" in str(excinfo.value)
    finally:
        logging.getLogger().setLevel(root_level)
