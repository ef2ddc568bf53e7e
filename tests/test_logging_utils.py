import logging

from campuspulse.logging_utils import LOGGER_NAME, parse_level, setup_logging


def test_parse_level_accepts_config_spelling():
    assert parse_level("debug") == logging.DEBUG
    assert parse_level("WARNING") == logging.WARNING
    assert parse_level(logging.ERROR) == logging.ERROR
    assert parse_level("nonsense") == logging.INFO


def test_setup_logging_applies_configured_level(tmp_path):
    logger = logging.getLogger(LOGGER_NAME)
    previous = logger.level
    try:
        result, log_path = setup_logging(log_dir=str(tmp_path / "logs"), level="debug")
        assert result is logger
        assert logger.level == logging.DEBUG
        assert log_path.endswith("campuspulse.log")

        setup_logging(log_dir=str(tmp_path / "logs"), level="warning")
        assert logger.level == logging.WARNING
        assert logger.handlers
    finally:
        logger.setLevel(previous)
