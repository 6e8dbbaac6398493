import logging
from logging.handlers import RotatingFileHandler

from keycurve.logging_config import setup_logging


def _close(logger):
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


def test_setup_logging_stream_only():
    logger = setup_logging(name="keycurve.test.stream", level=logging.DEBUG)
    try:
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
    finally:
        _close(logger)


def test_setup_logging_with_file(tmp_path):
    log_file = tmp_path / "keycurve.log"
    logger = setup_logging(name="keycurve.test.file", log_file=str(log_file))
    try:
        assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
        logger.info("settled a trade")
        for handler in logger.handlers:
            handler.flush()
        assert "settled a trade" in log_file.read_text(encoding="utf-8")
    finally:
        _close(logger)


def test_setup_logging_does_not_duplicate_handlers():
    setup_logging(name="keycurve.test.repeat")
    logger = setup_logging(name="keycurve.test.repeat")
    try:
        assert len(logger.handlers) == 1
    finally:
        _close(logger)


def test_setup_logging_accepts_level_names():
    logger = setup_logging(name="keycurve.test.level", level="WARNING")
    try:
        assert logger.level == logging.WARNING
    finally:
        _close(logger)
