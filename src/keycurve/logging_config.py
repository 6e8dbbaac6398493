import logging
from logging.handlers import RotatingFileHandler
from typing import Optional


def setup_logging(
    name: str = "keycurve",
    log_file: Optional[str] = None,
    level=logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """Set up a logger with a stream handler, plus a rotating file handler when log_file is given.

    Existing handlers on the logger are cleared first so repeated calls do not duplicate output.

    Args:
        name: The name of the logger. "keycurve" covers every module in the package.
        log_file: Optional path of a log file.
        level: Level name or number.
        max_bytes: The maximum size of the log file.
        backup_count: The number of backup log files.

    Returns:
        logger: The logger object.
    """
    logger = logging.getLogger(name)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s %(levelname)-8s "
                                  "[%(name)s:%(lineno)d %(funcName)s()] "
                                  "%(message)s")

    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    logger.setLevel(level)
    return logger
