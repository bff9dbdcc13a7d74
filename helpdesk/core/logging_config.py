import logging
import sys

LOGGER_NAME = "helpdesk"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configures the package logger once; module loggers propagate to it.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(console_handler)
    return logger
