"""
Logging setup for command-line use

Library modules only create loggers; handlers are installed here, once,
by the CLI.
"""

import logging
import sys

PACKAGE_LOGGER = "epicycle_splines"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.WARNING, stream=None) -> logging.Logger:
    """Attach a single stream handler to the package logger

    Calling it again replaces that handler, so the package never logs twice.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for old in [h for h in logger.handlers if getattr(h, "_epicycle_handler", False)]:
        logger.removeHandler(old)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(level)
    handler._epicycle_handler = True
    logger.addHandler(handler)

    # matplotlib and PIL are chatty at DEBUG
    logging.getLogger("matplotlib").setLevel(max(level, logging.WARNING))
    logging.getLogger("PIL").setLevel(max(level, logging.WARNING))
    return logger
