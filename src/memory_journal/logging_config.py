"""Configure logging for the application."""

import logging
import sys

LOGGER_NAME = "memory_journal"
HANDLER_NAME = "memory_journal.stderr"

# Third-party loggers that only matter when debugging
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def setup_logging(debug: bool = False) -> logging.Logger:
    """Send package logs to stderr; safe to call more than once.

    A repeated call replaces the handler installed by the previous one
    and applies the new level, so each CLI invocation in one process
    logs every line once.
    """
    level = logging.DEBUG if debug else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)

    quiet_level = logging.DEBUG if debug else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
    return logger
