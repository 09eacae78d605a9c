"""Logging configuration helpers."""

import logging

# Client libraries that log every outbound request at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure the ``tutorialize`` logger with a single stream handler."""
    logger = logging.getLogger("tutorialize")
    logger.setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
