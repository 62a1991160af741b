"""Logging setup for the application entry point."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send ``trainingtimer`` logs to stderr at *level*.

    Unknown level names fall back to INFO.
    """
    log_level = getattr(logging, str(level).upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("trainingtimer")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)
