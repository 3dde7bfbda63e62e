import logging
import sys

from config.settings import LOG_LEVEL

LOGGER_NAME = "permaplant"


def setup_logger(name: str = LOGGER_NAME, level: str = LOG_LEVEL) -> logging.Logger:
    """Shared application logger writing to stdout."""
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        ))
        log.addHandler(handler)
    log.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    log.propagate = False
    return log


logger = setup_logger()
