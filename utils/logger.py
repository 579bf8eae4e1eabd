import logging
import sys
from settings.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False

def setup_logging():
    """
    Configure application-wide logging once.
    Level comes from settings.LOG_LEVEL.
    """
    global _configured
    if _configured:
        return
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # driver chatter
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
    _configured = True

def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
