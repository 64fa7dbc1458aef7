import logging
import os

from facturo.app.core.settings import get_settings

LOG_NAME = os.getenv("APP_LOGGER_NAME", "facturo")

# ISO-like timestamp including milliseconds
LOG_FORMAT = "%(asctime)s.%(msecs)03d - %(module)s - %(funcName)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

logger = logging.getLogger(LOG_NAME)
logger.setLevel(get_settings().LOG_LEVEL.upper())

if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

# Handled here only, not by the root logger
logger.propagate = False
