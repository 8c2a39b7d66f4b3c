import sys
import logging

from worksafe.core.config import get_settings

# --------------------------------------------------------
# One named logger for all WorkSafe modules
# --------------------------------------------------------
LOGGER_NAME = "worksafe"
logger = logging.getLogger(LOGGER_NAME)

# If no handlers exist, add one (avoid duplicate logs)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

logger.propagate = False  # Prevent duplicate uvicorn logs


def configure_logging(level: str = None) -> None:
    """Apply the configured log level to the worksafe logger"""
    level = level or get_settings().log_level
    logger.setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    """Child logger under the worksafe namespace"""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logger.getChild(name)
