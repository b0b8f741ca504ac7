import sys
from loguru import logger as loguru_logger

from parking_tickets.config.settings_env import settings

# Records not bound to a ticket show "-" in the ticket column
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "ticket={extra[ticket_id]} | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def initialize_logger():
    """Initialize the logger based on DEV_MODE setting."""
    loguru_logger.remove()
    loguru_logger.configure(extra={"ticket_id": "-"})

    if settings.DEV_MODE:
        loguru_logger.add(sys.stderr, level="TRACE", format=LOG_FORMAT)
    else:
        loguru_logger.add(sys.stderr, level="INFO", format=LOG_FORMAT)

    return loguru_logger


# Initialize logger
logger = initialize_logger()
