# virtfusion/log.py
import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("virtfusion")


def configure_logging(level=None) -> None:
    """
    Install a console handler for the virtfusion loggers.
    Level comes from the argument, then VIRTFUSION_LOG_LEVEL, then INFO.
    """
    level = level or os.getenv("VIRTFUSION_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)
