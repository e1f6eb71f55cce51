import sys

from loguru import logger

LOG_FORMAT = "{name}:{line: >4}:{level}:\t{message}"


def setup_logging(level: str = "WARNING") -> None:
    """
    Send the log of this package to stderr.
    All configured handlers are removed.
    """
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)
    logger.enable("axmldecode")
