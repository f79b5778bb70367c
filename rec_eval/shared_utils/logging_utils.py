"""Logging setup shared by the command-line entry points."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure root logging for CLI usage.

    Library modules only create module-level loggers; handlers are installed
    here, once, by whichever script is the entry point.

    Args:
        level: Root log level
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)
