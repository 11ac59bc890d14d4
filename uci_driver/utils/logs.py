"""
Logging setup for tools built on uci_driver.

Library modules only create loggers; handlers are installed here, by
whatever program uses the session.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "uci_driver"


def setup_logger(debug: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure the uci_driver logger.

    Args:
        debug: If True, log at DEBUG level (every line sent and received);
            otherwise INFO level
        log_file: Write to this file; None logs to stderr

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    logger.handlers.clear()

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, mode='w')
    else:
        handler = logging.StreamHandler(sys.stderr)

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
