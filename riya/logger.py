"""
Logging setup for the riya command line tool.

Library modules log through logging.getLogger(__name__) under the "riya"
namespace and never configure handlers themselves. Classified lines and
statistics are regular output and do not go through logging.
"""

import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(verbose: bool = False, log_file: str = "") -> logging.Logger:
    """
    Configure the "riya" logger once per process.

    Args:
        verbose: Show debug records on stderr (default: warnings and errors only)
        log_file: Optional path that receives every debug record

    Returns:
        The configured "riya" logger
    """
    logger = logging.getLogger("riya")
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if (verbose or log_file) else logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        log_path = Path(os.path.expanduser(log_file))
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
