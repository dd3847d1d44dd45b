"""Logging setup."""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None):
    """Setup logging configuration.

    Replaces any handlers installed by an earlier call, so a CLI run can
    reconfigure logging after loading its config file.

    Args:
        level: Logging level (number or name such as "DEBUG")
        log_file: Optional log file path
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
    # matplotlib's font manager is chatty at DEBUG
    logging.getLogger("matplotlib").setLevel(max(level, logging.WARNING))
