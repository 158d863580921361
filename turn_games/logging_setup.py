"""
Logging setup for the CLI and embedding applications.
"""

import logging
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO, format_string: Optional[str] = None) -> None:
    """
    Configure the root logger with a single console handler.

    Calling it again replaces the handler instead of stacking duplicates.

    Args:
        level: Logging level, either a number or a name such as "DEBUG"
        format_string: Optional custom format string. If None, uses the default format.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
