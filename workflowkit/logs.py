"""Logging setup for workflow processes.

Stdout carries the script-filter payload, so diagnostics only ever go to
stderr, and only when the launcher runs the workflow in debug mode.
"""

from __future__ import annotations

import logging
import sys

__all__ = ["PACKAGE_LOGGER", "setup_logging"]

PACKAGE_LOGGER = "workflowkit"
_DEBUG_HANDLER_NAME = "workflowkit-debug"


def setup_logging(debug: bool, *, stream=None) -> logging.Logger:
    """Configure the package logger for one invocation.

    A ``NullHandler`` is always attached so library warnings never reach
    Python's last-resort handler. With ``debug`` set, a stderr handler at
    ``DEBUG`` level is added (once; repeated calls replace it).
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(handler, logging.NullHandler) for handler in logger.handlers):
        logger.addHandler(logging.NullHandler())

    for handler in list(logger.handlers):
        if handler.get_name() == _DEBUG_HANDLER_NAME:
            logger.removeHandler(handler)

    if debug:
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.set_name(_DEBUG_HANDLER_NAME)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)
    return logger
