#!/usr/bin/env python3
# coding: utf-8

"""Logger setup shared by the transports and controller facades."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(owner, debug=False):
    """
    Return the logger of ``owner``, named after its module and class.

    ``debug`` selects DEBUG over INFO. A console handler is attached the first
    time a given logger is requested.
    """
    logger = logging.getLogger(f"{owner.__class__.__module__}.{owner.__class__.__name__}")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Create console handler if it doesn't exist
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)
    return logger
