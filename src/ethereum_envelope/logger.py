"""
Custom Logging Module
^^^^^^^^^^^^^^^^^^^^^
Provides a setup_logger function to configure the package loggers using the
packaged logger.cfg.

Only the loggers listed in the file are touched; the root logger and its
handlers belong to the host application.
"""
import configparser
import logging
import os
from functools import lru_cache

LOGGER_CONFIG = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "logger.cfg"
)


@lru_cache(maxsize=None)
def _configure() -> None:
    config = configparser.ConfigParser()
    config.read(LOGGER_CONFIG)
    for key in config["loggers"]["keys"].split(","):
        section = config[f"logger_{key.strip()}"]
        logger = logging.getLogger(section["qualname"])
        logger.setLevel(section.get("level", "NOTSET"))
        logger.propagate = section.getboolean("propagate", fallback=True)


def setup_logger(name):
    """
    Set up a logger with the provided name using the 'logger.cfg' file.

    The file is only applied the first time a logger is set up.
    """
    _configure()
    return logging.getLogger(name)
