"""
system utilities
my_print: the logging entry point used by the queueing code.
Messages that start with WARNING or ERROR are logged at those levels, everything else at INFO.
Level threshold from the FLEET_SIZING_LOG_LEVEL environment variable (default INFO).
"""

import os
import logging

LOGGER_NAME = 'fleet_sizing'
LOG_FMT = '%(asctime)s pid: %(process)d %(levelname)s %(message)s'


def get_logger():
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:   # install the handler once
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FMT))
        logger.addHandler(handler)
        logger.setLevel(os.environ.get('FLEET_SIZING_LOG_LEVEL', 'INFO').upper())
        logger.propagate = False
    return logger


def msg_level(msg):
    if msg.startswith('ERROR'):
        return logging.ERROR
    elif msg.startswith('WARNING'):
        return logging.WARNING
    else:
        return logging.INFO


def my_print(msg):
    msg = str(msg)
    get_logger().log(msg_level(msg), msg)
