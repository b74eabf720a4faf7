"""
Status messages of drunit.

Modules report through `debug()`, `info()`, `warning()` and `error()`.
Nothing is printed until `enable()` was called, so using drunit as a library
stays silent.
"""
import logging

NAME = 'drunit'
FORMAT = '%(name)s: %(message)s'

# The `logging.Logger` that receives messages, or `None` while disabled
LOGGER = None

def enable(verbose=False):
    """
    Write warnings and errors to stderr. With `verbose`, informational and
    debug messages are shown as well.
    """
    global LOGGER
    LOGGER = logging.getLogger(NAME)
    if not LOGGER.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(FORMAT))
        LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.DEBUG if verbose else logging.WARNING)

def disable():
    global LOGGER
    LOGGER = None

def _log(level, message):
    if LOGGER is not None:
        LOGGER.log(level, message)

def debug(message):
    _log(logging.DEBUG, message)

def info(message):
    _log(logging.INFO, message)

def warning(message):
    _log(logging.WARNING, message)

def error(message):
    _log(logging.ERROR, message)
