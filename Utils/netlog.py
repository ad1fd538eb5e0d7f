"""
Logging setup shared by the Core and Utils packages.
"""
import io
import logging
import sys


debug_logging = io.StringIO()  # Global bucket for debug statements.
DEBUG_FORMAT = "%(asctime)s %(levelname)8s [%(module)12s.%(funcName)-12s:%(lineno)4d] %(message)s"
SCREEN_FORMAT = "%(asctime)s | %(message)s"

LEVEL_COLORS = {
    "DEBUG": "\033[0;36m",     # Cyan
    "INFO": "\033[1;34m",      # Blue
    "WARNING": "\033[1;33m",   # Yellow
    "ERROR": "\033[1;31m",     # Red
    "CRITICAL": "\033[1;31m",
}
RESET_COLOR = "\033[0m"


class ColorFormatter(logging.Formatter):
    """Prefixes each screen line with a colored [LEVEL] [logger] tag."""

    def format(self, record):
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelname, "")
        return f"{color}[{record.levelname}] [{record.name}]{RESET_COLOR} {message}"


def setup_logging(name="nnets", level="INFO", stream=None):
    """
    Returns the named logger with a fresh set of handlers:
    one writing every record to the global `debug_logging` buffer,
    one writing `level` and above to the screen.
    """
    log = logging.getLogger(name=name)
    log.handlers = []

    # Log all messages to a global string stream.
    handler_debug = logging.StreamHandler(debug_logging)
    handler_debug.setFormatter(logging.Formatter(DEBUG_FORMAT))
    handler_debug.setLevel("DEBUG")
    log.addHandler(handler_debug)

    # Print "INFO" and above messages to the screen.
    stream = stream if stream is not None else sys.stdout
    fmt = DEBUG_FORMAT if level == "DEBUG" else SCREEN_FORMAT
    if hasattr(stream, "isatty") and stream.isatty():
        screen_formatter = ColorFormatter(fmt, datefmt="%H:%M:%S")
    else:
        screen_formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    handler_screen = logging.StreamHandler(stream)
    handler_screen.setFormatter(screen_formatter)
    handler_screen.setLevel(level)
    log.addHandler(handler_screen)

    log.setLevel("DEBUG")  # Let the logger catch all emits. The handlers have their own levels.
    log.propagate = False

    return log


def set_screen_level(level):
    """Changes the screen level of every logger created through setup_logging."""
    for name, logger in logging.Logger.manager.loggerDict.items():
        if not isinstance(logger, logging.Logger) or not name.startswith("nnets"):
            continue
        for handler in logger.handlers:
            if getattr(handler, "stream", None) is not debug_logging:
                handler.setLevel(level)
