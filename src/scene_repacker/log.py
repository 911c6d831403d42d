"""Logging for the repacking library.

All modules log through the ``scene_repacker`` logger tree. Hosts that do
not use :mod:`logging` directly can register a sink callback which receives
``(level_name, message)`` for every record at or above a chosen level.

Example:
    >>> handle = register_sink(lambda level, msg: print(level, msg))
    >>> ...
    >>> unregister_sink(handle)
"""

import logging
from typing import Callable

LOGGER_NAME = "scene_repacker"

Sink = Callable[[str, str], None]

logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())


class SinkHandler(logging.Handler):
    """Logging handler forwarding formatted records to a callback."""

    def __init__(self, sink: Sink, level: int = logging.DEBUG):
        super().__init__(level)
        self.sink = sink
        # Library logger level to restore once this sink is removed
        self.previous_level = logging.NOTSET

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.sink(record.levelname, self.format(record))
        except Exception:
            self.handleError(record)


def _let_through(level: int) -> None:
    # The logger itself must let the sink records through
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)


def register_sink(sink: Sink, level: int = logging.INFO) -> SinkHandler:
    """Attach ``sink`` to the library logger.

    Args:
        sink: Callable taking the level name ("INFO", "WARNING", "ERROR",
            "DEBUG") and the message
        level: Minimum level forwarded to the sink

    Returns:
        Handle to pass to unregister_sink
    """
    handler = SinkHandler(sink, level)
    handler.previous_level = logger.level
    logger.addHandler(handler)
    _let_through(level)
    return handler


def unregister_sink(handle: SinkHandler) -> None:
    """Detach a sink previously returned by register_sink.

    The library logger goes back to the level it had before the sink was
    registered, lowered only as far as the remaining sinks need.
    """
    logger.removeHandler(handle)
    logger.setLevel(handle.previous_level)
    for handler in logger.handlers:
        if isinstance(handler, SinkHandler):
            _let_through(handler.level)
