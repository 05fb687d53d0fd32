# tabburst/core/logger.py
"""Package logger.

  LOGGER    — the ``tabburst`` logger; engine modules log through child
              loggers (``logging.getLogger(__name__)``) which propagate here
  LogStream — Register/Unregister extra streams, e.g. the ``--log-file``
  configure — pick INFO or DEBUG once, from the CLI
"""

import itertools
import logging
import sys

LOG_FORMAT = "%(asctime)s %(name)s [%(process)d] %(levelname)-5s %(message)s"

LOGGER = logging.getLogger("tabburst")
LOGGER.setLevel(logging.INFO)

_console = logging.StreamHandler(sys.stderr)
_console.setFormatter(logging.Formatter(LOG_FORMAT))
LOGGER.addHandler(_console)


def configure(verbose: bool = False) -> logging.Logger:
    """Set the package log level; DEBUG shows every selector decision."""
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)
    return LOGGER


def tab_prefix(index: int, total: int | None = None) -> str:
    """Return the ``[tab n/N]`` prefix carried by every per-tab log line."""
    return f"[tab {index}/{total}]" if total else f"[tab {index}]"


class LogStream:
    """Extra destinations for run logs, keyed by the id Register hands out."""

    __HANDLERS: dict[int, logging.Handler] = {}
    __IDS = itertools.count(1)

    @classmethod
    def Register(cls, stream, level: int = logging.NOTSET) -> int:
        """Mirror LOGGER into stream (at ``level`` and above). Returns an ID for Unregister."""
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(level)
        LOGGER.addHandler(handler)
        stream_id = next(cls.__IDS)
        cls.__HANDLERS[stream_id] = handler
        return stream_id

    @classmethod
    def Unregister(cls, stream_id: int) -> None:
        """Flush and detach the stream; the caller still owns (and closes) it."""
        handler = cls.__HANDLERS.pop(stream_id, None)
        if handler is None:
            return
        handler.flush()
        LOGGER.removeHandler(handler)
