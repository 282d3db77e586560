"""
Logging setup shared by the API server and the grid client.

One stdout handler, one line per record. Formulas and cell values are
only logged at DEBUG; request failures are logged at WARNING by the
layer that turns them into results.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request chatter from the server and the HTTP client
QUIET_LOGGERS = ("uvicorn.access", "httpx")


def configure_logging(level: str = "INFO") -> None:
    """Route all records to stdout at ``level``.

    Replaces any handlers already installed, so calling it once per
    created app is safe.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR); unknown names fall
            back to INFO.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
