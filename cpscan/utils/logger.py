"""Centralized logging setup for the creature-screen scanner.

Every module logs through ``get_logger(__name__)``; the CLI and the API
server call ``setup_logging`` once at startup.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output (PNG chunk dumps, multipart parsing).
NOISY_LOGGERS: tuple[str, ...] = ("PIL", "multipart", "python_multipart", "httpx")


def setup_logging(level: str = "INFO", quiet: tuple[str, ...] = NOISY_LOGGERS) -> None:
    """Send log records to stdout in a single shared format.

    Only the first call installs a handler, so the CLI and the server can
    both call it safely. Loggers named in ``quiet`` are held at WARNING
    regardless of ``level``.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        quiet: Logger names to hold at WARNING.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)
