"""Process-wide logging setup."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HANDLER_MARKER = "_rag_server_handler"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stdout handler on the root logger."""
    root_logger = logging.getLogger()
    # Replace only our own handler; others (e.g. pytest caplog) stay attached
    for handler in root_logger.handlers[:]:
        if getattr(handler, HANDLER_MARKER, False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    setattr(handler, HANDLER_MARKER, True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    root_logger.addHandler(handler)

    # Reduce noise from HTTP client libraries
    for noisy in ("httpx", "httpcore", "openai", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
