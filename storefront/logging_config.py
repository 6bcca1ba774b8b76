"""
logging_config.py: Centralized logging setup for the storefront client.

Console output goes through rich so it renders alongside the CLI panels;
an optional file handler keeps a plain-text copy. Modules log through
`logging.getLogger(__name__)` and never configure handlers themselves.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None, console: Optional[Console] = None):
    """
    Configures the root logger once for the application.

    Args:
        level (str): Log level name, e.g. "INFO" or "DEBUG".
        log_file (str): Optional path for a persistent log.
        console (Console): Rich console to share with the UI, if any.
    """
    handlers = [RichHandler(console=console, show_path=False, rich_tracebacks=True)]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )

    # Reduce verbosity from the HTTP stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
