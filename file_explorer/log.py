import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_file: Optional[str],
    level: str = "INFO",
    verbose: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Configure logging with a rich console handler and a rotating file handler."""
    logger = logging.getLogger("file_explorer")
    file_level = getattr(logging, level.upper(), logging.INFO)
    console_level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(min(file_level, console_level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = False

    console_handler = RichHandler(
        console=console, rich_tracebacks=True, show_path=False, level=console_level
    )
    logger.addHandler(console_handler)

    if log_file:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file, maxBytes=5 * 1024 * 1024, backupCount=3
            )
            file_handler.setLevel(file_level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
            logger.addHandler(file_handler)
            os.chmod(log_file, 0o600)
        except OSError as e:
            logger.warning(f"Could not set up log file {log_file}: {e}")
    return logger
