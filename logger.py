"""Application logging for the expense tracker.

Messages go to a dated log file under the configured log directory and to
the console. Modules log through get_logger so that their records reach the
handlers installed on the application logger.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from config import Config

LOGGER_NAME = "expense_tracker"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(levelname)s - %(message)s"


def log_file_path(log_dir: Path, on: Optional[date] = None) -> Path:
    """Path of the log file for a given day (default: today)."""
    on = on or date.today()
    return log_dir / f"expense-tracker-{on.isoformat()}.log"


def _file_handler(config: Config) -> logging.Handler:
    handler = logging.FileHandler(log_file_path(config.log_dir), encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def setup_logging(config: Config) -> logging.Logger:
    """Install the file and console handlers on the application logger.

    Calling this again replaces the handlers of the previous call.

    Args:
        config: Application configuration containing log settings.

    Returns:
        The configured application logger.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    app_logger = get_logger()
    app_logger.setLevel(config.log_level)

    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    for handler in (_file_handler(config), _console_handler()):
        handler.setLevel(config.log_level)
        app_logger.addHandler(handler)

    return app_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get the application logger, or one of its children.

    Args:
        name: Optional child name, e.g. "ingestion".

    Returns:
        The expense_tracker logger, or expense_tracker.<name>.
    """
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)
