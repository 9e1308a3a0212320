import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from ..paths import LOGS_DIR

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_MAX_BYTES = 2 * 1024 * 1024  # 2 MB
_BACKUP_COUNT = 3


def setup_logger(
    name: str = "pomocycle",
    log_file: str = "pomocycle.log",
    level: int = logging.INFO,
    console: bool = True,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Configure and return the application logger.

    Modules log through ``logging.getLogger(__name__)``; calling this once
    at startup attaches the handlers to the package root so every child
    logger inherits them.  Repeated calls are harmless.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        directory = log_dir or LOGS_DIR
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            directory / log_file,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

    return logger
