"""
Logging setup.
Configures the root logger once for every entrypoint:
- console output
- logs/freshbasket.log, rotated at 5 MB with 3 backups
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from freshbasket import config

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logger(level: Optional[str] = None, log_dir: Optional[str] = None, to_file: bool = True) -> None:
    """Install console (and optionally rotating file) handlers on the root logger."""
    formatter = logging.Formatter(LOG_FORMAT)
    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if to_file:
        log_dir = log_dir or config.LOG_DIR
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "freshbasket.log"), maxBytes=5_000_000, backupCount=3
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        handlers=handlers,
        format=LOG_FORMAT,
        force=True,
    )
