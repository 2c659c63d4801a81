import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional

from cafeshift.core.config import settings

MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUPS = 5

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _rotating_handler(path: Path, level: int, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(log_dir: Optional[Path] = None):
    """
    Configure application logging.

    - console and logs/app.log at LOG_LEVEL
    - logs/error.log for ERROR and above
    - logs/access.log for the request middleware, via the "access" logger
    """
    log_dir = Path(log_dir or settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt=DATE_FORMAT
    ))
    root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_handler(log_dir / "app.log", level, DETAILED_FORMAT))
    root_logger.addHandler(_rotating_handler(log_dir / "error.log", logging.ERROR, DETAILED_FORMAT))

    access_logger = logging.getLogger("access")
    access_logger.setLevel(logging.INFO)
    access_logger.handlers.clear()
    access_logger.addHandler(_rotating_handler(log_dir / "access.log", logging.INFO, '%(asctime)s - %(message)s'))
    access_logger.propagate = False

    # Chatty third-party loggers
    for name in ("sqlalchemy.engine", "aiosqlite", "passlib"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
