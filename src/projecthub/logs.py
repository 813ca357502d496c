import logging
import sys
from pathlib import Path
from typing import Optional

from projecthub import config


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[str] = None,
    debug: Optional[bool] = None,
) -> logging.Logger:
    """Set up logging for the projecthub package with environment-based levels."""
    is_debug = config.PROJECTHUB_DEBUG if debug is None else debug
    env_level = (level or config.PROJECTHUB_LOG_LEVEL).upper()
    log_dir = log_dir if log_dir is not None else config.PROJECTHUB_LOG_DIR

    if is_debug:
        console_level = logging.DEBUG
    elif env_level:
        console_level = getattr(logging, env_level, logging.INFO)
    else:
        console_level = logging.INFO

    log_format = '[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(
        '%(levelname)-8s [%(name)s] %(message)s' if is_debug
        else '%(levelname)s: %(message)s'
    ))
    console_handler.setLevel(console_level)

    logger = logging.getLogger('projecthub')
    logger.setLevel(logging.DEBUG)  # Logger accepts all, handlers filter
    logger.handlers.clear()
    logger.addHandler(console_handler)

    # File handler (always detailed) only when a directory is configured
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path / "projecthub.log")
        file_handler.setFormatter(logging.Formatter(log_format, date_format))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str = None):
    """Get a logger instance for a specific module."""
    if name:
        if name.startswith('projecthub.'):
            return logging.getLogger(name)
        return logging.getLogger(f'projecthub.{name}')
    return logging.getLogger('projecthub')
