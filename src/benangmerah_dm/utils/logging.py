"""Logging utilities for the data manager."""

import logging
import logging.handlers
from pathlib import Path
import re
import sys

from ..config.schemas import LoggingConfig

DEFAULT_MAX_BYTES = 10 * 1024 * 1024

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGT]?B)?\s*$", re.IGNORECASE)
_SIZE_MULTIPLIERS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
}


def setup_logging(
    config: LoggingConfig | None = None, debug: bool = False
) -> logging.Logger:
    """
    Configure the root logger for the data manager.

    Session log entries are mirrored to the ``benangmerah_dm.session``
    logger, so the console shows every instance's progress.

    Args:
        config: Logging configuration
        debug: Force DEBUG level regardless of the configuration

    Returns:
        logging.Logger: Configured root logger
    """
    if config is None:
        config = LoggingConfig()

    level_name = "DEBUG" if debug else config.level
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    formatter = logging.Formatter(config.format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.file_path:
        file_path = Path(config.file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=file_path,
                maxBytes=parse_file_size(config.max_file_size),
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger("benangmerah_dm").setLevel(log_level)

    return root_logger


def parse_file_size(size_str: str) -> int:
    """
    Parse a size such as "10MB" or "512 KB" into bytes.

    Unparseable values fall back to 10MB.
    """
    if not size_str:
        return DEFAULT_MAX_BYTES

    match = _SIZE_PATTERN.match(size_str)
    if not match:
        return DEFAULT_MAX_BYTES

    number, suffix = match.groups()
    return int(float(number) * _SIZE_MULTIPLIERS[(suffix or "B").upper()])


def configure_external_loggers(level: str | int = logging.WARNING) -> None:
    """
    Quiet the HTTP and RDF libraries used by drivers and stores.

    Args:
        level: Log level for external libraries
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    for logger_name in ("urllib3", "requests", "rdflib"):
        logging.getLogger(logger_name).setLevel(level)
