"""Logging configuration using loguru."""

import sys
from pathlib import Path
from loguru import logger

from src.utils.config import get_settings


def setup_logger():
    """Configure application logging using loguru.

    Console logging is always enabled; JSON serialization follows
    ``log_format``. A rotating file sink is added when ``log_file_path``
    is configured.
    """
    settings = get_settings()

    # Remove default handler
    logger.remove()

    if settings.log_format == "json":
        logger.add(
            sys.stdout,
            format="{message}",
            level=settings.log_level,
            serialize=True,
        )
    else:
        console_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        )
        logger.add(
            sys.stdout,
            format=console_format,
            level=settings.log_level,
            colorize=True,
        )

    if settings.log_file_path:
        log_path = Path(settings.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | "
                "{name}:{function}:{line} - {message}"
            ),
            level=settings.log_level,
            rotation=f"{settings.log_max_size_mb} MB",
            retention=settings.log_backup_count,
            serialize=settings.log_format == "json",
        )
        logger.info(f"Logging to file: {log_path}")

    logger.info(f"Logger initialized with level: {settings.log_level}")

    return logger


def get_logger():
    """Get the configured logger instance."""
    return logger
