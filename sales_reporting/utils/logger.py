"""Logging configuration module"""

import sys
from pathlib import Path
from loguru import logger
from sales_reporting.utils.config import settings

# Remove default logger
logger.remove()

# Always add console logger
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level=settings.log_level,
    colorize=True
)

if settings.log_to_file:
    try:
        log_dir = Path(settings.project_root) / "logs"
        log_dir.mkdir(exist_ok=True, parents=True)

        # Rotating report log
        logger.add(
            log_dir / "report_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="10 days",
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
        )

        # Separate error log
        logger.add(
            log_dir / "errors_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            level="ERROR",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
        )

        logger.debug(f"File logging enabled in: {log_dir}")

    except OSError as e:
        logger.warning(f"Cannot write to log directory: {e}")
        logger.warning("File logging disabled, using console only")

# Export configured logger
__all__ = ["logger"]
