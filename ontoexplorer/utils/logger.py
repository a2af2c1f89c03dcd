from loguru import logger
from pathlib import Path
import sys

from ..config import settings


def setup_logging(log_level: str = "INFO", log_file: str = "logs/explorer.log"):
    """Setup logging configuration."""
    # Remove default logger
    logger.remove()

    # Create log directory if it doesn't exist
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Console logger. stdout belongs to the console front-end.
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[component]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=log_level,
        colorize=True,
    )

    # File logger
    logger.add(
        log_file,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]}:{function}:{line} - {message}",
        level=log_level,
        rotation="10 MB",
        retention="30 days",
        compression="zip",
    )

    return logger.bind(component="app")


# Every record carries a component, bound or not
logger.configure(extra={"component": "app"})

# Initialize logger
app_logger = setup_logging(settings.log_level, settings.log_file)
