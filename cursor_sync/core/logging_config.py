"""
Logging configuration for the cursor sync server
"""
import inspect
import logging
import sys

from loguru import logger

from cursor_sync.core.config import get_settings


class InterceptHandler(logging.Handler):
    """
    Route standard library log records into loguru.

    The collaboration modules, python-socketio, engineio and uvicorn all log
    through ``logging``; this handler makes loguru the single sink.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller that originated the record
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging():
    """
    Configure loguru sinks and bridge the standard library loggers into them
    """
    settings = get_settings()

    # Remove default logger
    logger.remove()

    # Console logging with appropriate level
    logger.add(
        sys.stdout,
        format=settings.log_format,
        level=settings.log_level,
        colorize=settings.environment == "development",
        backtrace=True,
        diagnose=settings.environment == "development"
    )

    # File logging if specified
    if settings.log_file:
        logger.add(
            settings.log_file,
            format=settings.log_format,
            level=settings.log_level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="gz",
            backtrace=True,
            diagnose=False
        )

    # Structured logging for production
    if settings.environment == "production":
        logger.add(
            sys.stdout,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
            level=settings.log_level,
            serialize=True,
            backtrace=False,
            diagnose=False
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "socketio", "engineio"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.info(f"Logging configured for {settings.environment} environment")
