"""
Logging configuration
Console sink plus rotating application, error and access logs
"""

import sys
import multiprocessing
from pathlib import Path
from loguru import logger
from ausflug.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def _is_access_record(record) -> bool:
    return record["extra"].get("access", False)


def setup_logging():
    """Configure loguru sinks from settings"""

    logger.remove()

    if settings.LOG_TO_CONSOLE:
        logger.add(
            sys.stdout,
            format=CONSOLE_FORMAT,
            level=settings.LOG_LEVEL,
            colorize=True,
            backtrace=True,
            diagnose=settings.DEBUG,
            filter=lambda record: not _is_access_record(record) or settings.DEBUG,
        )

    log_dir = Path(settings.LOG_FILE).parent
    if settings.LOG_TO_FILE:
        log_dir.mkdir(parents=True, exist_ok=True)
        common = dict(
            format=FILE_FORMAT,
            compression=settings.LOG_COMPRESSION,
            encoding="utf-8",
        )

        logger.add(
            settings.LOG_FILE,
            level=settings.LOG_LEVEL,
            rotation=settings.LOG_MAX_SIZE,
            retention=settings.LOG_RETENTION,
            backtrace=True,
            diagnose=settings.DEBUG,
            **common,
        )
        logger.add(
            log_dir / "error.log",
            level="ERROR",
            rotation="5 MB",
            retention=3,
            backtrace=True,
            diagnose=settings.DEBUG,
            **common,
        )
        logger.add(
            log_dir / "access.log",
            level="INFO",
            rotation="10 MB",
            retention=3,
            filter=_is_access_record,
            **common,
        )

    if multiprocessing.current_process().name == "MainProcess":
        logger.info(f"🚀 Logging started (level {settings.LOG_LEVEL})")
        if settings.LOG_TO_FILE:
            logger.info(f"📁 Log directory: {log_dir.absolute()}")

    return logger


def get_logger(name: str = None):
    """Shared logger, bound to a component name for scripts"""
    if name:
        return logger.bind(component=name)
    return logger


def log_api_access(method: str, path: str, status_code: int, duration: float = None):
    duration_str = f" ({duration:.2f}ms)" if duration else ""
    logger.bind(access=True).info(f"🌐 {method} {path} -> {status_code}{duration_str}")


def log_database_operation(operation: str, table: str, duration: float = None):
    duration_str = f" ({duration:.2f}ms)" if duration else ""
    logger.info(f"🗄️ DB {operation} {table}{duration_str}")


def log_external_api_call(service: str, endpoint: str, status: str, duration: float = None):
    duration_str = f" ({duration:.2f}ms)" if duration else ""
    logger.info(f"🔗 {service} {endpoint} -> {status}{duration_str}")


def log_task_execution(task_name: str, status: str, duration: float = None):
    duration_str = f" ({duration:.2f}s)" if duration else ""
    status_emoji = "✅" if status == "success" else "❌" if status == "error" else "⏳"
    logger.info(f"{status_emoji} Task {task_name} -> {status}{duration_str}")


__all__ = [
    "setup_logging",
    "get_logger",
    "log_api_access",
    "log_database_operation",
    "log_external_api_call",
    "log_task_execution",
]
