"""Logging configuration for Portainer MCP with dual output (console + files)."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.stdlib import BoundLogger, LoggerFactory, ProcessorFormatter

from ..constants import ENV_LOG_LEVEL, LOG_INIT_MESSAGE, MIDDLEWARE_LOG_FILE, SERVER_LOG_FILE


def _file_handler(path: Path, level: int, max_bytes: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=0,  # truncate instead of rotating into backups
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(ProcessorFormatter(processor=structlog.processors.JSONRenderer()))
    return handler


def setup_logging(
    log_dir: Path | str | None = Path("logs"),
    log_level: str | None = None,
    max_file_size_mb: int = 10,
) -> None:
    """Setup console logging plus size-capped JSON log files.

    Creates two log files when ``log_dir`` is given:
    - portainer_mcp.log: client and server operations
    - middleware.log: MCP request tracking

    Args:
        log_dir: Directory for log files, or None for console-only logging
        log_level: Log level (defaults to LOG_LEVEL env var or INFO)
        max_file_size_mb: Max file size before truncation (no backup files kept)
    """
    if log_level is None:
        log_level = os.getenv(ENV_LOG_LEVEL, "INFO")

    log_level_num = getattr(logging, log_level.upper(), logging.INFO)
    max_bytes = max_file_size_mb * 1024 * 1024

    # Clear any existing handlers to prevent duplicates
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level_num)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if sys.stdout.isatty()
        else structlog.processors.JSONRenderer()
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level_num)
    console_handler.setFormatter(ProcessorFormatter(processor=renderer))
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        server_logger = logging.getLogger("server")
        server_logger.handlers.clear()
        server_logger.addHandler(_file_handler(log_dir / SERVER_LOG_FILE, log_level_num, max_bytes))
        server_logger.propagate = True  # Also send to console via root logger

        middleware_logger = logging.getLogger("middleware")
        middleware_logger.handlers.clear()
        middleware_logger.addHandler(
            _file_handler(log_dir / MIDDLEWARE_LOG_FILE, log_level_num, max_bytes)
        )
        middleware_logger.propagate = True

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.TimeStamper(fmt="iso"),
            ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("server")
    logger.info(
        LOG_INIT_MESSAGE,
        log_dir=str(Path(log_dir).absolute()) if log_dir is not None else None,
        log_level=log_level,
        max_file_size_mb=max_file_size_mb,
    )


def get_server_logger() -> Any:
    """Get logger for general server operations (writes to portainer_mcp.log)."""
    return structlog.get_logger("server")


def get_middleware_logger() -> Any:
    """Get logger for middleware operations (writes to middleware.log)."""
    return structlog.get_logger("middleware")
