"""
Central logging configuration.
Console logging, optionally fanned out to a rotating file through a queue so
request handlers never block on disk writes.
"""

import logging
import os
import queue
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler

from .context import TransactionIdFilter
from .structured import build_console_handler, build_formatter

APP_LOGGER_NAME = "rentlink_backend"

# External loggers routed through our handlers, with their minimum level
EXTERNAL_LOGGERS = {
    "uvicorn": logging.INFO,
    "fastapi": logging.INFO,
    "sqlalchemy": logging.WARNING,
    "asyncmy": logging.WARNING,
    "botocore": logging.WARNING,
    "aiosmtplib": logging.WARNING,
}


class QueueFileLogger:
    """Queue-based console + rotating file logging."""

    def __init__(
        self,
        log_file_path: str = "logs/app.log",
        max_bytes: int = 50 * 1024 * 1024,
        backup_count: int = 5,
        log_level: str = "INFO",
        use_json_format: bool = True,
    ):
        self.log_file_path = log_file_path
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.log_level = log_level
        self.use_json_format = use_json_format
        self._log_queue: queue.Queue = queue.Queue()
        self._listener: QueueListener | None = None

        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    def _file_handler(self) -> RotatingFileHandler:
        handler = RotatingFileHandler(
            self.log_file_path, maxBytes=self.max_bytes, backupCount=self.backup_count
        )
        handler.setLevel(getattr(logging, self.log_level.upper()))
        handler.setFormatter(build_formatter(self.use_json_format))
        return handler

    def start(self) -> QueueHandler:
        """Start the listener thread and return the handler feeding it."""
        handlers = [
            build_console_handler(self.log_level, self.use_json_format),
            self._file_handler(),
        ]
        self._listener = QueueListener(
            self._log_queue, *handlers, respect_handler_level=True
        )
        self._listener.start()

        queue_handler = QueueHandler(self._log_queue)
        queue_handler.setLevel(getattr(logging, self.log_level.upper()))
        return queue_handler

    def stop(self) -> None:
        if self._listener:
            self._listener.stop()
            self._listener = None


class LoggingConfig:
    """Central logging configuration manager."""

    def __init__(self):
        self.file_logger: QueueFileLogger | None = None
        self._is_configured = False

    def setup(
        self,
        log_to_file: bool = True,
        log_level: str = "INFO",
        log_file_path: str = "logs/app.log",
        use_json_format: bool = True,
        max_bytes: int = 50 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.Logger:
        """
        Set up logging for the application and the libraries it uses.

        Args:
            log_to_file: Whether to enable file logging
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file_path: Path to the log file
            use_json_format: Whether to use JSON formatting
            max_bytes: Maximum file size before rotation
            backup_count: Number of backup files to keep

        Returns:
            Configured main logger instance
        """
        if self._is_configured:
            return get_logger()

        if log_to_file:
            self.file_logger = QueueFileLogger(
                log_file_path=log_file_path,
                max_bytes=max_bytes,
                backup_count=backup_count,
                log_level=log_level,
                use_json_format=use_json_format,
            )
            handler: logging.Handler = self.file_logger.start()
        else:
            handler = build_console_handler(log_level, use_json_format)

        handler.addFilter(TransactionIdFilter())

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper()))

        for name, level in EXTERNAL_LOGGERS.items():
            ext_logger = logging.getLogger(name)
            ext_logger.handlers.clear()
            ext_logger.addHandler(handler)
            ext_logger.propagate = False
            ext_logger.setLevel(level)

        logging.captureWarnings(True)

        self._is_configured = True
        return get_logger()

    def shutdown(self) -> None:
        if self.file_logger:
            self.file_logger.stop()
            self.file_logger = None
        self._is_configured = False


_logging_config = LoggingConfig()


def setup_logging(
    log_to_file: bool | None = None,
    log_level: str | None = None,
    log_file_path: str | None = None,
    use_json_format: bool | None = None,
) -> logging.Logger:
    """
    Set up logging, falling back to the loaded settings for unset arguments.

    Returns:
        Configured main logger instance
    """
    from ...config import settings

    return _logging_config.setup(
        log_to_file=settings.log_to_file if log_to_file is None else log_to_file,
        log_level=(log_level or settings.log_level).upper(),
        log_file_path=log_file_path or settings.log_file_path,
        use_json_format=(
            settings.log_format.lower() == "json"
            if use_json_format is None
            else use_json_format
        ),
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger under the application namespace."""
    if name:
        if name.startswith(APP_LOGGER_NAME):
            return logging.getLogger(name)
        return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")
    return logging.getLogger(APP_LOGGER_NAME)


def shutdown_logging() -> None:
    _logging_config.shutdown()
