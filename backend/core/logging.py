"""
Logging configuration for the reviews API.
Provides structured JSON logging with contextual information and optional file rotation.
"""
import logging
import json
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from enum import Enum

SERVICE_NAME = "reviews-api"


class LogLevel(Enum):
    """Log level enumeration"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(Enum):
    """Log format enumeration"""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


def _resolve_level(level: Union[str, LogLevel]) -> int:
    if isinstance(level, LogLevel):
        return getattr(logging, level.value)
    return getattr(logging, str(level).upper(), logging.INFO)


def _format_string(log_format: LogFormat) -> str:
    if log_format == LogFormat.JSON:
        return '%(message)s'
    if log_format == LogFormat.DETAILED:
        return '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    return '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class StructuredLogger:
    """
    Structured logger with JSON output, file rotation, and contextual information
    """

    def __init__(
        self,
        name: str = "reviews",
        level: Union[str, LogLevel] = LogLevel.INFO,
        log_format: LogFormat = LogFormat.JSON,
        enable_file_logging: bool = False,
        log_dir: Optional[str] = None
    ):
        self.name = name
        self.logger = logging.getLogger(name)
        self.configure(level, log_format, enable_file_logging, log_dir)

    def configure(
        self,
        level: Union[str, LogLevel] = LogLevel.INFO,
        log_format: LogFormat = LogFormat.JSON,
        enable_file_logging: bool = False,
        log_dir: Optional[str] = None
    ):
        """(Re)build handlers for this logger"""
        self.log_format = log_format
        self.logger.setLevel(_resolve_level(level))
        # Records are rendered by our own handlers only
        self.logger.propagate = False

        # Clear existing handlers to avoid duplicates on reconfiguration
        self.logger.handlers.clear()
        self._setup_console_handler()

        if enable_file_logging:
            self._setup_file_handlers(log_dir)

    def _setup_console_handler(self):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(_format_string(self.log_format)))
        self.logger.addHandler(console_handler)

    def _setup_file_handlers(self, log_dir: Optional[str] = None):
        """Setup file handlers with rotation"""
        log_path = Path(log_dir or "logs")
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path / f"{self.name}.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.INFO)

        error_handler = TimedRotatingFileHandler(
            log_path / f"{self.name}_error.log",
            when='midnight',
            interval=1,
            backupCount=30
        )
        error_handler.setLevel(logging.ERROR)

        json_formatter = logging.Formatter('%(message)s')
        file_handler.setFormatter(json_formatter)
        error_handler.setFormatter(json_formatter)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(error_handler)

    def _create_log_entry(
        self,
        level: str,
        message: str,
        endpoint: Optional[str] = None,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
        extra_context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.upper(),
            "message": message,
            "service": SERVICE_NAME,
            "logger": self.name,
        }

        if endpoint:
            log_entry["endpoint"] = endpoint

        if request_id:
            log_entry["request_id"] = request_id

        if metadata:
            log_entry["metadata"] = metadata

        if extra_context:
            log_entry["context"] = extra_context

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "message": str(exception),
                "traceback": "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                ),
            }

        return log_entry

    def _log(
        self,
        level: str,
        message: str,
        endpoint: Optional[str] = None,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
        extra_context: Optional[Dict[str, Any]] = None
    ):
        if self.log_format == LogFormat.JSON:
            log_entry = self._create_log_entry(
                level, message, endpoint, request_id, metadata, exception, extra_context
            )
            log_message = json.dumps(log_entry, default=str)
        else:
            log_message = message
            if metadata:
                log_message += f" | Metadata: {metadata}"
            if endpoint:
                log_message += f" | Endpoint: {endpoint}"
            if exception:
                log_message += f" | Exception: {type(exception).__name__}: {exception}"

        getattr(self.logger, level)(log_message)

    def debug(self, message: str, **kwargs):
        self._log("debug", message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log("info", message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log("warning", message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log("error", message, **kwargs)

    def log_request(
        self,
        method: str,
        endpoint: str,
        request_id: Optional[str] = None,
        duration_ms: Optional[float] = None,
        status_code: Optional[int] = None,
    ):
        """Log HTTP request with structured data"""
        self.info(
            f"{method} {endpoint}",
            endpoint=endpoint,
            request_id=request_id,
            metadata={
                "method": method,
                "endpoint": endpoint,
                "duration_ms": duration_ms,
                "status_code": status_code,
            },
        )

    def log_business_event(
        self,
        event_type: str,
        event_data: Dict[str, Any],
        request_id: Optional[str] = None
    ):
        """Log business events such as ingestion runs and manager decisions"""
        self.info(
            f"Business Event: {event_type}",
            request_id=request_id,
            metadata=event_data,
            extra_context={"component": "business_logic", "event_type": event_type}
        )


class LoggerManager:
    """
    Manager for creating and configuring structured loggers across the application
    """

    _loggers: Dict[str, StructuredLogger] = {}
    _default_config: Dict[str, Any] = {
        "level": LogLevel.INFO,
        "log_format": LogFormat.JSON,
        "enable_file_logging": False,
        "log_dir": None,
    }

    @classmethod
    def configure_defaults(
        cls,
        level: Union[str, LogLevel] = LogLevel.INFO,
        log_format: LogFormat = LogFormat.JSON,
        enable_file_logging: bool = False,
        log_dir: Optional[str] = None
    ):
        """Configure default settings and rebuild existing loggers with them"""
        cls._default_config = {
            "level": level,
            "log_format": log_format,
            "enable_file_logging": enable_file_logging,
            "log_dir": log_dir,
        }
        for existing in cls._loggers.values():
            existing.configure(**cls._default_config)

    @classmethod
    def get_logger(cls, name: str) -> StructuredLogger:
        if name not in cls._loggers:
            cls._loggers[name] = StructuredLogger(name=name, **cls._default_config)
        return cls._loggers[name]


def setup_logging(
    level: Union[str, LogLevel] = LogLevel.INFO,
    log_format: Union[str, LogFormat] = LogFormat.JSON,
    enable_file_logging: bool = False,
    log_dir: Optional[str] = None
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level
        log_format: Log format (simple, detailed, json)
        enable_file_logging: Whether to enable file logging
        log_dir: Directory for log files
    """
    if isinstance(log_format, str):
        try:
            log_format = LogFormat(log_format.lower())
        except ValueError:
            log_format = LogFormat.JSON

    LoggerManager.configure_defaults(
        level=level,
        log_format=log_format,
        enable_file_logging=enable_file_logging,
        log_dir=log_dir
    )

    # Plain module loggers never emit JSON envelopes
    plain_format = LogFormat.SIMPLE if log_format == LogFormat.JSON else log_format
    logging.basicConfig(
        level=_resolve_level(level),
        format=_format_string(plain_format),
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Set specific log levels for noisy libraries
    logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


structured_logger = LoggerManager.get_logger("reviews")

__all__ = [
    'StructuredLogger',
    'LoggerManager',
    'LogLevel',
    'LogFormat',
    'setup_logging',
    'structured_logger',
]
