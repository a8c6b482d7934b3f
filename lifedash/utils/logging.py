import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

from ..domain.errors import DomainError

LIFECYCLE_LOGGER = "lifecycle"


def setup_logging(
    log_level: str = "INFO", log_to_file: bool = True, logs_dir: str = "logs"
) -> None:
    """Set up logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to files in addition to console
        logs_dir: Directory for rotating log files
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.set_exc_info,
            # JSON formatting for file logs
            (
                structlog.processors.JSONRenderer()
                if log_to_file
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()  # Clear any existing handlers
    root_logger.addHandler(console_handler)

    if not log_to_file:
        return

    path = Path(logs_dir)
    path.mkdir(parents=True, exist_ok=True)

    app_handler = logging.handlers.RotatingFileHandler(
        path / "app.log", maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
    )
    app_handler.setLevel(logging.INFO)
    app_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
        )
    )
    root_logger.addHandler(app_handler)

    # Finalize / rollover audit trail
    lifecycle_handler = logging.handlers.RotatingFileHandler(
        path / "lifecycle.log", maxBytes=5 * 1024 * 1024, backupCount=10  # 5MB
    )
    lifecycle_handler.setLevel(logging.DEBUG)
    lifecycle_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
    lifecycle_logger = logging.getLogger(LIFECYCLE_LOGGER)
    lifecycle_logger.addHandler(lifecycle_handler)
    lifecycle_logger.propagate = True  # Also send to root logger

    error_handler = logging.handlers.RotatingFileHandler(
        path / "errors.log", maxBytes=5 * 1024 * 1024, backupCount=10  # 5MB
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
        )
    )
    root_logger.addHandler(error_handler)


def get_lifecycle_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Structured logger for day lifecycle events (finalize, rollover)."""
    return structlog.get_logger(name or LIFECYCLE_LOGGER)


def log_lifecycle_event(
    event: str,
    details: Dict[str, Any],
    logger: Optional[structlog.BoundLogger] = None,
) -> None:
    if logger is None:
        logger = get_lifecycle_logger()
    logger.info(event, event_name=event, **details)


class LifecycleLogContext:
    """Context manager logging start, outcome and duration of one operation.

    Exceptions are logged and re-raised. Expected domain rejections are
    logged at WARNING, anything else at ERROR with the traceback.
    """

    def __init__(self, operation: str, **context: Any):
        self.operation = operation
        self.context = context
        self.logger = get_lifecycle_logger()
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> "LifecycleLogContext":
        self.start_time = datetime.now()
        self.logger.debug(f"{self.operation} started", **self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed = (datetime.now() - self.start_time).total_seconds()

        if exc_type is None:
            self.logger.info(
                f"{self.operation} completed",
                duration_seconds=elapsed,
                **self.context,
            )
            return

        if issubclass(exc_type, DomainError):
            self.logger.warning(
                f"{self.operation} rejected",
                error_type=exc_type.__name__,
                error_message=str(exc_val),
                **self.context,
            )
        else:
            self.logger.error(
                f"{self.operation} failed",
                error_type=exc_type.__name__,
                error_message=str(exc_val),
                duration_seconds=elapsed,
                exc_info=(exc_type, exc_val, exc_tb),
                **self.context,
            )
