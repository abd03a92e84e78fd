"""Structured logging utilities with correlation IDs, performance timing, and sensitive data handling."""

import logging
import time
import uuid
import re
from contextvars import ContextVar
from typing import Any, Optional, Dict
from contextlib import contextmanager
from datetime import datetime, timezone

from src.utils.logging_config import LoggingConfig, get_logger


# Correlation ID for the current tool invocation (contextvars keep it per task)
_correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracing."""
    return f"req_{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: Optional[str] = None):
    """Context manager for correlation ID propagation."""
    if correlation_id is None:
        correlation_id = generate_correlation_id()

    token = _correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id_var.reset(token)


def mask_sensitive_data(text: str) -> str:
    """Mask sensitive data in text (PII, tokens, etc.)."""
    if not text or not LoggingConfig.LOG_MASK_SENSITIVE:
        return text

    # Mask email addresses
    text = re.sub(
        r'[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}',
        '[REDACTED_EMAIL]',
        text,
        flags=re.IGNORECASE
    )

    # Mask phone numbers
    text = re.sub(
        r'\+?\d[\d\s().-]{7,}\d',
        '[REDACTED_PHONE]',
        text
    )

    # Mask API keys/tokens (common patterns)
    text = re.sub(
        r'(?i)(api[_-]?key|token|secret|password|auth)[\s:=]+([A-Za-z0-9_-]{20,})',
        r'\1=[REDACTED]',
        text
    )

    return text


def sanitize_query_text(text: Optional[str], max_length: int = 200) -> Optional[str]:
    """Sanitize a free-text entity query for logging."""
    if not LoggingConfig.LOG_QUERY_CONTENT:
        return None

    if not text:
        return None

    if len(text) > max_length:
        text = text[:max_length] + "..."

    if LoggingConfig.LOG_MASK_SENSITIVE:
        text = mask_sensitive_data(text)

    return text


class StructuredLogger:
    """Enhanced logger with structured logging support."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _get_extra(self, **kwargs: Any) -> Dict[str, Any]:
        """Build extra fields for structured logging."""
        extra = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            extra["correlation_id"] = correlation_id

        extra.update(kwargs)

        return extra

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with structured fields."""
        self.logger.debug(message, extra=self._get_extra(**kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with structured fields."""
        self.logger.info(message, extra=self._get_extra(**kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with structured fields."""
        self.logger.warning(message, extra=self._get_extra(**kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log error message with structured fields."""
        self.logger.error(message, extra=self._get_extra(**kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with structured fields."""
        self.logger.exception(message, extra=self._get_extra(**kwargs))


def get_structured_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(get_logger(name))


@contextmanager
def log_timing(operation_name: str, logger: Optional[StructuredLogger] = None, **context: Any):
    """Context manager for timing operations."""
    if logger is None:
        logger = get_structured_logger(__name__)

    start_time = time.time()
    logger.debug(f"Starting {operation_name}", operation=operation_name, **context)

    try:
        yield
    finally:
        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Completed {operation_name}",
            operation=operation_name,
            processing_time_ms=round(elapsed_ms, 2),
            **context
        )

        # Log slow operations as warning
        if elapsed_ms > LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                f"Slow operation detected: {operation_name}",
                operation=operation_name,
                processing_time_ms=round(elapsed_ms, 2),
                threshold_ms=LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS,
                **context
            )
