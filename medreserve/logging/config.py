# =============================================================================
# medreserve/logging/config.py
# Package logger setup, token redaction and operation timing
# =============================================================================

import logging
import os
import re
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "medreserve"
LOG_LEVEL_ENV = "MEDRESERVE_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_DIR = Path("logs")

REDACTED = "[redacted]"

# "Bearer <token>" headers and bare JWTs
_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.=]+", re.IGNORECASE)
_JWT_RE = re.compile(r"\beyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+")


def redact(text: str) -> str:
    text = _BEARER_RE.sub(rf"\g<1>{REDACTED}", text)
    return _JWT_RE.sub(REDACTED, text)


class TokenRedactingFilter(logging.Filter):
    """Masks access tokens before a record reaches any handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    return level


def setup_logging(
    level: Union[int, str, None] = None,
    log_to_file: bool = False,
    log_filename: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``medreserve`` logger.

    Safe to call on every Streamlit rerun: handlers are installed once and
    later calls only adjust the level. Each handler redacts tokens, so
    records from child loggers are covered too. The level defaults to the
    MEDRESERVE_LOG_LEVEL environment variable, then INFO.

    Args:
        level: Logging level name or number
        log_to_file: Also write to logs/medreserve_YYYY-MM-DD.log
        log_filename: Custom log filename inside logs/
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(_resolve_level(level))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    if not any(getattr(h, "_medreserve", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        handler.addFilter(TokenRedactingFilter())
        handler._medreserve = True
        logger.addHandler(handler)

    if log_to_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        LOG_DIR.mkdir(exist_ok=True)
        filename = log_filename or f"medreserve_{datetime.now().strftime('%Y-%m-%d')}.log"
        file_handler = logging.FileHandler(LOG_DIR / filename)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(TokenRedactingFilter())
        logger.addHandler(file_handler)

    # urllib3 logs full URLs at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Usage:
        from medreserve.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


class LogContext:
    """
    Times one operation and logs its outcome in milliseconds.

    Usage:
        with LogContext(logger, "Fetch doctors") as ctx:
            doctors = service.fetch("doctors")
        ctx.elapsed_ms  # available after the block
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.elapsed_ms: Optional[int] = None
        self._start = 0.0

    def __enter__(self):
        self._start = time.perf_counter()
        self.logger.log(self.level, f"{self.operation} started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = round((time.perf_counter() - self._start) * 1000)

        if exc_type is None:
            self.logger.log(self.level, f"{self.operation} completed in {self.elapsed_ms}ms")
        else:
            self.logger.warning(
                f"{self.operation} failed after {self.elapsed_ms}ms: "
                f"{exc_type.__name__}: {exc_val}"
            )
        return False
