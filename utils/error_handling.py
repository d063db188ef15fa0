"""
Error handling and logging module.

Provides centralized error logging with file persistence, the structured
event log, the pipeline error taxonomy and retry classification.
"""

import os
import logging
from enum import Enum
from logging.handlers import RotatingFileHandler
from config import LOGS_DIR

# ============================================================================
# ERROR LOGGING SYSTEM
# ============================================================================

_LOG_FORMAT = '%(asctime)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s'


def _rotating_logger(name: str, filename: str, level: int) -> logging.Logger:
    """Create a logger writing to a rotating file (5MB per file, keep 5 backup files)"""
    log = logging.getLogger(name)
    log.setLevel(level)
    if not log.handlers:
        handler = RotatingFileHandler(
            os.path.join(LOGS_DIR, filename),
            maxBytes=5*1024*1024,  # 5MB per file
            backupCount=5,          # Keep 5 backup files
            encoding='utf-8'
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        log.addHandler(handler)
    return log


error_logger = _rotating_logger('board_errors', "errors.log", logging.ERROR)
event_logger = _rotating_logger('board_events', "events.log", logging.INFO)
error_log_file = os.path.join(LOGS_DIR, "errors.log")


# ============================================================================
# ERROR TAXONOMY
# ============================================================================

class ErrorKind(str, Enum):
    NO_VS = "no_vs"
    TEAM_NOT_FOUND = "team_not_found"
    CROSS_DIVISION = "cross_division"
    WEEK_NOT_FOUND = "week_not_found"
    BLOCK_TOP_NOT_FOUND = "block_top_not_found"
    ROW_NOT_FOUND = "row_not_found"
    RELAY_HTTP_ERROR = "relay_http_error"
    TIMEOUT_PREVENTION = "timeout_prevention"


class RelayHTTPError(Exception):
    """Non-2xx response from the chat relay"""

    def __init__(self, status: int, body: str = "", method: str = "", path: str = ""):
        self.status = status
        self.body = body
        self.method = method
        self.path = path
        super().__init__(f"{method} {path} -> HTTP {status}: {body[:200]}")

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.RELAY_HTTP_ERROR

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_rate_limited(self) -> bool:
        return self.status == 429


def log_error(error: Exception, context: str = None, extra_info: dict = None):
    """Log error to local file for debugging

    Args:
        error: The exception that occurred
        context: Description of what was happening when error occurred
        extra_info: Additional key-value pairs to log

    Example:
        try:
            something()
        except Exception as e:
            log_error(e, "Loading grid", {"division": division})
    """
    try:
        error_msg = f"{type(error).__name__}: {str(error)}"
        if context:
            error_msg = f"[{context}] {error_msg}"
        if extra_info:
            info_str = " | ".join(f"{k}={v}" for k, v in extra_info.items())
            error_msg = f"{error_msg} | {info_str}"

        error_logger.error(error_msg, exc_info=error)
        print(f"📝 Error logged to {error_log_file}")
    except Exception as log_e:
        print(f"⚠️ Failed to log error: {log_e}")


def log_event(kind: str, **fields):
    """Append a structured event line to events.log

    Used for unmatched rows, parse failures and batch summaries.
    """
    if isinstance(kind, ErrorKind):
        kind = kind.value
    info_str = " | ".join(f"{k}={v}" for k, v in fields.items())
    event_logger.info(f"{kind} | {info_str}" if info_str else kind)


def is_retryable_error(e: Exception) -> bool:
    """Check if an error is network-related and can be retried

    Args:
        e: The exception to check

    Returns:
        True if error is retryable, False otherwise
    """
    if isinstance(e, RelayHTTPError):
        return e.status == 429 or e.status >= 500
    error_str = str(e).lower()
    retryable_keywords = [
        "remotedisconnected", "connection aborted", "service unavailable",
        "429", "failed to resolve", "name resolution",
        # Server errors (typically transient)
        "500", "502", "503", "504",
        "server error", "bad gateway", "gateway timeout",
        "internal server error", "temporarily unavailable",
        # Google Sheets API specific patterns
        "apierror: [-1]", "error 502", "that's an error"
    ]
    return any(keyword in error_str for keyword in retryable_keywords)
