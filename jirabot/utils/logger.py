"""Logging utilities for jirabot.

Provides context-aware logging helpers that mask credentials before
outputting to logs. Ticket keys and URLs are kept intact since they are
what the drift reports point people at.
"""
import json
import logging
import re
from typing import Any, Dict, Optional

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger('jirabot')


def configure_logging(level: str = "INFO") -> None:
    """Set the jirabot logger level (e.g. from LOG_LEVEL)."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))


def sanitize_text(text: str) -> str:
    """Mask tokens and credentials in text.

    Args:
        text: Input text that may contain credentials

    Returns:
        Text with credential patterns replaced
    """
    if not text:
        return text

    text = re.sub(r'(?i)bearer\s+[a-zA-Z0-9._~+/=-]+', 'Bearer <token>', text)
    text = re.sub(r'gh[pousr]_[a-zA-Z0-9]{36,}', '<github-token>', text)
    text = re.sub(r'github_pat_[a-zA-Z0-9_]{22,}', '<github-token>', text)

    return text


def safe_json(obj: Any, max_length: int = 1000) -> str:
    """Safely serialize object to JSON with credentials masked.

    Args:
        obj: Object to serialize
        max_length: Maximum length of output string

    Returns:
        Sanitized JSON string
    """
    try:
        json_str = json.dumps(obj, ensure_ascii=False, default=str)
        sanitized = sanitize_text(json_str)

        if len(sanitized) > max_length:
            sanitized = sanitized[:max_length] + "... [truncated]"

        return sanitized
    except (TypeError, ValueError):
        return "<unable to serialize>"


def log_info(message: str, **kwargs) -> None:
    """Log info message with optional sanitized context."""
    if kwargs:
        logger.info(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.info(message)


def log_warning(message: str, **kwargs) -> None:
    """Log warning message with optional sanitized context."""
    if kwargs:
        logger.warning(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.warning(message)


def log_error(message: str, **kwargs) -> None:
    """Log error message with optional sanitized context."""
    if kwargs:
        logger.error(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.error(message)


def log_debug(message: str, **kwargs) -> None:
    """Log debug message with optional sanitized context."""
    if kwargs:
        logger.debug(f"{message} | Context: {safe_json(kwargs)}")
    else:
        logger.debug(message)


def log_api_response(operation: str, status_code: int, response_data: Optional[Dict] = None) -> None:
    """Log API response at debug level.

    Args:
        operation: Description of the API operation
        status_code: HTTP status code
        response_data: Optional response data to log (will be sanitized)
    """
    if response_data:
        log_debug(f"API {operation} completed",
                  status_code=status_code,
                  response_preview=safe_json(response_data, max_length=500))
    else:
        log_debug(f"API {operation} completed", status_code=status_code)


def log_ticket_failure(ticket_key: str, error: BaseException) -> None:
    """Log a per-ticket evaluation failure with the ticket key attached."""
    log_error(f"[{ticket_key}] Failed to verify issue state: {sanitize_text(str(error))}",
              ticket_key=ticket_key,
              error_type=type(error).__name__)


def log_pass_progress(stage: str, **kwargs) -> None:
    """Log reconciliation pass progress through its phases.

    Args:
        stage: Current stage of the pass
        **kwargs: Additional context
    """
    log_info(f"Reconcile progress: {stage}", **kwargs)
