"""
Centralized Exceptions
Error taxonomy and structured error handling for the ticker service.
"""

import re
from typing import Dict, Any, Optional
from fastapi import HTTPException, status


class TickerError(Exception):
    """Base exception for the ticker service."""

    def __init__(self, message: str, error_code: str = "UNKNOWN", details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class FeedTransportError(TickerError):
    """Upstream connection could not be opened or was lost."""

    def __init__(self, message: str = "Feed transport error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "NETWORK_ERROR", details)


class MessageParseError(TickerError):
    """Inbound frame has an unexpected shape."""

    def __init__(self, message: str = "Malformed feed message", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "PARSE_ERROR", details)


class ValidationError(TickerError):
    """User input validation error."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class ConfigurationError(TickerError):
    """Configuration error."""

    def __init__(self, message: str = "Configuration error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIG_ERROR", details)


# Error mapping to HTTP responses
ERROR_TO_HTTP_STATUS = {
    FeedTransportError: status.HTTP_503_SERVICE_UNAVAILABLE,
    MessageParseError: status.HTTP_502_BAD_GATEWAY,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_http_exception(error: TickerError) -> HTTPException:
    """Convert TickerError to HTTPException with proper status code."""
    status_code = ERROR_TO_HTTP_STATUS.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail={
            "error": error.error_code,
            "message": error.message,
            "details": error.details
        }
    )


def sanitize_error_message(message: str) -> str:
    """Sanitize error messages to prevent information leakage."""
    # "password" is left out: user-facing reset messages mention it
    sensitive_patterns = [
        "secret", "token", "private",
        "api_key", "access_token", "refresh_token"
    ]

    sanitized = message
    for pattern in sensitive_patterns:
        sanitized = re.sub(re.escape(pattern), "***", sanitized, flags=re.IGNORECASE)

    return sanitized


def create_structured_error_response(error: Exception) -> Dict[str, Any]:
    """Create structured error response for logging and API responses."""
    if isinstance(error, TickerError):
        return {
            "error_type": error.error_code,
            "message": sanitize_error_message(error.message),
            "details": error.details,
            "timestamp": None  # Will be filled by caller
        }
    else:
        return {
            "error_type": "UNKNOWN_ERROR",
            "message": sanitize_error_message(str(error)),
            "details": {},
            "timestamp": None
        }
