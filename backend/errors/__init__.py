"""
Parley Error Handling Module

Provides standardized error codes, exceptions, and response builders
for consistent error handling across the application.

Usage:
    from errors import (
        # Error codes
        ErrorCode,

        # Exceptions
        ParleyError,
        ValidationError,
        ConfigurationError,
        ToolConnectionError,
        NotConnectedError,
        ToolExecutionError,
        ProviderError,
        PersistenceError,

        # Response builders
        error_response,
        status_for,
        format_tool_failure,

        # Hooks
        register_exception_handlers,
        log_error,
    )

Example:
    from errors import ValidationError

    def check_request(req):
        if not req.messages:
            raise ValidationError(
                "Messages array is required",
                parameter="messages",
            )
"""

from .codes import ErrorCode
from .exceptions import (
    ParleyError,
    ValidationError,
    ConfigurationError,
    ToolConnectionError,
    NotConnectedError,
    ToolExecutionError,
    ProviderError,
    PersistenceError,
)
from .response import (
    error_response,
    status_for,
    format_tool_failure,
)
from .handlers import (
    register_exception_handlers,
    log_error,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Exceptions
    "ParleyError",
    "ValidationError",
    "ConfigurationError",
    "ToolConnectionError",
    "NotConnectedError",
    "ToolExecutionError",
    "ProviderError",
    "PersistenceError",
    # Response builders
    "error_response",
    "status_for",
    "format_tool_failure",
    # Hooks
    "register_exception_handlers",
    "log_error",
]
