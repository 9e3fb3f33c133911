"""
Custom exception hierarchy for Parley.

All exceptions inherit from ParleyError and include:
- code: ErrorCode for categorization
- message: Human-readable error message
- details: Optional additional context
- recoverable: Whether the caller can retry/fix the issue
- http_status: Status code used when the error reaches the HTTP layer
- context: Additional key-value pairs for debugging
"""

from typing import Any, Optional
from .codes import ErrorCode


class ParleyError(Exception):
    """Base exception for all Parley errors.

    Attributes:
        code: The ErrorCode categorizing this error
        message: Human-readable error message
        details: Optional additional context for the caller
        recoverable: Whether the error can be resolved by caller action
        http_status: HTTP status the API layer responds with
        context: Additional debugging information
    """

    code: ErrorCode = ErrorCode.INTERNAL_UNEXPECTED
    recoverable: bool = False
    http_status: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        recoverable: Optional[bool] = None,
        **context: Any,
    ):
        self.message = message
        self.details = details
        self.context = context if context else None

        # Allow overriding class defaults
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "context": self.context,
        }


class ValidationError(ParleyError):
    """Inbound request failed a precondition (missing messages, caller, tool session)."""

    code = ErrorCode.VALIDATION_MISSING_PARAM
    recoverable = True
    http_status = 400

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if parameter:
            ctx["parameter"] = parameter
        if expected:
            ctx["expected"] = expected
        if received:
            ctx["received"] = received
        super().__init__(message, details, **ctx)


class ConfigurationError(ParleyError):
    """Server is not set up for the request (e.g. provider API key missing).

    Kept distinct from ProviderError so operators can tell "not configured"
    apart from "network down".
    """

    code = ErrorCode.CONFIG_MISSING_CREDENTIAL
    recoverable = False
    http_status = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        setting: Optional[str] = None,
        provider: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if setting:
            ctx["setting"] = setting
        if provider:
            ctx["provider"] = provider
        super().__init__(message, details, **ctx)


class ToolConnectionError(ParleyError):
    """Handshake with the tool server failed."""

    code = ErrorCode.TOOL_CONNECTION_FAILED
    recoverable = True
    http_status = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        server_url: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if server_url:
            ctx["server_url"] = server_url
        super().__init__(message, details, **ctx)


class NotConnectedError(ParleyError):
    """A tool operation was attempted without an active tool server session."""

    code = ErrorCode.TOOL_NOT_CONNECTED
    recoverable = True
    http_status = 400


class ToolExecutionError(ParleyError):
    """A single tool invocation failed on the tool server."""

    code = ErrorCode.TOOL_EXECUTION_FAILED
    recoverable = True
    http_status = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        tool_name: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if tool_name:
            ctx["tool_name"] = tool_name
        super().__init__(message, details, **ctx)


class ProviderError(ParleyError):
    """Transport or parse failure talking to an LLM provider."""

    code = ErrorCode.PROVIDER_UNAVAILABLE
    recoverable = False
    http_status = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        error_type: Optional[str] = None,
        **context: Any,
    ):
        if error_type == "invalid":
            code = ErrorCode.PROVIDER_RESPONSE_INVALID
        elif error_type == "dependency":
            code = ErrorCode.CONFIG_DEPENDENCY_MISSING
        else:
            code = ErrorCode.PROVIDER_UNAVAILABLE

        ctx = {**context}
        if provider:
            ctx["provider"] = provider
        if model:
            ctx["model"] = model
        super().__init__(message, details, code=code, **ctx)


class PersistenceError(ParleyError):
    """The external conversation store rejected or failed a request."""

    code = ErrorCode.PERSISTENCE_FAILED
    recoverable = True
    http_status = 502

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        ctx = {**context}
        if status_code:
            ctx["status_code"] = status_code
        super().__init__(message, details, **ctx)
