"""
Standard error response builders for Parley.

The chat API answers failures with a single JSON object whose ``error`` key
holds a human-readable message; the code and recoverability ride alongside.
"""

from .codes import ErrorCode
from .exceptions import ParleyError


def error_response(error: ParleyError | Exception, include_details: bool = False) -> dict:
    """Build the JSON body returned for a failed request.

    Args:
        error: The exception to convert to a response
        include_details: Whether to include details/context (disable for privacy)

    Returns:
        Error body dict with at least an ``error`` key

    Example:
        >>> from errors import ValidationError, error_response
        >>> error_response(ValidationError("Messages array is required"))
        {"error": "Messages array is required", "code": "VALIDATION_MISSING_PARAM", "recoverable": True}
    """
    if isinstance(error, ParleyError):
        body = {
            "error": error.message,
            "code": error.code.value,
            "recoverable": error.recoverable,
        }
        if include_details:
            body["details"] = error.details
            body["context"] = error.context
        return body

    # Fallback for non-Parley exceptions
    return {
        "error": str(error) or "Internal server error",
        "code": ErrorCode.INTERNAL_UNEXPECTED.value,
        "recoverable": False,
    }


def status_for(error: ParleyError | Exception) -> int:
    """HTTP status code for an exception (500 for anything unclassified)."""
    if isinstance(error, ParleyError):
        return error.http_status
    return 500


def format_tool_failure(tool_name: str, error: ParleyError | Exception) -> str:
    """Format a failed tool call as the assistant-facing chat message."""
    reason = error.message if isinstance(error, ParleyError) else str(error)
    return f"Error executing tool {tool_name}: {reason}"
