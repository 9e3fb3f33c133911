"""
Error codes for Parley.

Provides a standardized taxonomy of error codes organized by category.
Use these codes consistently across all error responses.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for Parley.

    Categories:
    - VALIDATION_*: Inbound request validation errors
    - CONFIG_*: Missing or invalid server configuration
    - TOOL_*: Tool server session and execution errors
    - PROVIDER_*: LLM provider transport/response errors
    - PERSISTENCE_*: Conversation store errors
    - INTERNAL_*: Internal/unexpected errors
    """

    # Validation errors (input checking)
    VALIDATION_MISSING_PARAM = "VALIDATION_MISSING_PARAM"
    VALIDATION_INVALID_TYPE = "VALIDATION_INVALID_TYPE"
    VALIDATION_INVALID_FORMAT = "VALIDATION_INVALID_FORMAT"
    VALIDATION_NO_TOOL_SESSION = "VALIDATION_NO_TOOL_SESSION"

    # Configuration errors
    CONFIG_MISSING_CREDENTIAL = "CONFIG_MISSING_CREDENTIAL"
    CONFIG_DEPENDENCY_MISSING = "CONFIG_DEPENDENCY_MISSING"

    # Tool server errors
    TOOL_CONNECTION_FAILED = "TOOL_CONNECTION_FAILED"
    TOOL_NOT_CONNECTED = "TOOL_NOT_CONNECTED"
    TOOL_EXECUTION_FAILED = "TOOL_EXECUTION_FAILED"

    # Provider errors (model interactions)
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    PROVIDER_RESPONSE_INVALID = "PROVIDER_RESPONSE_INVALID"

    # Conversation store errors
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"

    # Internal errors (unexpected failures)
    INTERNAL_UNEXPECTED = "INTERNAL_UNEXPECTED"
