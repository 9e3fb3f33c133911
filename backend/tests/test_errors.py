"""
Tests for the Parley error handling module.
"""

import logging
from errors import (
    ErrorCode,
    ParleyError,
    ValidationError,
    ConfigurationError,
    ToolConnectionError,
    NotConnectedError,
    ToolExecutionError,
    ProviderError,
    PersistenceError,
    error_response,
    status_for,
    format_tool_failure,
    log_error,
)


class TestErrorCodes:
    """Test error code enum."""

    def test_error_codes_are_strings(self):
        """Error codes should be string values."""
        assert ErrorCode.TOOL_NOT_CONNECTED.value == "TOOL_NOT_CONNECTED"
        assert ErrorCode.CONFIG_MISSING_CREDENTIAL.value == "CONFIG_MISSING_CREDENTIAL"

    def test_error_codes_have_categories(self):
        """Error codes should follow category naming convention."""
        validation_codes = [c for c in ErrorCode if c.value.startswith("VALIDATION_")]
        assert len(validation_codes) >= 3

        tool_codes = [c for c in ErrorCode if c.value.startswith("TOOL_")]
        assert len(tool_codes) == 3


class TestParleyError:
    """Test base ParleyError exception."""

    def test_basic_creation(self):
        """Create basic error with message."""
        err = ParleyError("Test error")
        assert err.message == "Test error"
        assert err.details is None
        assert err.code == ErrorCode.INTERNAL_UNEXPECTED
        assert err.recoverable is False
        assert err.http_status == 500

    def test_with_context(self):
        """Create error with additional context."""
        err = ParleyError("Test error", foo="bar", count=42)
        assert err.context == {"foo": "bar", "count": 42}

    def test_str_representation(self):
        """String representation includes message and details."""
        err = ParleyError("Test error", details="More info")
        assert str(err) == "Test error - More info"

        err_no_details = ParleyError("Test error")
        assert str(err_no_details) == "Test error"

    def test_to_dict(self):
        """Convert error to dictionary."""
        err = ParleyError("Test error", details="More info", key="value")
        d = err.to_dict()
        assert d["code"] == ErrorCode.INTERNAL_UNEXPECTED.value
        assert d["message"] == "Test error"
        assert d["details"] == "More info"
        assert d["recoverable"] is False
        assert d["context"] == {"key": "value"}

    def test_code_override(self):
        """Explicit code overrides the class default."""
        err = ValidationError("No session", code=ErrorCode.VALIDATION_NO_TOOL_SESSION)
        assert err.code == ErrorCode.VALIDATION_NO_TOOL_SESSION
        assert err.http_status == 400


class TestValidationError:
    """Test ValidationError exception."""

    def test_default_code(self):
        """Default code is VALIDATION_MISSING_PARAM."""
        err = ValidationError("Missing param")
        assert err.code == ErrorCode.VALIDATION_MISSING_PARAM
        assert err.recoverable is True

    def test_with_parameter_info(self):
        """Include parameter context."""
        err = ValidationError("Invalid value", parameter="selectedLLM", expected="gemini", received="bard")
        assert err.context["parameter"] == "selectedLLM"
        assert err.context["expected"] == "gemini"
        assert err.context["received"] == "bard"


class TestConfigurationError:
    """Test ConfigurationError exception."""

    def test_missing_credential(self):
        """Missing key is a server-side 500, not recoverable by the caller."""
        err = ConfigurationError("Claude API key not configured", provider="claude")
        assert err.code == ErrorCode.CONFIG_MISSING_CREDENTIAL
        assert err.http_status == 500
        assert err.recoverable is False
        assert err.context == {"provider": "claude"}


class TestToolErrors:
    """Test tool session and execution exceptions."""

    def test_connection_error(self):
        """Connection errors carry the server URL."""
        err = ToolConnectionError("Failed to connect", server_url="http://tools:8080")
        assert err.code == ErrorCode.TOOL_CONNECTION_FAILED
        assert err.context["server_url"] == "http://tools:8080"

    def test_not_connected_is_client_error(self):
        """Calling a tool with no session is a 400."""
        err = NotConnectedError("Not connected to MCP server")
        assert err.code == ErrorCode.TOOL_NOT_CONNECTED
        assert err.http_status == 400

    def test_execution_error(self):
        """Execution errors carry the tool name."""
        err = ToolExecutionError("MCP Error: division by zero", tool_name="calculator")
        assert err.code == ErrorCode.TOOL_EXECUTION_FAILED
        assert err.context["tool_name"] == "calculator"


class TestProviderError:
    """Test ProviderError exception."""

    def test_default_code(self):
        """Default code is PROVIDER_UNAVAILABLE."""
        err = ProviderError("Request failed")
        assert err.code == ErrorCode.PROVIDER_UNAVAILABLE

    def test_invalid_response(self):
        """Invalid response type sets appropriate code."""
        err = ProviderError("Bad shape", error_type="invalid")
        assert err.code == ErrorCode.PROVIDER_RESPONSE_INVALID

    def test_missing_dependency(self):
        """Missing SDK maps to a configuration code."""
        err = ProviderError("SDK missing", error_type="dependency")
        assert err.code == ErrorCode.CONFIG_DEPENDENCY_MISSING

    def test_with_provider_info(self):
        """Include provider and model context."""
        err = ProviderError("Request failed", provider="chatgpt", model="gpt-4")
        assert err.context["provider"] == "chatgpt"
        assert err.context["model"] == "gpt-4"


class TestPersistenceError:
    """Test PersistenceError exception."""

    def test_status(self):
        """Store failures map to 502 and keep the upstream status."""
        err = PersistenceError("Store returned 503", status_code=503)
        assert err.http_status == 502
        assert err.context["status_code"] == 503


class TestErrorResponse:
    """Test error_response builder."""

    def test_parley_error(self):
        """Build response from ParleyError."""
        err = ValidationError("Messages array is required")
        resp = error_response(err)
        assert resp == {
            "error": "Messages array is required",
            "code": "VALIDATION_MISSING_PARAM",
            "recoverable": True,
        }

    def test_include_details(self):
        """Details and context only appear on request."""
        err = ValidationError("Bad", details="extra", parameter="messages")
        resp = error_response(err, include_details=True)
        assert resp["details"] == "extra"
        assert resp["context"] == {"parameter": "messages"}

        assert "details" not in error_response(err)

    def test_generic_exception(self):
        """Build response from generic Exception."""
        resp = error_response(RuntimeError("boom"))
        assert resp["error"] == "boom"
        assert resp["code"] == "INTERNAL_UNEXPECTED"

    def test_empty_generic_exception(self):
        """Exceptions without a message get a generic one."""
        resp = error_response(RuntimeError())
        assert resp["error"] == "Internal server error"


class TestStatusFor:
    """Test HTTP status mapping."""

    def test_statuses(self):
        assert status_for(ValidationError("x")) == 400
        assert status_for(ConfigurationError("x")) == 500
        assert status_for(ProviderError("x")) == 500
        assert status_for(PersistenceError("x")) == 502
        assert status_for(KeyError("x")) == 500


class TestFormatToolFailure:
    """Test the assistant-facing tool failure message."""

    def test_parley_error_uses_message(self):
        """Details are not shown to the user."""
        err = ToolExecutionError("MCP Error: unknown tool", details="trace", tool_name="weather")
        assert format_tool_failure("weather", err) == "Error executing tool weather: MCP Error: unknown tool"

    def test_generic_exception(self):
        assert format_tool_failure("calc", ValueError("nope")) == "Error executing tool calc: nope"


class TestLogError:
    """Test log_error helper."""

    def test_parley_error_format(self, caplog):
        """ParleyError logs with [context] CODE: message."""
        logger = logging.getLogger("test_log_error")
        with caplog.at_level(logging.ERROR):
            log_error(logger, ProviderError("Claude request failed"), context="/api/chat", include_traceback=False)
        assert "[/api/chat] PROVIDER_UNAVAILABLE: Claude request failed" in caplog.text

    def test_generic_error_format(self, caplog):
        logger = logging.getLogger("test_log_error")
        with caplog.at_level(logging.ERROR):
            log_error(logger, RuntimeError("boom"), include_traceback=False)
        assert "boom" in caplog.text
