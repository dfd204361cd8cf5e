"""JSON-RPC 2.0 error codes, handler errors, and failure translation."""

from typing import Any

from src.mcp.failures import (
    Failure,
    HandlerFailure,
    NotFound,
    ValidationFailure,
)
from src.mcp.models import ErrorResult

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700  # Invalid JSON was received
INVALID_REQUEST = -32600  # The JSON sent is not a valid Request object
METHOD_NOT_FOUND = -32601  # The method does not exist / is not available
INVALID_PARAMS = -32602  # Invalid method parameter(s)
INTERNAL_ERROR = -32603  # Internal JSON-RPC error

# Custom error codes (server-defined, must be between -32000 and -32099)
TOOL_EXECUTION_ERROR = -32000  # Capability handler failed


class HandlerError(Exception):
    """Raised by capability handlers to report a domain failure.

    The message is shown to the caller as-is, behind a prefix naming the
    capability that failed.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProtocolError(Exception):
    """Raised by MCP method handlers to answer with a JSON-RPC error object."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def error_message(code: int) -> str:
    """Get the standard message for a JSON-RPC error code."""
    messages = {
        PARSE_ERROR: "Parse error",
        INVALID_REQUEST: "Invalid Request",
        METHOD_NOT_FOUND: "Method not found",
        INVALID_PARAMS: "Invalid params",
        INTERNAL_ERROR: "Internal error",
        TOOL_EXECUTION_ERROR: "Tool execution error",
    }
    return messages.get(code, "Unknown error")


def make_error_data(code: int, message: str | None = None, data: Any = None) -> dict[str, Any]:
    """Create an error object for JSON-RPC response."""
    error: dict[str, Any] = {
        "code": code,
        "message": message or error_message(code),
    }
    if data is not None:
        error["data"] = data
    return error


def translate_failure(failure: Failure, kind: str, name: str) -> ErrorResult:
    """Map a dispatch failure for capability (kind, name) to an ErrorResult."""
    if isinstance(failure, NotFound):
        message = failure.message
        code = INVALID_PARAMS
    elif isinstance(failure, ValidationFailure):
        message = f"invalid arguments for {kind} '{name}': {failure.message}"
        code = INVALID_PARAMS
    elif isinstance(failure, HandlerFailure):
        message = f"{kind} '{name}' failed: {failure.message}"
        code = TOOL_EXECUTION_ERROR
    else:
        # NormalizationFailure, or a failure kind this translator predates
        message = f"internal error: {failure.message}"
        code = INTERNAL_ERROR

    return ErrorResult(message=message, stage=failure.stage, code=code)
