"""MCP (Model Context Protocol) capability core with JSON-RPC 2.0."""

from src.mcp.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    JsonRpcError,
    Annotations,
    TextContent,
    ImageContent,
    ImagePayload,
    ResponseEnvelope,
    PromptMessage,
    PromptEnvelope,
    ErrorResult,
)
from src.mcp.schema import Schema, StringField, NumberField, BooleanField, EnumField
from src.mcp.registry import CapabilityKind, CapabilityRegistry, get_registry
from src.mcp.dispatcher import Dispatcher
from src.mcp.errors import (
    HandlerError,
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    TOOL_EXECUTION_ERROR,
)

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "Annotations",
    "TextContent",
    "ImageContent",
    "ImagePayload",
    "ResponseEnvelope",
    "PromptMessage",
    "PromptEnvelope",
    "ErrorResult",
    "Schema",
    "StringField",
    "NumberField",
    "BooleanField",
    "EnumField",
    "CapabilityKind",
    "CapabilityRegistry",
    "get_registry",
    "Dispatcher",
    "HandlerError",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "TOOL_EXECUTION_ERROR",
]
