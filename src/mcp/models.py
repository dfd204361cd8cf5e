"""Pydantic models for MCP JSON-RPC 2.0 protocol."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# JSON-RPC 2.0 Base Models
# =============================================================================


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int | str | None = None  # None for notifications
    method: str
    params: dict[str, Any] = Field(default_factory=dict)


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response object."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Custom serialization to exclude None fields appropriately."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result
        return data


# =============================================================================
# MCP Content Types
# =============================================================================


class Annotations(BaseModel):
    """Audience and priority hints attached to content."""

    audience: list[Literal["user", "assistant"]] = Field(default_factory=list)
    priority: float | None = Field(None, ge=0.0, le=1.0)


class TextContent(BaseModel):
    """Text content returned by capabilities."""

    type: Literal["text"] = "text"
    text: str
    annotations: Annotations | None = None


class ImageContent(BaseModel):
    """Image content returned by capabilities (base64 encoded)."""

    type: Literal["image"] = "image"
    data: str  # base64 encoded
    mimeType: str
    annotations: Annotations | None = None


Content = TextContent | ImageContent


class ResponseEnvelope(BaseModel):
    """Successful result of a tool or resource dispatch."""

    content: list[Content] = Field(..., min_length=1)
    annotations: Annotations | None = None


class PromptMessage(BaseModel):
    """A single message produced by a prompt template."""

    role: Literal["user", "assistant"]
    content: TextContent


class PromptEnvelope(BaseModel):
    """Successful result of a prompt dispatch."""

    description: str | None = None
    messages: list[PromptMessage] = Field(..., min_length=1)


class ErrorResult(BaseModel):
    """Failed result of any dispatch."""

    message: str
    stage: Literal["resolve", "validate", "invoke", "normalize", "dispatch"]
    code: int


class ImagePayload(BaseModel):
    """Binary image returned by a handler, before base64 encoding."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = "image/png"
    annotations: Annotations | None = None


# =============================================================================
# MCP Capability Listings
# =============================================================================


class Tool(BaseModel):
    """MCP tool definition."""

    name: str = Field(..., description="Tool name")
    description: str = Field(..., description="Human-readable description")
    inputSchema: dict[str, Any] = Field(
        ..., description="JSON Schema for tool input"
    )


class Resource(BaseModel):
    """MCP resource definition."""

    uri: str
    name: str
    description: str | None = None
    mimeType: str | None = None


class PromptArgument(BaseModel):
    """A named argument accepted by a prompt."""

    name: str
    description: str | None = None
    required: bool = False


class Prompt(BaseModel):
    """MCP prompt definition."""

    name: str
    description: str | None = None
    arguments: list[PromptArgument] = Field(default_factory=list)


class ToolCallResult(BaseModel):
    """Result of a tool call."""

    content: list[Content]
    isError: bool = False
    annotations: Annotations | None = None


class ResourceContents(BaseModel):
    """One entry of a resources/read result."""

    uri: str
    mimeType: str | None = None
    text: str | None = None
    blob: str | None = None


# =============================================================================
# MCP Protocol Models
# =============================================================================


class ClientInfo(BaseModel):
    """Client information sent during initialization."""

    name: str
    version: str


class ServerInfo(BaseModel):
    """Server information returned during initialization."""

    name: str
    version: str


class Capabilities(BaseModel):
    """Server capabilities."""

    tools: dict[str, Any] = Field(default_factory=dict)
    resources: dict[str, Any] = Field(default_factory=dict)
    prompts: dict[str, Any] = Field(default_factory=dict)


class InitializeParams(BaseModel):
    """Parameters for initialize request."""

    protocolVersion: str
    capabilities: dict[str, Any] = Field(default_factory=dict)
    clientInfo: ClientInfo


class InitializeResult(BaseModel):
    """Result of initialize request."""

    protocolVersion: str
    capabilities: Capabilities
    serverInfo: ServerInfo


class ToolsListResult(BaseModel):
    """Result of tools/list request."""

    tools: list[Tool]


class ResourcesListResult(BaseModel):
    """Result of resources/list request."""

    resources: list[Resource]


class PromptsListResult(BaseModel):
    """Result of prompts/list request."""

    prompts: list[Prompt]


class ToolCallParams(BaseModel):
    """Parameters for tools/call request."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ResourceReadParams(BaseModel):
    """Parameters for resources/read request."""

    uri: str


class PromptGetParams(BaseModel):
    """Parameters for prompts/get request."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
