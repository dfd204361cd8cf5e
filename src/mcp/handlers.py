"""MCP method handlers for JSON-RPC requests."""

import logging
from typing import Any

from pydantic import ValidationError

from src.config.loader import get_settings
from src.mcp.dispatcher import Dispatcher
from src.mcp.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    ProtocolError,
    make_error_data,
)
from src.mcp.models import (
    Capabilities,
    ErrorResult,
    ImageContent,
    InitializeParams,
    InitializeResult,
    PromptGetParams,
    PromptsListResult,
    ResourceContents,
    ResourceReadParams,
    ResourcesListResult,
    ServerInfo,
    TextContent,
    ToolCallParams,
    ToolCallResult,
    ToolsListResult,
)
from src.mcp.registry import CapabilityKind, CapabilityRegistry

logger = logging.getLogger(__name__)

# MCP protocol version we support
PROTOCOL_VERSION = "2024-11-05"


def _first_error(e: ValidationError) -> str:
    error = e.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


class MCPHandlers:
    """Handlers for MCP protocol methods."""

    def __init__(self, registry: CapabilityRegistry):
        self.registry = registry
        self.dispatcher = Dispatcher(registry)

    async def handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the initialize request."""
        try:
            init_params = InitializeParams(**params)
            logger.info(
                f"Initialize from {init_params.clientInfo.name} "
                f"{init_params.clientInfo.version}"
            )
        except ValidationError as e:
            # Still proceed with defaults
            logger.warning(f"Invalid initialize params: {_first_error(e)}")

        settings = get_settings()
        result = InitializeResult(
            protocolVersion=PROTOCOL_VERSION,
            capabilities=Capabilities(),
            serverInfo=ServerInfo(
                name=settings.server_name,
                version=settings.server_version,
            ),
        )
        return result.model_dump()

    async def handle_initialized(self, params: dict[str, Any]) -> None:
        """Handle the notifications/initialized notification (no response)."""
        logger.info("Client confirmed initialization")
        return None

    async def handle_ping(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the ping request."""
        return {}

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    async def handle_tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the tools/list request."""
        result = ToolsListResult(tools=self.registry.list_tools())
        return result.model_dump(exclude_none=True)

    async def handle_tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the tools/call request.

        Tool failures are reported in-band as an ``isError`` result so the
        client model can see them.
        """
        try:
            call_params = ToolCallParams(**params)
        except ValidationError as e:
            logger.warning(f"Invalid tools/call params: {_first_error(e)}")
            return ToolCallResult(
                content=[TextContent(text=f"Invalid parameters: {_first_error(e)}")],
                isError=True,
            ).model_dump(exclude_none=True)

        logger.info(f"Calling tool: {call_params.name}")
        outcome = await self.dispatcher.dispatch(
            CapabilityKind.TOOL, call_params.name, call_params.arguments
        )
        if isinstance(outcome, ErrorResult):
            result = ToolCallResult(
                content=[TextContent(text=outcome.message)],
                isError=True,
            )
        else:
            result = ToolCallResult(
                content=outcome.content,
                annotations=outcome.annotations,
            )
        return result.model_dump(exclude_none=True)

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    async def handle_resources_list(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the resources/list request."""
        result = ResourcesListResult(resources=self.registry.list_resources())
        return result.model_dump(exclude_none=True)

    async def handle_resources_read(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the resources/read request."""
        try:
            read_params = ResourceReadParams(**params)
        except ValidationError as e:
            raise ProtocolError(INVALID_PARAMS, f"Invalid parameters: {_first_error(e)}")

        outcome = await self.dispatcher.dispatch(
            CapabilityKind.RESOURCE, read_params.uri, {}
        )
        if isinstance(outcome, ErrorResult):
            raise ProtocolError(outcome.code, outcome.message)

        record = self.registry.get(CapabilityKind.RESOURCE, read_params.uri)
        mime_type = record.mime_type if record is not None else None
        contents = []
        for block in outcome.content:
            if isinstance(block, ImageContent):
                contents.append(
                    ResourceContents(uri=read_params.uri, mimeType=block.mimeType, blob=block.data)
                )
            else:
                contents.append(
                    ResourceContents(uri=read_params.uri, mimeType=mime_type, text=block.text)
                )
        return {"contents": [c.model_dump(exclude_none=True) for c in contents]}

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    async def handle_prompts_list(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the prompts/list request."""
        result = PromptsListResult(prompts=self.registry.list_prompts())
        return result.model_dump(exclude_none=True)

    async def handle_prompts_get(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the prompts/get request."""
        try:
            get_params = PromptGetParams(**params)
        except ValidationError as e:
            raise ProtocolError(INVALID_PARAMS, f"Invalid parameters: {_first_error(e)}")

        outcome = await self.dispatcher.dispatch(
            CapabilityKind.PROMPT, get_params.name, get_params.arguments
        )
        if isinstance(outcome, ErrorResult):
            raise ProtocolError(outcome.code, outcome.message)
        return outcome.model_dump(exclude_none=True)

    async def dispatch(
        self, method: str, params: dict[str, Any]
    ) -> tuple[Any | None, dict[str, Any] | None]:
        """
        Dispatch a method call to the appropriate handler.

        Returns (result, error) tuple. One will be None.
        """
        handlers = {
            "initialize": self.handle_initialize,
            "notifications/initialized": self.handle_initialized,
            "ping": self.handle_ping,
            "tools/list": self.handle_tools_list,
            "tools/call": self.handle_tools_call,
            "resources/list": self.handle_resources_list,
            "resources/read": self.handle_resources_read,
            "prompts/list": self.handle_prompts_list,
            "prompts/get": self.handle_prompts_get,
        }

        handler = handlers.get(method)
        if handler is None:
            return None, make_error_data(
                METHOD_NOT_FOUND, f"Method not found: {method}"
            )

        try:
            result = await handler(params)
            return result, None
        except ProtocolError as e:
            return None, make_error_data(e.code, e.message)
        except Exception as e:
            logger.exception(f"Error handling method {method}")
            return None, make_error_data(
                INTERNAL_ERROR, f"Error processing request: {str(e)}"
            )
