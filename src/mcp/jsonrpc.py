"""JSON-RPC 2.0 message processing."""

import asyncio
import json
import logging
from typing import Any

from pydantic import ValidationError

from src.mcp.errors import INVALID_REQUEST, PARSE_ERROR, make_error_data
from src.mcp.handlers import MCPHandlers
from src.mcp.models import JsonRpcError, JsonRpcRequest, JsonRpcResponse

logger = logging.getLogger(__name__)

# A batch answers with a list; a single request with one response or None
Reply = JsonRpcResponse | list[JsonRpcResponse] | None


class JsonRpcProcessor:
    """Process JSON-RPC 2.0 messages."""

    def __init__(self, handlers: MCPHandlers):
        self.handlers = handlers

    def decode(self, raw_data: str | bytes) -> tuple[Any, dict | None]:
        """
        Decode raw JSON.

        Returns (payload, error) tuple. One will be None.
        """
        try:
            if isinstance(raw_data, bytes):
                raw_data = raw_data.decode("utf-8")
            return json.loads(raw_data), None
        except ValueError as e:
            # Also covers integer literals beyond the int conversion limit
            return None, make_error_data(PARSE_ERROR, f"Invalid JSON: {e}")

    def parse_request(self, data: Any) -> tuple[JsonRpcRequest | None, dict | None]:
        """
        Validate a decoded JSON-RPC request object.

        Returns (request, error) tuple. One will be None.
        """
        if not isinstance(data, dict):
            return None, make_error_data(
                INVALID_REQUEST, "Invalid JSON-RPC request: expected an object"
            )
        try:
            return JsonRpcRequest(**data), None
        except ValidationError as e:
            return None, make_error_data(
                INVALID_REQUEST, f"Invalid JSON-RPC request: {e}"
            )

    async def process_request(
        self, request: JsonRpcRequest
    ) -> JsonRpcResponse | None:
        """
        Process a validated JSON-RPC request.

        Returns None for notifications (requests without id).
        """
        is_notification = request.id is None

        result, error = await self.handlers.dispatch(request.method, request.params)

        if is_notification:
            return None

        if error is not None:
            return JsonRpcResponse(id=request.id, error=JsonRpcError(**error))
        return JsonRpcResponse(id=request.id, result=result)

    async def _process_one(self, data: Any) -> JsonRpcResponse | None:
        request, error = self.parse_request(data)
        if error is not None:
            request_id = data.get("id") if isinstance(data, dict) else None
            if not isinstance(request_id, (int, str)):
                request_id = None
            return JsonRpcResponse(id=request_id, error=JsonRpcError(**error))
        return await self.process_request(request)  # type: ignore[arg-type]

    async def handle_payload(self, data: Any) -> Reply:
        """
        Handle a decoded JSON-RPC message or batch.

        Batch members are processed concurrently; notifications in a batch
        contribute no entry, and an all-notification batch gets no reply.
        """
        if isinstance(data, list):
            if not data:
                return JsonRpcResponse(
                    id=None,
                    error=JsonRpcError(
                        **make_error_data(INVALID_REQUEST, "Invalid JSON-RPC request: empty batch")
                    ),
                )
            replies = await asyncio.gather(*(self._process_one(item) for item in data))
            responses = [r for r in replies if r is not None]
            return responses or None
        return await self._process_one(data)

    async def handle_message(self, raw_data: str | bytes) -> Reply:
        """
        Handle a raw JSON-RPC message end-to-end.

        Returns a response, a list of responses for a batch, or None when
        nothing needs to be sent back.
        """
        data, parse_error = self.decode(raw_data)
        if parse_error is not None:
            # Parse errors don't have a request id
            return JsonRpcResponse(id=None, error=JsonRpcError(**parse_error))
        return await self.handle_payload(data)

    @staticmethod
    def dump_reply(reply: Reply) -> Any:
        """Convert a reply to plain JSON-compatible data."""
        if isinstance(reply, list):
            return [r.model_dump() for r in reply]
        if reply is None:
            return None
        return reply.model_dump()

    def serialize_reply(self, reply: Reply) -> str:
        """Serialize a reply to a JSON string."""
        return json.dumps(self.dump_reply(reply), ensure_ascii=False)
