"""Stdio transport for MCP: newline-delimited JSON-RPC on stdin/stdout."""

import asyncio
import logging
import sys
from typing import IO

from src.mcp.handlers import MCPHandlers
from src.mcp.jsonrpc import JsonRpcProcessor
from src.mcp.registry import CapabilityRegistry
from src.utils.logging import set_request_id

logger = logging.getLogger(__name__)


class StdioTransport:
    """
    Serve JSON-RPC messages read line by line from a text stream.

    Each line is handled as its own task, so a slow capability does not hold
    up the requests behind it. Replies are written one per line, in
    completion order.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        reader: IO[str] | None = None,
        writer: IO[str] | None = None,
    ):
        self.processor = JsonRpcProcessor(MCPHandlers(registry))
        self.reader = reader or sys.stdin
        self.writer = writer or sys.stdout
        self._write_lock = asyncio.Lock()

    async def _read_line(self) -> str:
        return await asyncio.to_thread(self.reader.readline)

    async def _write_line(self, line: str) -> None:
        async with self._write_lock:
            self.writer.write(line + "\n")
            self.writer.flush()

    async def handle_line(self, line: str) -> None:
        """Handle one incoming line and write the reply, if any."""
        set_request_id()
        reply = await self.processor.handle_message(line)
        if reply is not None:
            await self._write_line(self.processor.serialize_reply(reply))

    async def serve(self) -> None:
        """Read until end of input, then wait for in-flight requests."""
        pending: set[asyncio.Task] = set()
        logger.info("Serving MCP over stdio")
        try:
            while True:
                line = await self._read_line()
                if not line:
                    break
                line = line.strip()
                if not line:
                    continue
                task = asyncio.create_task(self.handle_line(line))
                pending.add(task)
                task.add_done_callback(pending.discard)
            if pending:
                await asyncio.gather(*pending)
        finally:
            for task in pending:
                task.cancel()
        logger.info("Stdio input closed")


async def serve_stdio(registry: CapabilityRegistry) -> None:
    """Serve the registry over the process's stdin and stdout."""
    await StdioTransport(registry).serve()
