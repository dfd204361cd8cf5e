"""Server information resource."""

import platform
import sys
import time
from datetime import datetime, timezone
from functools import partial
from typing import Any

from src.config.loader import get_settings
from src.mcp.registry import CapabilityKind, CapabilityRecord, CapabilityRegistry
from src.mcp.schema import Schema

SERVER_INFO_URI = "server://info"

_started_at = time.monotonic()


def describe_record(record: CapabilityRecord) -> dict[str, Any]:
    """Describe one capability by name, kind, description and parameters."""
    entry: dict[str, Any] = {
        "name": record.name,
        "kind": record.kind.value,
        "description": record.description,
        "parameters": record.schema.to_json_schema()["properties"],
    }
    if record.title:
        entry["title"] = record.title
    if record.mime_type:
        entry["mimeType"] = record.mime_type
    return entry


def build_server_info(registry: CapabilityRegistry) -> dict[str, Any]:
    """Snapshot of the server and every capability in the registry."""
    settings = get_settings()
    return {
        "server": {
            "name": settings.server_name,
            "version": settings.server_version,
            "description": "MCP server exposing tools, resources and prompts",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - _started_at, 3),
            "pythonVersion": platform.python_version(),
            "platform": sys.platform,
            "architecture": platform.machine(),
        },
        "capabilities": {
            "tools": registry.count(CapabilityKind.TOOL),
            "resources": registry.count(CapabilityKind.RESOURCE),
            "prompts": registry.count(CapabilityKind.PROMPT),
        },
        "tools": [describe_record(r) for r in registry.records(CapabilityKind.TOOL)],
        "resources": [describe_record(r) for r in registry.records(CapabilityKind.RESOURCE)],
        "prompts": [describe_record(r) for r in registry.records(CapabilityKind.PROMPT)],
    }


async def server_info_handler(registry: CapabilityRegistry, arguments: dict[str, Any]) -> dict[str, Any]:
    return build_server_info(registry)


def register_tools(registry: CapabilityRegistry) -> None:
    """Register the server info resource with the registry."""

    registry.register(
        CapabilityKind.RESOURCE,
        SERVER_INFO_URI,
        Schema(),
        partial(server_info_handler, registry),
        description="Current server information and every available capability",
        title="Server info and capability list",
        mime_type="application/json",
    )
