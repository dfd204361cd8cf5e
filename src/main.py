"""FastAPI application serving the capability registry over MCP JSON-RPC."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from src.config.loader import get_enabled_providers, get_settings, load_provider_config
from src.mcp.errors import PARSE_ERROR, make_error_data
from src.mcp.handlers import PROTOCOL_VERSION, MCPHandlers
from src.mcp.jsonrpc import JsonRpcProcessor
from src.mcp.registry import CapabilityKind, CapabilityRegistry, get_registry
from src.utils.logging import get_logger, set_request_id, setup_logging

logger = logging.getLogger(__name__)


def capability_counts(registry: CapabilityRegistry) -> dict[str, int]:
    """Number of registered tools, resources and prompts."""
    return {
        "tools": registry.count(CapabilityKind.TOOL),
        "resources": registry.count(CapabilityKind.RESOURCE),
        "prompts": registry.count(CapabilityKind.PROMPT),
    }


def build_registry(registry: CapabilityRegistry | None = None) -> CapabilityRegistry:
    """Load the configured providers into the registry and freeze it."""
    log = get_logger("startup")
    registry = registry or get_registry()

    providers = get_enabled_providers(load_provider_config())
    log.info("Loading providers", providers=providers)

    for provider, loaded in registry.load_providers(providers).items():
        if loaded:
            log.info("Loaded provider", provider=provider)
        else:
            log.warning("Failed to load provider", provider=provider)

    registry.freeze()
    log.info(
        "Capability registry frozen",
        provider_count=registry.provider_count,
        **capability_counts(registry),
    )
    return registry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Set up logging and the registry before serving requests."""
    setup_logging()
    settings = get_settings()
    log = get_logger("startup")
    log.info(
        "Starting MCP server",
        server_name=settings.server_name,
        version=settings.server_version,
        image_generation_enabled=settings.image_generation_enabled,
    )

    registry = get_registry()
    # Tests and the stdio entrypoint may have built it already
    if not registry.frozen:
        build_registry(registry)

    yield

    log.info("Shutting down MCP server")


app = FastAPI(
    title="Capability MCP Server",
    description="Schema-described tools, resources and prompts over MCP JSON-RPC",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # MCP clients connect from arbitrary origins
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Tag every request and its log events with an X-Request-ID."""
    request_id = set_request_id(request.headers.get("X-Request-ID"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# =============================================================================
# Health and Info Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict:
    """Server name, endpoints and capability counts."""
    settings = get_settings()
    return {
        "name": settings.server_name,
        "version": settings.server_version,
        "description": "MCP server exposing tools, resources and prompts",
        "endpoints": {
            "health": "/health",
            "mcp": "/mcp",
            "message": "/message",
            "docs": "/docs",
        },
        "capabilities_available": capability_counts(get_registry()),
        "mcp_protocol_version": PROTOCOL_VERSION,
    }


# =============================================================================
# MCP Endpoints
# =============================================================================


async def handle_jsonrpc(request: Request) -> Response:
    """Answer one JSON-RPC message or batch; notifications get 202."""
    try:
        raw = await request.body()
    except Exception as e:
        logger.warning(f"Could not read request body: {e}")
        error = make_error_data(PARSE_ERROR, f"Could not read request body: {e}")
        return JSONResponse(content={"jsonrpc": "2.0", "id": None, "error": error})

    processor = JsonRpcProcessor(MCPHandlers(get_registry()))
    reply = await processor.handle_message(raw)
    if reply is None:
        return Response(status_code=202)
    return JSONResponse(content=processor.dump_reply(reply))


@app.post("/mcp")
async def mcp_endpoint(request: Request) -> Response:
    """JSON-RPC 2.0 endpoint for MCP clients."""
    return await handle_jsonrpc(request)


@app.post("/message")
async def message_endpoint(request: Request) -> Response:
    """Same as /mcp, kept for clients that post to /message."""
    return await handle_jsonrpc(request)


def main() -> None:
    """Run the HTTP server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
