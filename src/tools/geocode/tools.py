"""Geocode provider tools."""

import logging
from typing import Any

import httpx

from src.mcp.errors import HandlerError
from src.mcp.registry import CapabilityKind, CapabilityRegistry
from src.mcp.schema import NumberField, Schema, StringField
from src.tools.geocode.client import get_client

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def format_place(result: dict[str, Any]) -> dict[str, Any]:
    """Reshape one Nominatim result, surfacing the coordinates as numbers."""
    lat = _to_float(result.get("lat"))
    lon = _to_float(result.get("lon"))
    return {
        "display_name": result.get("display_name"),
        "latitude": lat,
        "longitude": lon,
        "coordinates": {"lat": lat, "lon": lon},
        "place_id": result.get("place_id"),
        "osm_type": result.get("osm_type"),
        "osm_id": result.get("osm_id"),
        "type": result.get("type"),
        "category": result.get("category"),
        "importance": result.get("importance"),
        "address": result.get("address") or None,
        "boundingbox": result.get("boundingbox") or None,
    }


async def geocode_handler(arguments: dict[str, Any]) -> str | list[dict[str, Any]]:
    """Handle the geocode tool call."""
    query = arguments["query"]
    limit = arguments["limit"]

    try:
        results = await get_client().search(query, limit=limit)
    except httpx.HTTPError as e:
        logger.warning(f"Geocoding request failed: {e}")
        raise HandlerError(f"geocoding request failed: {e}")

    if not results:
        return f'No results found for "{query}".'

    return [format_place(r) for r in results]


def register_tools(registry: CapabilityRegistry) -> None:
    """Register geocode tools with the registry."""

    registry.register(
        CapabilityKind.TOOL,
        "geocode",
        Schema({
            "query": StringField(
                description='City name or address to look up (e.g. "Seoul", "New York")',
            ),
            "limit": NumberField(
                description="Number of results to return (default: 1, max: 40)",
                integer=True,
                minimum=1,
                maximum=40,
                required=False,
                default=1,
            ),
        }),
        geocode_handler,
        description="Converts a city name or address into latitude/longitude coordinates using OpenStreetMap Nominatim.",
    )
