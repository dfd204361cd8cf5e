"""Weather provider tools."""

import logging
from typing import Any

import httpx

from src.mcp.errors import HandlerError
from src.mcp.registry import CapabilityKind, CapabilityRegistry
from src.mcp.schema import NumberField, Schema, StringField
from src.tools.weather.client import get_client

logger = logging.getLogger(__name__)


def format_forecast(data: dict[str, Any]) -> dict[str, Any]:
    """Reshape an Open-Meteo response into location, current, daily and units."""
    current = data.get("current")
    daily = data.get("daily")
    current_units = data.get("current_units") or {}
    daily_units = data.get("daily_units") or {}

    return {
        "location": {
            "latitude": data.get("latitude"),
            "longitude": data.get("longitude"),
            "timezone": data.get("timezone"),
            "elevation": data.get("elevation"),
        },
        "current": {
            "temperature": current.get("temperature_2m"),
            "humidity": current.get("relative_humidity_2m"),
            "weather_code": current.get("weather_code"),
            "wind_speed": current.get("wind_speed_10m"),
            "time": current.get("time"),
        } if current else None,
        "daily": {
            "time": daily.get("time"),
            "temperature_max": daily.get("temperature_2m_max"),
            "temperature_min": daily.get("temperature_2m_min"),
            "precipitation": daily.get("precipitation_sum"),
            "weather_code": daily.get("weather_code"),
        } if daily else None,
        "units": {
            "temperature": current_units.get("temperature_2m") or "°C",
            "humidity": current_units.get("relative_humidity_2m") or "%",
            "wind_speed": current_units.get("wind_speed_10m") or "km/h",
            "precipitation": daily_units.get("precipitation_sum") or "mm",
        },
    }


async def weather_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle the get_weather tool call."""
    try:
        data = await get_client().forecast(
            arguments["latitude"],
            arguments["longitude"],
            timezone=arguments["timezone"],
            forecast_days=arguments["forecast_days"],
        )
    except httpx.HTTPError as e:
        logger.warning(f"Weather request failed: {e}")
        raise HandlerError(f"weather request failed: {e}")

    return format_forecast(data)


def register_tools(registry: CapabilityRegistry) -> None:
    """Register weather tools with the registry."""

    registry.register(
        CapabilityKind.TOOL,
        "get_weather",
        Schema({
            "latitude": NumberField(
                description="Latitude (WGS84)", minimum=-90, maximum=90
            ),
            "longitude": NumberField(
                description="Longitude (WGS84)", minimum=-180, maximum=180
            ),
            "timezone": StringField(
                description="Time zone for timestamps (default: auto - detect from location)",
                required=False,
                default="auto",
            ),
            "forecast_days": NumberField(
                description="Number of forecast days (default: 3, max: 16)",
                integer=True,
                minimum=1,
                maximum=16,
                required=False,
                default=3,
            ),
        }),
        weather_handler,
        description="Returns current weather and a daily forecast for a latitude/longitude using Open-Meteo.",
    )
