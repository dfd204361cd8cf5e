"""Open-Meteo forecast API client."""

import logging
from typing import Any

from src.config.loader import get_settings
from src.mcp.errors import HandlerError
from src.utils.http import create_http_client, raise_for_upstream, send_with_retry

logger = logging.getLogger(__name__)

CURRENT_VARIABLES = "temperature_2m,relative_humidity_2m,weather_code,wind_speed_10m"
DAILY_VARIABLES = "temperature_2m_max,temperature_2m_min,precipitation_sum,weather_code"


class OpenMeteoClient:
    """Client for the Open-Meteo forecast API (no API key required)."""

    def __init__(self, base_url: str | None = None):
        self.base_url = base_url or get_settings().open_meteo_url

    async def forecast(
        self,
        latitude: float,
        longitude: float,
        timezone: str = "auto",
        forecast_days: int = 3,
    ) -> dict[str, Any]:
        """
        Get current conditions and a daily forecast for a location.

        Args:
            latitude: WGS84 latitude
            longitude: WGS84 longitude
            timezone: Time zone for timestamps, or 'auto' to detect
            forecast_days: Number of days (1-16)

        Returns:
            Raw Open-Meteo forecast response
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "timezone": timezone,
            "forecast_days": forecast_days,
            "current": CURRENT_VARIABLES,
            "daily": DAILY_VARIABLES,
        }

        async with create_http_client() as client:
            response = await send_with_retry(client, "GET", self.base_url, params=params)
            reason = None
            if not response.is_success:
                # Open-Meteo explains rejected parameters in a JSON "reason"
                try:
                    body = response.json()
                except ValueError:
                    body = None
                if isinstance(body, dict):
                    reason = body.get("reason")
            raise_for_upstream(response, "Open-Meteo", reason)
            data = response.json()

        if data.get("error"):
            raise HandlerError(f"Open-Meteo API error: {data.get('reason') or 'unknown error'}")

        return data


def get_client() -> OpenMeteoClient:
    """Get an Open-Meteo client using the configured endpoint."""
    return OpenMeteoClient()
