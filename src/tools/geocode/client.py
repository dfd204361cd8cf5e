"""Nominatim (OpenStreetMap) geocoding API client."""

import logging
from typing import Any

from src.config.loader import get_settings
from src.utils.http import create_http_client, raise_for_upstream, send_with_retry

logger = logging.getLogger(__name__)


class NominatimClient:
    """Client for the Nominatim search API."""

    def __init__(self, base_url: str | None = None):
        self.base_url = base_url or get_settings().nominatim_url

    async def search(self, query: str, limit: int = 1) -> list[dict[str, Any]]:
        """
        Search for places matching a free-form query.

        Args:
            query: City name or address
            limit: Maximum results (1-40)

        Returns:
            Raw Nominatim jsonv2 results, possibly empty
        """
        params = {
            "q": query,
            "format": "jsonv2",
            "limit": limit,
            "addressdetails": 1,
        }
        headers = {"Accept-Language": "ko,en"}

        async with create_http_client(headers=headers) as client:
            response = await send_with_retry(client, "GET", self.base_url, params=params)
            raise_for_upstream(response, "Nominatim")
            results = response.json()

        return results or []


def get_client() -> NominatimClient:
    """Get a Nominatim client using the configured endpoint."""
    return NominatimClient()
