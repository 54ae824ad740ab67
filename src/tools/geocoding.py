"""Geocoding lookup against a Nominatim-compatible HTTP API."""

from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from src.agents.errors import DomainToolError
from src.agents.tool import Tool
from src.utils.config import get_settings
from src.utils.logger import get_logger

logger = get_logger()


class GeocodeArgs(BaseModel):
    address: str = Field(description="Full postal address to verify, as written by the customer")


class GeocodingTool(Tool):
    """Verifies an address and resolves it to coordinates."""

    name = "geocode_address"
    description = (
        "Verify that a postal address exists and get its normalized form and "
        "coordinates. Use it before confirming any address change."
    )
    args_model = GeocodeArgs

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize geocoding tool.

        Args:
            base_url: Geocoding API base URL (reads from settings if None)
            user_agent: User-Agent header sent to the API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.geocoding_base_url).rstrip("/")
        self.user_agent = user_agent or settings.geocoding_user_agent
        self.timeout = timeout or settings.geocoding_timeout_seconds
        self._transport = transport

    async def run(self, args: GeocodeArgs) -> Dict[str, Any]:
        query = args.address.strip()
        if not query:
            raise DomainToolError("Address is empty")

        logger.info(f"Geocoding address: '{query[:50]}'")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            ) as client:
                response = await client.get(
                    f"{self.base_url}/search",
                    params={"q": query, "format": "jsonv2", "limit": 1},
                )
                response.raise_for_status()
                results = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Geocoding request failed: {e}")
            raise DomainToolError(f"Geocoding service unavailable: {e}") from e
        except ValueError as e:
            raise DomainToolError(f"Invalid geocoding response: {e}") from e

        if not results:
            logger.info("Geocoding found no match")
            return {"found": False, "query": query}

        best = results[0]
        return {
            "found": True,
            "query": query,
            "formatted_address": best.get("display_name", ""),
            "latitude": float(best["lat"]),
            "longitude": float(best["lon"]),
        }
