# store_traffic/client/api.py
"""
HTTP client for the traffic query endpoints.
Every call degrades to an empty result on failure; the dashboard never sees an exception.
"""

from typing import Optional
import httpx
from store_traffic.config import settings
from store_traffic.schemas.traffic import HourlyTrafficOut, TrafficEventOut
from store_traffic.utils.logger import get_logger

logger = get_logger(__name__)


class TrafficApiClient:
    def __init__(self, base_url: str = None, timeout: float = 10.0,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self):
        await self._client.aclose()

    async def _get_data(self, path: str, params: dict = None) -> list:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.get(url, params=params)
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching {url}: {e}")
            return []

        if isinstance(body, dict) and body.get("success") and isinstance(body.get("data"), list):
            return body["data"]
        logger.warning(f"Unsuccessful response from {url}: HTTP {response.status_code}")
        return []

    async def fetch_hourly(self) -> list[HourlyTrafficOut]:
        rows = await self._get_data("/traffic/hourly")
        try:
            return [HourlyTrafficOut.model_validate(row) for row in rows]
        except ValueError as e:
            logger.error(f"Malformed hourly traffic payload: {e}")
            return []

    async def fetch_recent(self, limit: int = 10) -> list[TrafficEventOut]:
        rows = await self._get_data("/traffic/recent", params={"limit": limit})
        try:
            return [TrafficEventOut.model_validate(row) for row in rows]
        except ValueError as e:
            logger.error(f"Malformed recent traffic payload: {e}")
            return []

    async def check_status(self) -> bool:
        try:
            response = await self._client.get(f"{self.base_url}/health")
        except httpx.HTTPError as e:
            logger.error(f"API status check failed: {e}")
            return False
        return response.status_code == 200
