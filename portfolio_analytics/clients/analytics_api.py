"""Analytics backend HTTP client."""
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import ApiConfig

logger = logging.getLogger(__name__)


class AnalyticsApiClient:
    """Fetch raw portfolio, sentiment, regime and yield payloads.

    Failures are logged and reported as None; the analytics layer degrades
    missing payloads to neutral defaults.
    """

    def __init__(self, config: ApiConfig) -> None:
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout
        self.regime_history_limit = config.regime_history_limit

    async def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(connector=connector, timeout=timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error("GET %s failed: HTTP %s", path, response.status)
                        return None
                    return await response.json()
        except Exception as e:
            logger.error("GET %s failed: %s", path, e)
            return None

    async def fetch_landing(self, user_id: str) -> dict[str, Any] | None:
        return await self._get_json(f"/api/v1/landing-page/portfolio/{user_id}")

    async def fetch_sentiment(self) -> dict[str, Any] | None:
        return await self._get_json("/api/v2/market/sentiment")

    async def fetch_regime_history(self) -> Any:
        return await self._get_json(
            f"/api/v2/market/regime/history?limit={self.regime_history_limit}"
        )

    async def fetch_yield_summary(self, user_id: str) -> dict[str, Any] | None:
        return await self._get_json(f"/api/v2/analytics/{user_id}/yield/returns/summary")
