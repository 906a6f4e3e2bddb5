"""
CoinGecko Category Lookup - Fetches category labels for a single coin.

Uses ``/coins/{id}`` with every optional section disabled. Results are cached
in memory per coin id for a configurable TTL; failed lookups are not cached.
"""

import time
from typing import Any, Optional

import httpx

from cryptoscope.domain.ports.analysis_port import CategoryPort
from cryptoscope.infrastructure.logging import get_logger

logger = get_logger(__name__)

DETAIL_PARAMS = {
    "localization": "false",
    "tickers": "false",
    "market_data": "false",
    "community_data": "false",
    "developer_data": "false",
}


class CoinGeckoCategoryLookup(CategoryPort):
    """
    Category labels from CoinGecko coin details.

    A failed lookup returns an empty list; category metadata is advisory and
    the filter still applies its symbol, name and peg rules without it.
    """

    TIMEOUT = 15.0

    def __init__(
        self,
        base_url: str = "https://api.coingecko.com/api/v3",
        cache_ttl_seconds: float = 86400,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache_ttl_seconds = cache_ttl_seconds
        self._timeout = timeout if timeout is not None else self.TIMEOUT
        self._client = client
        self._cache: dict[str, tuple[float, list[str]]] = {}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def clear_cache(self) -> None:
        self._cache.clear()

    def _cached(self, coin_id: str) -> Optional[list[str]]:
        entry = self._cache.get(coin_id)
        if entry is None:
            return None
        cached_at, categories = entry
        if time.monotonic() - cached_at >= self.cache_ttl_seconds:
            del self._cache[coin_id]
            return None
        return categories

    async def get_categories(self, coin_id: str) -> list[str]:
        """
        Fetch category labels for a coin.

        Args:
            coin_id: CoinGecko coin id

        Returns:
            Category labels, empty if the lookup failed.
        """
        cached = self._cached(coin_id)
        if cached is not None:
            return cached

        try:
            client = await self._get_client()
            response = await client.get(f"{self.base_url}/coins/{coin_id}", params=DETAIL_PARAMS)
            response.raise_for_status()
            data: Any = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Category lookup failed",
                coin_id=coin_id,
                status_code=e.response.status_code,
            )
            return []
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Category lookup failed", coin_id=coin_id, error=str(e))
            return []

        raw_categories = data.get("categories") if isinstance(data, dict) else None
        if not isinstance(raw_categories, list):
            raw_categories = []
        categories = [str(c) for c in raw_categories if c]
        self._cache[coin_id] = (time.monotonic(), categories)
        return categories

    async def get_many(self, coin_ids: list[str]) -> dict[str, list[str]]:
        """Look up categories for several coins, one request at a time."""
        results: dict[str, list[str]] = {}
        for coin_id in coin_ids:
            results[coin_id] = await self.get_categories(coin_id)
        return results
