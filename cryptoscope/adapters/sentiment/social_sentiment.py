"""
Social Sentiment Service - Cross-platform sentiment for a single coin.

Platforms:
- Fear & Greed Index (alternative.me): market-wide mood, 0-100
- Reddit r/CryptoCurrency search: average post score of recent mentions
- CoinGecko community votes: share of "bullish" votes on the coin page

All platforms are queried concurrently. A platform that fails contributes
its neutral default instead of failing the whole reading.
"""

import asyncio
from typing import Any, Optional

import httpx

from cryptoscope.domain.entities.coin import Coin
from cryptoscope.domain.entities.sentiment import PlatformSentiment, SocialSentiment
from cryptoscope.domain.ports.analysis_port import SentimentPort
from cryptoscope.infrastructure.logging import get_logger

logger = get_logger(__name__)

FEAR_GREED = "fear_greed"
REDDIT = "reddit"
COINGECKO_COMMUNITY = "coingecko_community"

PLATFORMS = (FEAR_GREED, REDDIT, COINGECKO_COMMUNITY)

DEFAULT_SCORE = 50.0
DEFAULT_LABEL = "Neutral"

REDDIT_POST_LIMIT = 25


def label_for(score: float) -> str:
    """Classification label for a 0-100 score."""
    if score >= 75:
        return "Extreme Greed"
    if score >= 55:
        return "Greed"
    if score > 45:
        return "Neutral"
    if score > 25:
        return "Fear"
    return "Extreme Fear"


def default_reading(platform: str) -> PlatformSentiment:
    return PlatformSentiment(
        platform=platform,
        score=DEFAULT_SCORE,
        label=DEFAULT_LABEL,
        is_default=True,
    )


def parse_fear_greed(raw: Any) -> PlatformSentiment:
    """Parse an alternative.me ``/fng/`` payload."""
    entries = raw.get("data") if isinstance(raw, dict) else None
    if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
        raise ValueError("No Fear & Greed data in response")
    entry = entries[0]
    value = float(entry.get("value", DEFAULT_SCORE))
    return PlatformSentiment(
        platform=FEAR_GREED,
        score=value,
        label=entry.get("value_classification") or label_for(value),
    )


def parse_reddit_search(raw: Any) -> PlatformSentiment:
    """
    Parse a Reddit search listing.

    The average post score maps to a -100..100 sentiment (100 points = +50),
    which is then shifted onto the 0-100 scale.
    """
    listing = raw.get("data") if isinstance(raw, dict) else None
    children = listing.get("children") if isinstance(listing, dict) else None
    if not isinstance(children, list):
        children = []
    posts = [
        child["data"]
        for child in children
        if isinstance(child, dict) and isinstance(child.get("data"), dict)
    ]
    if not posts:
        raise ValueError("No Reddit posts found")

    avg_score = sum(float(post.get("score") or 0) for post in posts) / len(posts)
    sentiment = max(-100.0, min(100.0, avg_score / 100 * 50))
    score = 50 + sentiment / 2
    return PlatformSentiment(platform=REDDIT, score=score, label=label_for(score))


def parse_community_votes(raw: Any) -> PlatformSentiment:
    """Parse ``sentiment_votes_up_percentage`` from CoinGecko coin details."""
    up = raw.get("sentiment_votes_up_percentage") if isinstance(raw, dict) else None
    if up is None:
        raise ValueError("No community vote data")
    score = float(up)
    return PlatformSentiment(platform=COINGECKO_COMMUNITY, score=score, label=label_for(score))


class SocialSentimentService(SentimentPort):
    """
    Concurrent fan-out over sentiment platforms.

    Usage:
        service = SocialSentimentService()
        sentiment = await service.get_sentiment(coin)
        print(sentiment.overall_score, sentiment.failed_platforms)
    """

    TIMEOUT = 10.0

    def __init__(
        self,
        fear_greed_url: str = "https://api.alternative.me/fng/",
        reddit_search_url: str = "https://www.reddit.com/r/CryptoCurrency/search.json",
        coingecko_base_url: str = "https://api.coingecko.com/api/v3",
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.fear_greed_url = fear_greed_url
        self.reddit_search_url = reddit_search_url
        self.coingecko_base_url = coingecko_base_url.rstrip("/")
        self._timeout = timeout if timeout is not None else self.TIMEOUT
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": "cryptoscope/0.1"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        client = await self._get_client()
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def fetch_fear_greed(self) -> PlatformSentiment:
        return parse_fear_greed(await self._get_json(self.fear_greed_url, {"limit": 1}))

    async def fetch_reddit(self, coin: Coin) -> PlatformSentiment:
        raw = await self._get_json(
            self.reddit_search_url,
            {
                "q": coin.display_symbol,
                "restrict_sr": "1",
                "sort": "new",
                "limit": REDDIT_POST_LIMIT,
            },
        )
        return parse_reddit_search(raw)

    async def fetch_community_votes(self, coin: Coin) -> PlatformSentiment:
        raw = await self._get_json(
            f"{self.coingecko_base_url}/coins/{coin.id}",
            {
                "localization": "false",
                "tickers": "false",
                "market_data": "false",
                "community_data": "true",
                "developer_data": "false",
            },
        )
        return parse_community_votes(raw)

    async def get_sentiment(self, coin: Coin) -> SocialSentiment:
        """
        Fetch sentiment for a coin from every platform.

        Args:
            coin: Coin to look up

        Returns:
            SocialSentiment with one reading per platform. Failed platforms
            carry the neutral default and ``is_default=True``.
        """
        results = await asyncio.gather(
            self.fetch_fear_greed(),
            self.fetch_reddit(coin),
            self.fetch_community_votes(coin),
            return_exceptions=True,
        )

        readings: list[PlatformSentiment] = []
        for platform, result in zip(PLATFORMS, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Sentiment platform failed, using default",
                    platform=platform,
                    coin_id=coin.id,
                    error=repr(result),
                )
                readings.append(default_reading(platform))
            elif isinstance(result, BaseException):
                raise result
            else:
                readings.append(result)

        sentiment = SocialSentiment(coin_id=coin.id, platforms=tuple(readings))
        logger.debug(
            "Fetched social sentiment",
            coin_id=coin.id,
            overall_score=round(sentiment.overall_score, 1),
            failed=sentiment.failed_platforms,
        )
        return sentiment
