"""
CoinGecko Source - Primary market listing, price history and OHLC provider.

API Documentation: https://www.coingecko.com/en/api/documentation
Free tier: ~30 calls/minute, no API key required.

The same source doubles as the mirror variants: when constructed with a CORS
relay prefix, every request is wrapped as ``<relay><url-encoded target>``.
"""

from typing import Any, Optional
from urllib.parse import quote, urlparse

import httpx

from cryptoscope.adapters.sources.base import (
    HttpSource,
    as_float,
    as_optional_float,
    as_optional_int,
)
from cryptoscope.domain.entities.coin import Coin, CoinListRequest
from cryptoscope.domain.entities.market_data import OHLCCandle, PriceHistory, PricePoint
from cryptoscope.domain.entities.result import Err, Ok, Result
from cryptoscope.domain.errors import ParseError


SOURCE_NAME = "CoinGecko API"


def parse_markets(raw: Any, source: str = SOURCE_NAME) -> Result[list[Coin]]:
    """
    Convert a ``/coins/markets`` payload to canonical coins.

    Entries without an id or without a positive price are dropped.
    """
    if not isinstance(raw, list):
        return Err(ParseError(source, "Expected a list of market entries"))

    coins: list[Coin] = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        price = as_float(item.get("current_price"))
        if price <= 0:
            continue

        sparkline_data = item.get("sparkline_in_7d")
        sparkline = sparkline_data.get("price") if isinstance(sparkline_data, dict) else None
        if not isinstance(sparkline, list):
            sparkline = []
        coins.append(
            Coin(
                id=str(item["id"]),
                symbol=str(item.get("symbol", "")).lower(),
                name=str(item.get("name", "")),
                image=item.get("image") or "",
                current_price=price,
                market_cap=as_float(item.get("market_cap")),
                market_cap_rank=as_optional_int(item.get("market_cap_rank")),
                total_volume=as_float(item.get("total_volume")),
                high_24h=as_float(item.get("high_24h")),
                low_24h=as_float(item.get("low_24h")),
                price_change_24h=as_float(item.get("price_change_24h")),
                price_change_percentage_24h=as_float(item.get("price_change_percentage_24h")),
                price_change_percentage_7d=as_optional_float(
                    item.get("price_change_percentage_7d_in_currency")
                ),
                price_change_percentage_30d=as_optional_float(
                    item.get("price_change_percentage_30d_in_currency")
                ),
                circulating_supply=as_float(item.get("circulating_supply")),
                total_supply=as_optional_float(item.get("total_supply")),
                max_supply=as_optional_float(item.get("max_supply")),
                ath=as_float(item.get("ath")),
                ath_date=item.get("ath_date"),
                atl=as_float(item.get("atl")),
                atl_date=item.get("atl_date"),
                last_updated=item.get("last_updated"),
                sparkline=tuple(as_float(p) for p in sparkline if p is not None),
                source=source,
            )
        )
    if raw and not coins:
        return Err(ParseError(source, "No usable market entries"))
    return Ok(coins)


def parse_market_chart(raw: Any, coin_id: str, source: str = SOURCE_NAME) -> Result[PriceHistory]:
    """Convert a ``/coins/{id}/market_chart`` payload (``prices: [[ts, price], ...]``)."""
    if not isinstance(raw, dict) or not isinstance(raw.get("prices"), list):
        return Err(ParseError(source, f"Missing prices for {coin_id}"))

    points: list[PricePoint] = []
    for entry in raw["prices"]:
        if not isinstance(entry, (list, tuple)) or len(entry) < 2 or entry[1] is None:
            continue
        timestamp = as_optional_int(entry[0])
        if timestamp is None:
            continue
        points.append(PricePoint(timestamp=timestamp, price=as_float(entry[1])))
    if not points:
        return Err(ParseError(source, f"No usable prices for {coin_id}"))
    points.sort(key=lambda p: p.timestamp)
    return Ok(PriceHistory(coin_id=coin_id, points=tuple(points)))


def parse_ohlc(raw: Any, source: str = SOURCE_NAME) -> Result[list[OHLCCandle]]:
    """Convert a ``/coins/{id}/ohlc`` payload (``[[ts, o, h, l, c], ...]``)."""
    if not isinstance(raw, list):
        return Err(ParseError(source, "Expected a list of OHLC rows"))

    candles = [
        OHLCCandle(
            timestamp=as_optional_int(row[0]),
            open_price=as_float(row[1]),
            high_price=as_float(row[2]),
            low_price=as_float(row[3]),
            close_price=as_float(row[4]),
        )
        for row in raw
        if isinstance(row, (list, tuple)) and len(row) >= 5 and as_optional_int(row[0]) is not None
    ]
    if not candles:
        return Err(ParseError(source, "No usable OHLC rows"))
    candles.sort(key=lambda c: c.timestamp)
    return Ok(candles)


class CoinGeckoSource(HttpSource):
    """
    CoinGecko market data source.

    With ``relay`` set, requests go through a generic CORS relay instead of
    hitting CoinGecko directly; the payload format is unchanged.
    """

    name = SOURCE_NAME

    def __init__(
        self,
        base_url: str = "https://api.coingecko.com/api/v3",
        relay: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, timeout=timeout, client=client)
        self.relay = relay
        if relay:
            host = urlparse(relay).hostname or relay
            self.name = f"{SOURCE_NAME} (Proxy: {host})"

    def _target(self, path: str, params: dict[str, Any]) -> tuple[str, Optional[dict[str, Any]]]:
        """Build the URL and params to request, wrapping through the relay if any."""
        url = f"{self.base_url}{path}"
        if not self.relay:
            return url, params
        full_url = str(httpx.URL(url, params=params))
        return f"{self.relay}{quote(full_url, safe='')}", None

    async def fetch_coins(self, request: CoinListRequest) -> Result[list[Coin]]:
        """Fetch one page of ``/coins/markets``."""
        url, params = self._target(
            "/coins/markets",
            {
                "vs_currency": request.vs_currency,
                "order": request.order,
                "per_page": request.per_page,
                "page": request.page,
                "sparkline": str(request.sparkline).lower(),
                "price_change_percentage": "24h,7d,30d",
            },
        )
        return await self._fetch(url, params, lambda raw: parse_markets(raw, self.name))

    async def fetch_price_history(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 7,
        symbol: Optional[str] = None,
    ) -> Result[PriceHistory]:
        """Fetch ``/coins/{id}/market_chart``."""
        params: dict[str, Any] = {"vs_currency": vs_currency, "days": days}
        # Free tier granularity is automatic (hourly for 2-90 days); only force daily beyond that
        if days > 90:
            params["interval"] = "daily"
        url, params_or_none = self._target(f"/coins/{coin_id}/market_chart", params)
        return await self._fetch(
            url, params_or_none, lambda raw: parse_market_chart(raw, coin_id, self.name)
        )

    async def fetch_ohlc(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 7,
        symbol: Optional[str] = None,
    ) -> Result[list[OHLCCandle]]:
        """Fetch ``/coins/{id}/ohlc``."""
        url, params = self._target(
            f"/coins/{coin_id}/ohlc",
            {"vs_currency": vs_currency, "days": days},
        )
        return await self._fetch(url, params, lambda raw: parse_ohlc(raw, self.name))
