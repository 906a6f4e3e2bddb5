"""
CryptoCompare Source - Alternate listing and price history provider.

API Documentation: https://min-api.cryptocompare.com/documentation
Listing rows are keyed by quote currency under ``RAW``; coins are identified
by ticker symbol, so canonical ids from this source are lowercase symbols.
"""

from typing import Any, Optional

import httpx

from cryptoscope.adapters.sources.base import HttpSource, as_float, as_optional_int
from cryptoscope.domain.entities.coin import Coin, CoinListRequest
from cryptoscope.domain.entities.market_data import PriceHistory, PricePoint
from cryptoscope.domain.entities.result import Err, Ok, Result
from cryptoscope.domain.errors import ParseError

SOURCE_NAME = "CryptoCompare API"
IMAGE_BASE_URL = "https://www.cryptocompare.com"

# Use hourly candles up to a week, daily beyond
HOURLY_MAX_DAYS = 7
MAX_HISTORY_POINTS = 2000


def _error_message(raw: dict) -> Optional[str]:
    if raw.get("Response") == "Error":
        return str(raw.get("Message") or "Unknown CryptoCompare error")
    return None


def parse_top_by_market_cap(
    raw: Any,
    request: CoinListRequest,
    source: str = SOURCE_NAME,
) -> Result[list[Coin]]:
    """
    Convert a ``/top/mktcapfull`` payload to canonical coins.

    Approximations: rank is the position in the response, ATH falls back to
    the current price and total supply equals circulating supply.
    """
    if not isinstance(raw, dict):
        return Err(ParseError(source, "Expected an object"))
    error = _error_message(raw)
    if error:
        return Err(ParseError(source, error))
    rows = raw.get("Data")
    if not isinstance(rows, list):
        return Err(ParseError(source, "Missing Data list"))

    quote_key = request.vs_currency.upper()
    coins: list[Coin] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            continue
        info = row.get("CoinInfo")
        if not isinstance(info, dict):
            info = {}
        quotes = row.get("RAW")
        quote = quotes.get(quote_key) if isinstance(quotes, dict) else None
        if not isinstance(quote, dict):
            continue
        symbol = str(info.get("Name") or quote.get("FROMSYMBOL") or "")
        price = as_float(quote.get("PRICE"))
        if not symbol or price <= 0:
            continue

        image_path = info.get("ImageUrl")
        supply = as_float(quote.get("SUPPLY"))
        coins.append(
            Coin(
                id=symbol.lower(),
                symbol=symbol.lower(),
                name=str(info.get("FullName") or symbol),
                image=f"{IMAGE_BASE_URL}{image_path}" if image_path else "",
                current_price=price,
                market_cap=as_float(quote.get("MKTCAP")),
                market_cap_rank=request.offset + index + 1,
                total_volume=as_float(quote.get("TOTALVOLUME24HTO")),
                high_24h=as_float(quote.get("HIGH24HOUR")),
                low_24h=as_float(quote.get("LOW24HOUR")),
                price_change_24h=as_float(quote.get("CHANGE24HOUR")),
                price_change_percentage_24h=as_float(quote.get("CHANGEPCT24HOUR")),
                circulating_supply=supply,
                total_supply=supply or None,
                ath=price,
                source=source,
            )
        )
    if rows and not coins:
        return Err(ParseError(source, "No usable rows in listing"))
    return Ok(coins)


def parse_histo(raw: Any, coin_id: str, source: str = SOURCE_NAME) -> Result[PriceHistory]:
    """Convert a ``/v2/histohour`` or ``/v2/histoday`` payload (close prices)."""
    if not isinstance(raw, dict):
        return Err(ParseError(source, "Expected an object"))
    error = _error_message(raw)
    if error:
        return Err(ParseError(source, error))
    data = raw.get("Data")
    rows = data.get("Data") if isinstance(data, dict) else None
    if not isinstance(rows, list):
        return Err(ParseError(source, f"Missing history rows for {coin_id}"))

    points = [
        PricePoint(timestamp=as_optional_int(row.get("time")) * 1000, price=as_float(row.get("close")))
        for row in rows
        if isinstance(row, dict) and as_optional_int(row.get("time")) is not None
    ]
    if not points:
        return Err(ParseError(source, f"No usable prices for {coin_id}"))
    points.sort(key=lambda p: p.timestamp)
    return Ok(PriceHistory(coin_id=coin_id, points=tuple(points)))


class CryptoCompareSource(HttpSource):
    """CryptoCompare market data source (listing and price history)."""

    name = SOURCE_NAME

    def __init__(
        self,
        base_url: str = "https://min-api.cryptocompare.com/data",
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, timeout=timeout, client=client)

    async def fetch_coins(self, request: CoinListRequest) -> Result[list[Coin]]:
        """Fetch ``/top/mktcapfull`` (pages are zero-based upstream)."""
        return await self._fetch(
            f"{self.base_url}/top/mktcapfull",
            {
                "limit": request.per_page,
                "page": request.page - 1,
                "tsym": request.vs_currency.upper(),
            },
            lambda raw: parse_top_by_market_cap(raw, request, self.name),
        )

    async def fetch_price_history(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 7,
        symbol: Optional[str] = None,
    ) -> Result[PriceHistory]:
        """Fetch hourly closes for short windows, daily closes otherwise."""
        if days <= HOURLY_MAX_DAYS:
            endpoint = "/v2/histohour"
            limit = min(max(days, 1) * 24, MAX_HISTORY_POINTS)
        else:
            endpoint = "/v2/histoday"
            limit = min(days, MAX_HISTORY_POINTS)

        return await self._fetch(
            f"{self.base_url}{endpoint}",
            {
                "fsym": (symbol or coin_id).upper(),
                "tsym": vs_currency.upper(),
                "limit": limit,
            },
            lambda raw: parse_histo(raw, coin_id, self.name),
        )
