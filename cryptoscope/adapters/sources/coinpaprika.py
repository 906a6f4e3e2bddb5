"""
CoinPaprika Source - Alternate listing provider with quote-keyed ticker objects.

API Documentation: https://api.coinpaprika.com/
Free tier, no API key required. ``/tickers`` returns the whole listing in one
response, so pagination is applied client-side.
"""

from typing import Any, Optional

import httpx

from cryptoscope.adapters.sources.base import (
    HttpSource,
    as_float,
    as_optional_float,
    as_optional_int,
)
from cryptoscope.domain.entities.coin import Coin, CoinListRequest
from cryptoscope.domain.entities.result import Err, Ok, Result
from cryptoscope.domain.errors import ParseError

SOURCE_NAME = "CoinPaprika API"

# CoinPaprika has no 24h high/low; derive an approximate band around the last price
HIGH_LOW_BAND = 0.05


def canonical_id(paprika_id: str, symbol: str) -> str:
    """
    Strip the ticker prefix from a CoinPaprika id ("btc-bitcoin" -> "bitcoin").

    The remainder matches CoinGecko ids for most large caps, which keeps
    downstream history lookups working when this source wins.
    """
    prefix = f"{symbol.lower()}-"
    if symbol and paprika_id.startswith(prefix) and len(paprika_id) > len(prefix):
        return paprika_id[len(prefix):]
    return paprika_id


def parse_tickers(
    raw: Any,
    request: CoinListRequest,
    source: str = SOURCE_NAME,
) -> Result[list[Coin]]:
    """
    Convert a ``/tickers`` payload to canonical coins for the requested page.

    Approximations: ``high_24h``/``low_24h`` are last price +/- 5%, and
    ``price_change_24h`` is derived from the percentage change.
    """
    if not isinstance(raw, list):
        return Err(ParseError(source, "Expected a list of tickers"))

    quote_key = request.vs_currency.upper()
    page = raw[request.offset:request.offset + request.per_page]

    coins: list[Coin] = []
    for item in page:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        quotes = item.get("quotes")
        quote = quotes.get(quote_key) if isinstance(quotes, dict) else None
        if not isinstance(quote, dict):
            continue
        price = as_float(quote.get("price"))
        if price <= 0:
            continue

        symbol = str(item.get("symbol", ""))
        change_pct = as_float(quote.get("percent_change_24h"))
        paprika_id = str(item["id"])
        coins.append(
            Coin(
                id=canonical_id(paprika_id, symbol),
                symbol=symbol.lower(),
                name=str(item.get("name", "")),
                image=f"https://static.coinpaprika.com/coin/{paprika_id}/logo.png",
                current_price=price,
                market_cap=as_float(quote.get("market_cap")),
                market_cap_rank=as_optional_int(item.get("rank")),
                total_volume=as_float(quote.get("volume_24h")),
                high_24h=price * (1 + HIGH_LOW_BAND),
                low_24h=price * (1 - HIGH_LOW_BAND),
                price_change_24h=price * change_pct / 100,
                price_change_percentage_24h=change_pct,
                price_change_percentage_7d=as_optional_float(quote.get("percent_change_7d")),
                price_change_percentage_30d=as_optional_float(quote.get("percent_change_30d")),
                circulating_supply=as_float(item.get("circulating_supply")),
                total_supply=as_optional_float(item.get("total_supply")),
                max_supply=as_optional_float(item.get("max_supply")) or None,
                ath=as_float(quote.get("ath_price"), default=price),
                ath_date=quote.get("ath_date"),
                last_updated=item.get("last_updated"),
                source=source,
            )
        )
    if page and not coins:
        return Err(ParseError(source, "No usable tickers on requested page"))
    return Ok(coins)


class CoinPaprikaSource(HttpSource):
    """CoinPaprika market data source (listing only)."""

    name = SOURCE_NAME

    def __init__(
        self,
        base_url: str = "https://api.coinpaprika.com/v1",
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, timeout=timeout, client=client)

    async def fetch_coins(self, request: CoinListRequest) -> Result[list[Coin]]:
        """Fetch ``/tickers`` and slice out the requested page."""
        return await self._fetch(
            f"{self.base_url}/tickers",
            {"quotes": request.vs_currency.upper()},
            lambda raw: parse_tickers(raw, request, self.name),
        )
