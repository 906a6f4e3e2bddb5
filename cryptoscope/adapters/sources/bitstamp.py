"""
Bitstamp Source - Exchange tickers and OHLC for a fixed set of USD pairs.

API Documentation: https://www.bitstamp.net/api/
Bitstamp has no listing endpoint; one ticker request is issued per pair.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from cryptoscope.adapters.sources.base import HttpSource, as_float
from cryptoscope.domain.entities.coin import Coin, CoinListRequest
from cryptoscope.domain.entities.market_data import OHLCCandle, PriceHistory, PricePoint
from cryptoscope.domain.entities.result import Err, Ok, Result
from cryptoscope.domain.errors import ParseError, SourceError, UnsupportedRequestError
from cryptoscope.infrastructure.logging import get_logger

logger = get_logger(__name__)

SOURCE_NAME = "Bitstamp API"

BITSTAMP_PAIRS = [
    "btcusd", "ethusd", "ltcusd", "xrpusd", "adausd", "xlmusd", "linkusd", "omgusd",
    "batusd", "umausd", "daiusd", "kncusd", "mkrusd", "zrxusd", "gusdusd", "algousd",
    "audiousd", "crvusd", "snxusd", "uniusd", "yfiusd", "compusd", "grtusd", "aaveusd",
    "sushiusd", "chzusd", "enjusd", "hbarusd", "alphausd", "axsusd", "sandusd", "manausd",
    "maticusd", "ftmusd", "sklusd", "storjusd", "sxpusd", "rlyusd", "fetusd", "rgteusd",
]

HOURLY_STEP = 3600
DAILY_STEP = 86400
HOURLY_MAX_DAYS = 7
MAX_OHLC_LIMIT = 1000


def parse_tickers(
    tickers: list[tuple[str, Any]],
    request: CoinListRequest,
    source: str = SOURCE_NAME,
) -> Result[list[Coin]]:
    """
    Convert ``(pair, /ticker payload)`` tuples to canonical coins.

    Approximations: market cap is ``last x volume``, rank is the pair's
    position in the pair list, ATH/ATL are the 24h high/low, and supply is
    unknown.
    """
    coins: list[Coin] = []
    for position, (pair, raw) in enumerate(tickers):
        if not isinstance(raw, dict):
            continue
        last = as_float(raw.get("last"))
        if last <= 0:
            continue

        open_price = as_float(raw.get("open"))
        volume = as_float(raw.get("volume"))
        high = as_float(raw.get("high"), default=last)
        low = as_float(raw.get("low"), default=last)
        change = last - open_price if open_price > 0 else 0.0
        change_pct = change / open_price * 100 if open_price > 0 else 0.0
        symbol = pair[: -len(request.vs_currency)] if pair.endswith(request.vs_currency) else pair

        timestamp = raw.get("timestamp")
        last_updated = (
            datetime.fromtimestamp(int(timestamp), tz=timezone.utc).isoformat()
            if timestamp and str(timestamp).isdigit()
            else None
        )
        coins.append(
            Coin(
                id=symbol,
                symbol=symbol,
                name=symbol.upper(),
                current_price=last,
                market_cap=last * volume,
                market_cap_rank=request.offset + position + 1,
                total_volume=volume,
                high_24h=high,
                low_24h=low,
                price_change_24h=change,
                price_change_percentage_24h=change_pct,
                ath=high,
                atl=low,
                last_updated=last_updated,
                source=source,
            )
        )
    return Ok(coins)


def parse_ohlc(raw: Any, pair: str, source: str = SOURCE_NAME) -> Result[list[OHLCCandle]]:
    """Convert an ``/ohlc/{pair}/`` payload."""
    data = raw.get("data") if isinstance(raw, dict) else None
    rows = data.get("ohlc") if isinstance(data, dict) else None
    if not isinstance(rows, list):
        return Err(ParseError(source, f"Missing OHLC rows for {pair}"))

    candles = [
        OHLCCandle(
            timestamp=int(row["timestamp"]) * 1000,
            open_price=as_float(row.get("open")),
            high_price=as_float(row.get("high")),
            low_price=as_float(row.get("low")),
            close_price=as_float(row.get("close")),
        )
        for row in rows
        if isinstance(row, dict) and str(row.get("timestamp", "")).isdigit()
    ]
    if not candles:
        return Err(ParseError(source, f"No usable OHLC rows for {pair}"))
    candles.sort(key=lambda c: c.timestamp)
    return Ok(candles)


class BitstampSource(HttpSource):
    """Bitstamp market data source (listing, price history from OHLC closes, OHLC)."""

    name = SOURCE_NAME

    def __init__(
        self,
        base_url: str = "https://www.bitstamp.net/api/v2",
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        pairs: Optional[list[str]] = None,
    ):
        super().__init__(base_url, timeout=timeout, client=client)
        self.pairs = pairs if pairs is not None else list(BITSTAMP_PAIRS)

    def _pair(self, coin_id: str, vs_currency: str, symbol: Optional[str]) -> str:
        return f"{(symbol or coin_id).lower()}{vs_currency.lower()}"

    async def _fetch_ticker(self, pair: str) -> tuple[str, Any]:
        return pair, await self._get_json(f"{self.base_url}/ticker/{pair}/")

    async def fetch_coins(self, request: CoinListRequest) -> Result[list[Coin]]:
        """
        Fetch tickers for the requested slice of the pair list.

        Individual pair failures are skipped; the source fails only when no
        ticker could be fetched.
        """
        pairs = [p for p in self.pairs if p.endswith(request.vs_currency.lower())]
        page = pairs[request.offset:request.offset + request.per_page]
        if not page:
            return Err(UnsupportedRequestError(self.name, "No pairs for requested page"))

        results = await asyncio.gather(
            *(self._fetch_ticker(pair) for pair in page),
            return_exceptions=True,
        )

        tickers: list[tuple[str, Any]] = []
        for pair, result in zip(page, results):
            if isinstance(result, SourceError):
                logger.warning("Bitstamp ticker failed", pair=pair, error=str(result))
                continue
            if isinstance(result, BaseException):
                raise result
            tickers.append(result)

        if not tickers:
            return Err(SourceError(self.name, "No valid Bitstamp tickers found"))
        return parse_tickers(tickers, request, self.name)

    async def fetch_ohlc(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 7,
        symbol: Optional[str] = None,
    ) -> Result[list[OHLCCandle]]:
        """Fetch ``/ohlc/{pair}/`` with hourly steps up to a week, daily beyond."""
        pair = self._pair(coin_id, vs_currency, symbol)
        if pair not in self.pairs:
            return Err(UnsupportedRequestError(self.name, f"Bitstamp doesn't support pair: {pair}"))

        if days <= HOURLY_MAX_DAYS:
            step, limit = HOURLY_STEP, max(days, 1) * 24
        else:
            step, limit = DAILY_STEP, days
        return await self._fetch(
            f"{self.base_url}/ohlc/{pair}/",
            {"step": step, "limit": min(limit, MAX_OHLC_LIMIT)},
            lambda raw: parse_ohlc(raw, pair, self.name),
        )

    async def fetch_price_history(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 7,
        symbol: Optional[str] = None,
    ) -> Result[PriceHistory]:
        """Derive a price history from OHLC close prices."""
        result = await self.fetch_ohlc(coin_id, vs_currency, days, symbol)
        if isinstance(result, Err):
            return result
        points = tuple(PricePoint(timestamp=c.timestamp, price=c.close_price) for c in result.value)
        return Ok(PriceHistory(coin_id=coin_id, points=points))
