"""
Market Data Source Port - Interface every upstream market data provider implements.
"""

from abc import ABC, abstractmethod
from typing import Optional

from cryptoscope.domain.entities.coin import Coin, CoinListRequest
from cryptoscope.domain.entities.market_data import OHLCCandle, PriceHistory
from cryptoscope.domain.entities.result import Err, Result
from cryptoscope.domain.errors import UnsupportedRequestError


class MarketDataSourcePort(ABC):
    """
    Port interface for a single market data source.

    Expected failures (network, non-2xx, malformed payload) are returned as
    ``Err`` rather than raised, so the failover orchestrator can move on to
    the next source.

    Implementations:
        - CoinGeckoSource (direct and via CORS relays)
        - CoinPaprikaSource
        - CryptoCompareSource
        - BitstampSource
    """

    name: str = "unknown"

    @abstractmethod
    async def fetch_coins(self, request: CoinListRequest) -> Result[list[Coin]]:
        """
        Fetch one page of the market listing as canonical coins.

        Args:
            request: Listing request (currency, order, page, page size)

        Returns:
            Ok with coins, or Err with the source error.
        """
        ...

    async def fetch_price_history(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 7,
        symbol: Optional[str] = None,
    ) -> Result[PriceHistory]:
        """
        Fetch a chronological price series.

        Args:
            coin_id: Canonical coin id (CoinGecko style, e.g. "bitcoin")
            vs_currency: Quote currency
            days: Lookback window in days
            symbol: Ticker symbol, used by sources keyed by symbol rather than id

        Returns:
            Ok with the history, or Err. Sources without history support
            return UnsupportedRequestError.
        """
        return Err(UnsupportedRequestError(self.name, "price history not supported"))

    async def fetch_ohlc(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 7,
        symbol: Optional[str] = None,
    ) -> Result[list[OHLCCandle]]:
        """
        Fetch OHLC candles.

        Returns:
            Ok with candles oldest first, or Err. Sources without OHLC support
            return UnsupportedRequestError.
        """
        return Err(UnsupportedRequestError(self.name, "OHLC not supported"))

    async def close(self) -> None:
        """Release network resources."""
        return None
