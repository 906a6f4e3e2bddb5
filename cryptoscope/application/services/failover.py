"""
Failover Orchestrator - Ordered, sequential fallback across market data sources.

Each logical request (coin listing, price history, OHLC) walks the source
list in priority order and returns the first success. Sources are never
raced; a later source is only contacted after every earlier one failed.
"""

from typing import Any, Awaitable, Callable, Optional, TypeVar

from cryptoscope.domain.entities.coin import Coin, CoinListRequest
from cryptoscope.domain.entities.market_data import OHLCCandle, PriceHistory
from cryptoscope.domain.entities.result import Err, Result, SourceResult
from cryptoscope.domain.errors import AllSourcesFailedError, UnsupportedRequestError
from cryptoscope.domain.ports.market_data_port import MarketDataSourcePort
from cryptoscope.infrastructure.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

NO_SOURCE = "none"

LISTING = "coin listing"
PRICE_HISTORY = "price history"
OHLC = "ohlc"


class FailoverOrchestrator:
    """
    Owns the ordered source list and tracks which source last succeeded.

    Usage:
        orchestrator = FailoverOrchestrator(build_sources(settings))
        result = await orchestrator.fetch_coins(CoinListRequest(per_page=50))
        print(result.source, len(result.data))
    """

    def __init__(self, sources: list[MarketDataSourcePort]):
        """
        Initialize the orchestrator.

        Args:
            sources: Sources in priority order (first is preferred)
        """
        if not sources:
            raise ValueError("FailoverOrchestrator needs at least one source")
        self._sources = list(sources)
        self._current_source = NO_SOURCE

    @property
    def sources(self) -> list[MarketDataSourcePort]:
        return list(self._sources)

    @property
    def current_source(self) -> str:
        """Name of the most recent successful source, ``"none"`` before any success."""
        return self._current_source

    async def _run(
        self,
        request_kind: str,
        call: Callable[[MarketDataSourcePort], Awaitable[Result[T]]],
    ) -> SourceResult[T]:
        attempted: list[str] = []
        last_error: Optional[Exception] = None

        for position, source in enumerate(self._sources, start=1):
            attempted.append(source.name)
            try:
                result = await call(source)
            except Exception as e:
                last_error = e
                logger.warning(
                    "Source raised, trying next",
                    request=request_kind,
                    position=position,
                    source=source.name,
                    error=repr(e),
                )
                continue

            if isinstance(result, Err):
                last_error = result.error
                if isinstance(result.error, UnsupportedRequestError):
                    logger.debug(
                        "Source does not support request",
                        request=request_kind,
                        position=position,
                        source=source.name,
                    )
                else:
                    logger.warning(
                        "Source failed, trying next",
                        request=request_kind,
                        position=position,
                        source=source.name,
                        error=str(result.error),
                    )
                continue

            self._current_source = source.name
            if position > 1:
                logger.info(
                    "Fallback source succeeded",
                    request=request_kind,
                    position=position,
                    source=source.name,
                )
            else:
                logger.debug("Source succeeded", request=request_kind, source=source.name)
            return SourceResult(data=result.value, source=source.name, attempts=position)

        logger.error(
            "All sources failed",
            request=request_kind,
            attempted=attempted,
            last_error=str(last_error) if last_error else None,
        )
        raise AllSourcesFailedError(request_kind, attempted, last_error) from last_error

    async def fetch_coins(self, request: Optional[CoinListRequest] = None) -> SourceResult[list[Coin]]:
        """
        Fetch one page of the market listing.

        Args:
            request: Listing request; defaults to the first 100 coins in USD

        Returns:
            SourceResult with canonical coins and the winning source name.

        Raises:
            AllSourcesFailedError: If every source failed.
        """
        request = request or CoinListRequest()
        return await self._run(LISTING, lambda source: source.fetch_coins(request))

    async def fetch_price_history(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 7,
        symbol: Optional[str] = None,
    ) -> SourceResult[PriceHistory]:
        """
        Fetch a price series for one coin.

        Raises:
            AllSourcesFailedError: If every source failed or none supports history.
        """
        return await self._run(
            PRICE_HISTORY,
            lambda source: source.fetch_price_history(coin_id, vs_currency, days, symbol=symbol),
        )

    async def fetch_ohlc(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 7,
        symbol: Optional[str] = None,
    ) -> SourceResult[list[OHLCCandle]]:
        """
        Fetch OHLC candles for one coin.

        Raises:
            AllSourcesFailedError: If every source failed or none supports OHLC.
        """
        return await self._run(
            OHLC,
            lambda source: source.fetch_ohlc(coin_id, vs_currency, days, symbol=symbol),
        )

    async def close(self) -> None:
        """Close every source's HTTP client."""
        for source in self._sources:
            await source.close()

    def describe(self) -> list[dict[str, Any]]:
        """Source names in priority order, for diagnostics."""
        return [
            {"position": i, "name": source.name, "current": source.name == self._current_source}
            for i, source in enumerate(self._sources, start=1)
        ]
