"""Market data source adapters."""

from cryptoscope.adapters.sources.base import HttpSource
from cryptoscope.adapters.sources.bitstamp import BitstampSource
from cryptoscope.adapters.sources.coingecko import CoinGeckoSource
from cryptoscope.adapters.sources.coingecko_categories import CoinGeckoCategoryLookup
from cryptoscope.adapters.sources.coinpaprika import CoinPaprikaSource
from cryptoscope.adapters.sources.cryptocompare import CryptoCompareSource
from cryptoscope.domain.ports.market_data_port import MarketDataSourcePort
from cryptoscope.infrastructure.config import Settings


def build_sources(settings: Settings) -> list[MarketDataSourcePort]:
    """
    Build the source list in failover priority order.

    CoinGecko direct, then CoinGecko through each configured relay, then
    CoinPaprika, CryptoCompare and Bitstamp.
    """
    timeout = settings.http_timeout_seconds
    sources: list[MarketDataSourcePort] = [
        CoinGeckoSource(settings.coingecko_base_url, timeout=timeout),
    ]
    sources.extend(
        CoinGeckoSource(settings.coingecko_base_url, relay=relay, timeout=timeout)
        for relay in settings.cors_relays
    )
    sources.extend([
        CoinPaprikaSource(settings.coinpaprika_base_url, timeout=timeout),
        CryptoCompareSource(settings.cryptocompare_base_url, timeout=timeout),
        BitstampSource(settings.bitstamp_base_url, timeout=timeout),
    ])
    return sources


__all__ = [
    "BitstampSource",
    "CoinGeckoCategoryLookup",
    "CoinGeckoSource",
    "CoinPaprikaSource",
    "CryptoCompareSource",
    "HttpSource",
    "build_sources",
]
