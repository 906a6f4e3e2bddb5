"""
Coin entity - Canonical market record every source is converted into.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Coin:
    """
    Canonical market snapshot for one cryptocurrency.

    Every source adapter converts its native payload into this shape. Records
    with a non-positive ``current_price`` are dropped during conversion and
    never reach the analysis pipeline.
    """

    id: str
    symbol: str
    name: str
    current_price: float
    image: str = ""
    market_cap: float = 0.0
    market_cap_rank: Optional[int] = None
    total_volume: float = 0.0
    high_24h: float = 0.0
    low_24h: float = 0.0
    price_change_24h: float = 0.0
    price_change_percentage_24h: float = 0.0
    price_change_percentage_7d: Optional[float] = None
    price_change_percentage_30d: Optional[float] = None
    circulating_supply: float = 0.0
    total_supply: Optional[float] = None
    max_supply: Optional[float] = None
    ath: float = 0.0
    ath_date: Optional[str] = None
    atl: float = 0.0
    atl_date: Optional[str] = None
    last_updated: Optional[str] = None
    sparkline: tuple[float, ...] = ()  # Chronological price samples
    categories: tuple[str, ...] = ()
    source: str = ""  # Name of the adapter that produced this record

    @property
    def volume_to_market_cap(self) -> float:
        """Liquidity ratio: 24h volume relative to market cap."""
        if self.market_cap <= 0:
            return 0.0
        return self.total_volume / self.market_cap

    @property
    def display_symbol(self) -> str:
        return self.symbol.upper()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/JSON output."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "image": self.image,
            "current_price": self.current_price,
            "market_cap": self.market_cap,
            "market_cap_rank": self.market_cap_rank,
            "total_volume": self.total_volume,
            "high_24h": self.high_24h,
            "low_24h": self.low_24h,
            "price_change_24h": self.price_change_24h,
            "price_change_percentage_24h": self.price_change_percentage_24h,
            "price_change_percentage_7d": self.price_change_percentage_7d,
            "price_change_percentage_30d": self.price_change_percentage_30d,
            "circulating_supply": self.circulating_supply,
            "total_supply": self.total_supply,
            "max_supply": self.max_supply,
            "ath": self.ath,
            "ath_date": self.ath_date,
            "atl": self.atl,
            "atl_date": self.atl_date,
            "last_updated": self.last_updated,
            "sparkline": list(self.sparkline),
            "categories": list(self.categories),
            "source": self.source,
        }


@dataclass(frozen=True)
class CoinListRequest:
    """Logical request for a page of the market listing."""

    vs_currency: str = "usd"
    order: str = "market_cap_desc"
    per_page: int = 100
    page: int = 1
    sparkline: bool = True

    @property
    def offset(self) -> int:
        """Index of the first record of this page in a flat listing."""
        return (self.page - 1) * self.per_page

