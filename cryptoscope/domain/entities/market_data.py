"""
Market data entities - Price history and OHLC candles.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PricePoint:
    """Single price sample."""

    timestamp: int  # Unix milliseconds
    price: float

    @property
    def datetime(self) -> datetime:
        """Convert timestamp to datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000)


@dataclass(frozen=True)
class PriceHistory:
    """Chronological price series for one coin."""

    coin_id: str
    points: tuple[PricePoint, ...] = field(default_factory=tuple)

    @property
    def prices(self) -> list[float]:
        """Prices only, oldest first."""
        return [p.price for p in self.points]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class OHLCCandle:
    """OHLC candlestick data point."""

    timestamp: int  # Unix milliseconds
    open_price: float
    high_price: float
    low_price: float
    close_price: float

    @property
    def datetime(self) -> datetime:
        """Convert timestamp to datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000)
