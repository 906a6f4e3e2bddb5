"""
Shared fixtures for cryptoscope tests.
"""

from typing import Any, Callable, Optional

import httpx
import pytest

from cryptoscope.domain.entities.analysis import (
    CryptoAnalysis,
    EnhancedCryptoAnalysis,
    Horizon,
    IndicatorSnapshot,
    MarketCycle,
    TechnicalConfidence,
)
from cryptoscope.domain.entities.coin import Coin


def build_coin(**overrides: Any) -> Coin:
    """Coin with sensible defaults; override any field by keyword."""
    values: dict[str, Any] = {
        "id": "bitcoin",
        "symbol": "btc",
        "name": "Bitcoin",
        "current_price": 50000.0,
        "market_cap": 1_000_000_000_000.0,
        "market_cap_rank": 1,
        "total_volume": 30_000_000_000.0,
        "price_change_percentage_24h": 3.0,
        "source": "test",
    }
    values.update(overrides)
    return Coin(**values)


def build_enhanced(
    coin_id: str = "coin",
    prediction_24h: float = 1.0,
    technical_score: float = 50.0,
    multi_timeframe: float = 40.0,
    coin: Optional[Coin] = None,
) -> EnhancedCryptoAnalysis:
    """Enhanced analysis with the fields the ranker looks at."""
    coin = coin or build_coin(id=coin_id, symbol=coin_id[:4], name=coin_id.title())
    analysis = CryptoAnalysis(
        coin=coin,
        indicators=IndicatorSnapshot(),
        technical_score=technical_score,
        predicted_24h_change=prediction_24h,
    )
    return EnhancedCryptoAnalysis(
        analysis=analysis,
        confidence=TechnicalConfidence(
            rsi=20.0,
            macd=50.0,
            moving_average=40.0,
            support_resistance=30.0,
            multi_timeframe=multi_timeframe,
        ),
        liquidity_score=60.0,
        volatility_risk=30.0,
        market_cycle=MarketCycle.ACCUMULATION,
        risk_factors=(),
        opportunity_factors=(),
        predictions={
            Horizon.ONE_HOUR: 0.0,
            Horizon.FOUR_HOURS: prediction_24h * 0.3,
            Horizon.ONE_DAY: prediction_24h,
            Horizon.SEVEN_DAYS: prediction_24h * 2,
        },
    )


@pytest.fixture
def coin_factory() -> Callable[..., Coin]:
    """Factory for Coin records."""
    return build_coin


@pytest.fixture
def enhanced_factory() -> Callable[..., EnhancedCryptoAnalysis]:
    """Factory for EnhancedCryptoAnalysis records."""
    return build_enhanced


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by a handler function."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
