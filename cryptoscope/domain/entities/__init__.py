"""
Domain entities - Core business objects.
"""

from cryptoscope.domain.entities.analysis import (
    BollingerValues,
    CryptoAnalysis,
    EnhancedCryptoAnalysis,
    Horizon,
    IndicatorSnapshot,
    LevelKind,
    MACDValues,
    MarketCycle,
    StochasticValues,
    SupportResistanceLevel,
    TechnicalConfidence,
    Timeframe,
    Trend,
)
from cryptoscope.domain.entities.coin import Coin, CoinListRequest
from cryptoscope.domain.entities.market_data import OHLCCandle, PriceHistory, PricePoint
from cryptoscope.domain.entities.result import Err, Ok, Result, SourceResult
from cryptoscope.domain.entities.sentiment import PlatformSentiment, SocialSentiment

__all__ = [
    "BollingerValues",
    "Coin",
    "CoinListRequest",
    "PricePoint",
    "PriceHistory",
    "OHLCCandle",
    "Ok",
    "Err",
    "Result",
    "SourceResult",
    "CryptoAnalysis",
    "EnhancedCryptoAnalysis",
    "Horizon",
    "IndicatorSnapshot",
    "LevelKind",
    "MACDValues",
    "MarketCycle",
    "StochasticValues",
    "SupportResistanceLevel",
    "TechnicalConfidence",
    "Timeframe",
    "Trend",
    "PlatformSentiment",
    "SocialSentiment",
]
