"""
Analysis entities - Indicator snapshots and per-coin analysis results.

A ``CryptoAnalysis`` is produced once per coin per cycle by the indicator
engine. Enrichment wraps it into an ``EnhancedCryptoAnalysis``; neither is
mutated after creation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from cryptoscope.domain.entities.coin import Coin
from cryptoscope.domain.entities.sentiment import SocialSentiment


class Trend(str, Enum):
    """Direction of a price trend on one timeframe."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Timeframe(str, Enum):
    """Timeframes used for multi-timeframe trend classification."""

    SHORT = "short"  # hours
    MEDIUM = "medium"  # days
    LONG = "long"  # week


class LevelKind(str, Enum):
    SUPPORT = "support"
    RESISTANCE = "resistance"


class MarketCycle(str, Enum):
    """Wyckoff-style market cycle phase."""

    ACCUMULATION = "ACCUMULATION"
    MARKUP = "MARKUP"
    DISTRIBUTION = "DISTRIBUTION"
    MARKDOWN = "MARKDOWN"


class Horizon(str, Enum):
    """Prediction horizons."""

    ONE_HOUR = "1h"
    FOUR_HOURS = "4h"
    ONE_DAY = "24h"
    SEVEN_DAYS = "7d"


@dataclass(frozen=True)
class MACDValues:
    macd: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0


@dataclass(frozen=True)
class StochasticValues:
    k: float = 50.0
    d: float = 50.0


@dataclass(frozen=True)
class BollingerValues:
    upper: float = 0.0
    middle: float = 0.0
    lower: float = 0.0

    def position(self, price: float) -> float:
        """Where price sits inside the band: 0 at the lower band, 1 at the upper."""
        width = self.upper - self.lower
        if width <= 0:
            return 0.5
        return (price - self.lower) / width


@dataclass(frozen=True)
class SupportResistanceLevel:
    """
    A price level where the series repeatedly turned.

    Attributes:
        price: Level price
        kind: Support (below price) or resistance (above price)
        strength: 0-1, share of pivots that touched this level
    """

    price: float
    kind: LevelKind
    strength: float


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Technical indicators computed for one coin."""

    rsi: float = 50.0
    macd: MACDValues = field(default_factory=MACDValues)
    sma_20: float = 0.0
    sma_50: float = 0.0
    ema_12: float = 0.0
    ema_26: float = 0.0
    bollinger: BollingerValues = field(default_factory=BollingerValues)
    stochastic: StochasticValues = field(default_factory=StochasticValues)
    adx: float = 0.0
    support_resistance: tuple[SupportResistanceLevel, ...] = ()
    timeframe_trends: dict[Timeframe, Trend] = field(default_factory=dict)

    @property
    def supports(self) -> list[SupportResistanceLevel]:
        return [lvl for lvl in self.support_resistance if lvl.kind == LevelKind.SUPPORT]

    @property
    def resistances(self) -> list[SupportResistanceLevel]:
        return [lvl for lvl in self.support_resistance if lvl.kind == LevelKind.RESISTANCE]

    def trend(self, timeframe: Timeframe) -> Trend:
        """Trend on a timeframe, NEUTRAL when it was not classified."""
        return self.timeframe_trends.get(timeframe, Trend.NEUTRAL)


@dataclass(frozen=True)
class CryptoAnalysis:
    """
    Indicator-derived analysis of one coin.

    Attributes:
        coin: Canonical coin record
        indicators: Indicator snapshot
        technical_score: Aggregate 0-100 confidence in the indicator signal
        predicted_24h_change: Baseline predicted 24h change in percent
    """

    coin: Coin
    indicators: IndicatorSnapshot
    technical_score: float
    predicted_24h_change: float


@dataclass(frozen=True)
class TechnicalConfidence:
    """Per indicator family confidence sub-scores (0-95)."""

    rsi: float
    macd: float
    moving_average: float
    support_resistance: float
    multi_timeframe: float

    @property
    def average(self) -> float:
        return (
            self.rsi
            + self.macd
            + self.moving_average
            + self.support_resistance
            + self.multi_timeframe
        ) / 5

    def to_dict(self) -> dict[str, float]:
        return {
            "rsi": self.rsi,
            "macd": self.macd,
            "moving_average": self.moving_average,
            "support_resistance": self.support_resistance,
            "multi_timeframe": self.multi_timeframe,
        }


@dataclass(frozen=True)
class EnhancedCryptoAnalysis:
    """
    A ``CryptoAnalysis`` enriched with confidence, risk and horizon predictions.

    Lives for a single recommendation cycle; the next refresh replaces it.
    """

    analysis: CryptoAnalysis
    confidence: TechnicalConfidence
    liquidity_score: float
    volatility_risk: float
    market_cycle: MarketCycle
    risk_factors: tuple[str, ...]
    opportunity_factors: tuple[str, ...]
    predictions: dict[Horizon, float]
    social_sentiment: Optional[SocialSentiment] = None

    @property
    def coin(self) -> Coin:
        return self.analysis.coin

    @property
    def technical_score(self) -> float:
        return self.analysis.technical_score

    @property
    def prediction_24h(self) -> float:
        return self.predictions[Horizon.ONE_DAY]

    @property
    def summary(self) -> str:
        """Get a summary string for logging."""
        return (
            f"{self.coin.display_symbol}: 24h={self.prediction_24h:+.2f}%, "
            f"score={self.technical_score:.0f}, cycle={self.market_cycle.value}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        indicators = self.analysis.indicators
        return {
            "coin": self.coin.to_dict(),
            "technical_score": self.technical_score,
            "predicted_24h_change": self.analysis.predicted_24h_change,
            "indicators": {
                "rsi": indicators.rsi,
                "macd": {
                    "macd": indicators.macd.macd,
                    "signal": indicators.macd.signal,
                    "histogram": indicators.macd.histogram,
                },
                "sma_20": indicators.sma_20,
                "sma_50": indicators.sma_50,
                "ema_12": indicators.ema_12,
                "ema_26": indicators.ema_26,
                "bollinger": {
                    "upper": indicators.bollinger.upper,
                    "middle": indicators.bollinger.middle,
                    "lower": indicators.bollinger.lower,
                },
                "stochastic": {"k": indicators.stochastic.k, "d": indicators.stochastic.d},
                "adx": indicators.adx,
                "support_resistance": [
                    {"price": lvl.price, "kind": lvl.kind.value, "strength": lvl.strength}
                    for lvl in indicators.support_resistance
                ],
                "timeframe_trends": {
                    tf.value: trend.value for tf, trend in indicators.timeframe_trends.items()
                },
            },
            "confidence": self.confidence.to_dict(),
            "liquidity_score": self.liquidity_score,
            "volatility_risk": self.volatility_risk,
            "market_cycle": self.market_cycle.value,
            "risk_factors": list(self.risk_factors),
            "opportunity_factors": list(self.opportunity_factors),
            "predictions": {h.value: v for h, v in self.predictions.items()},
            "social_sentiment": (
                self.social_sentiment.to_dict() if self.social_sentiment else None
            ),
        }
