"""
Confidence Scorer - Per indicator family confidence sub-scores.

Each sub-score is computed independently from one coin's indicators and
clamped to ``[floor, 95]``. There is no normalization across coins.
"""

from collections import Counter
from typing import Optional

from cryptoscope.domain.entities.analysis import (
    CryptoAnalysis,
    IndicatorSnapshot,
    TechnicalConfidence,
    Timeframe,
    Trend,
)
from cryptoscope.infrastructure.config import ScoringThresholds


def _clamp(value: float, floor: float, cap: float) -> float:
    return max(floor, min(cap, value))


def majority_trend(indicators: IndicatorSnapshot) -> tuple[Trend, int]:
    """
    Most common trend across the three timeframes and how many agree with it.

    Ties resolve to the trend of the shorter timeframe.
    """
    trends = [indicators.trend(tf) for tf in Timeframe]
    counts = Counter(trends)
    top = max(counts.values())
    trend = next(t for t in trends if counts[t] == top)
    return trend, top


class ConfidenceScorer:
    """
    Scores how much each indicator family can be trusted for one coin.

    - RSI: distance from 50, ``|rsi - 50| x 2``
    - MACD: histogram magnitude, ``|hist| x 100 + 50``
    - Moving averages: SMA20/SMA50 gap relative to price
    - Support/resistance: count of strong levels
    - Multi-timeframe: how many timeframes agree with the majority trend
    """

    def __init__(self, thresholds: Optional[ScoringThresholds] = None):
        self.thresholds = thresholds or ScoringThresholds()

    def rsi_confidence(self, indicators: IndicatorSnapshot) -> float:
        t = self.thresholds
        value = abs(indicators.rsi - 50) * t.rsi_confidence_scale
        return _clamp(value, t.rsi_confidence_floor, t.confidence_cap)

    def macd_confidence(self, indicators: IndicatorSnapshot) -> float:
        t = self.thresholds
        value = abs(indicators.macd.histogram) * t.macd_confidence_scale + t.macd_confidence_base
        return _clamp(value, t.macd_confidence_base, t.confidence_cap)

    def moving_average_confidence(self, indicators: IndicatorSnapshot, price: float) -> float:
        t = self.thresholds
        if price <= 0:
            return t.ma_confidence_base
        gap_pct = abs(indicators.sma_20 - indicators.sma_50) / price * 100
        value = gap_pct * t.ma_confidence_scale + t.ma_confidence_base
        return _clamp(value, t.ma_confidence_base, t.confidence_cap)

    def support_resistance_confidence(self, indicators: IndicatorSnapshot) -> float:
        t = self.thresholds
        strong = sum(
            1 for lvl in indicators.support_resistance if lvl.strength > t.strong_level_strength
        )
        value = strong * t.sr_confidence_per_level + t.sr_confidence_base
        return _clamp(value, t.sr_confidence_base, t.confidence_cap)

    def multi_timeframe_confidence(self, indicators: IndicatorSnapshot) -> float:
        t = self.thresholds
        _, agreeing = majority_trend(indicators)
        value = agreeing * t.timeframe_confidence_per_agreement + t.timeframe_confidence_base
        return _clamp(value, t.timeframe_confidence_base, t.confidence_cap)

    def score(self, analysis: CryptoAnalysis) -> TechnicalConfidence:
        """Compute all sub-scores for one analysis."""
        indicators = analysis.indicators
        return TechnicalConfidence(
            rsi=self.rsi_confidence(indicators),
            macd=self.macd_confidence(indicators),
            moving_average=self.moving_average_confidence(
                indicators, analysis.coin.current_price
            ),
            support_resistance=self.support_resistance_confidence(indicators),
            multi_timeframe=self.multi_timeframe_confidence(indicators),
        )
