"""
Prediction Calculator - Horizon predictions derived from the 24h baseline.

Short horizons lean on oscillator extremes, longer horizons on trend
persistence and strength:

- 1h: RSI, MACD histogram and stochastic signals, capped at +/-5%
- 4h: 30% of the 24h baseline, nudged by the short-timeframe trend
- 24h: the baseline itself
- 7d: twice the baseline, nudged by the long-timeframe trend and ADX-weighted
  RSI direction, capped at +/-20%
"""

from typing import Optional

from cryptoscope.domain.entities.analysis import (
    CryptoAnalysis,
    Horizon,
    IndicatorSnapshot,
    Timeframe,
    Trend,
)
from cryptoscope.infrastructure.config import ScoringThresholds


def _clamp(value: float, limit: float) -> float:
    return max(-limit, min(limit, value))


def _trend_sign(trend: Trend) -> int:
    if trend == Trend.BULLISH:
        return 1
    if trend == Trend.BEARISH:
        return -1
    return 0


class PredictionCalculator:
    """Computes 1h/4h/24h/7d predicted percent changes for one analysis."""

    def __init__(self, thresholds: Optional[ScoringThresholds] = None):
        self.thresholds = thresholds or ScoringThresholds()

    def one_hour(self, indicators: IndicatorSnapshot) -> float:
        t = self.thresholds
        rsi = indicators.rsi
        if rsi < t.rsi_oversold:
            rsi_signal = 1.5
        elif rsi > t.rsi_overbought:
            rsi_signal = -1.5
        else:
            rsi_signal = (50 - rsi) / 50 * 0.5

        macd_signal = _clamp(indicators.macd.histogram * 10, 1.5)

        k = indicators.stochastic.k
        if k < t.stochastic_oversold:
            stochastic_signal = 1.0
        elif k > t.stochastic_overbought:
            stochastic_signal = -1.0
        else:
            stochastic_signal = 0.0

        return _clamp(rsi_signal + macd_signal + stochastic_signal, t.prediction_1h_cap)

    def four_hours(self, indicators: IndicatorSnapshot, baseline: float) -> float:
        t = self.thresholds
        adjustment = _trend_sign(indicators.trend(Timeframe.SHORT)) * t.prediction_4h_trend_adjustment
        return baseline * t.prediction_4h_baseline_weight + adjustment

    def seven_days(self, indicators: IndicatorSnapshot, baseline: float) -> float:
        t = self.thresholds
        weekly = _trend_sign(indicators.trend(Timeframe.LONG)) * t.prediction_7d_trend_adjustment

        if indicators.rsi > 50:
            direction = 1
        elif indicators.rsi < 50:
            direction = -1
        else:
            direction = 0
        strength = indicators.adx / 100 * direction * t.prediction_7d_strength_weight

        value = baseline * t.prediction_7d_baseline_multiplier + weekly + strength
        return _clamp(value, t.prediction_7d_cap)

    def predict(self, analysis: CryptoAnalysis) -> dict[Horizon, float]:
        """Predictions for every horizon."""
        indicators = analysis.indicators
        baseline = analysis.predicted_24h_change
        return {
            Horizon.ONE_HOUR: self.one_hour(indicators),
            Horizon.FOUR_HOURS: self.four_hours(indicators, baseline),
            Horizon.ONE_DAY: baseline,
            Horizon.SEVEN_DAYS: self.seven_days(indicators, baseline),
        }
