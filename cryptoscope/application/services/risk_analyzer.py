"""
Risk & Opportunity Analyzer - Flags, liquidity, volatility and market cycle.

Risk and opportunity rules are independent and non-exclusive; a coin can
carry several of each at the same time. Factors are listed, not scored.

Level proximity is one-sided: a strong resistance counts only while it is
still overhead (0-3% above the price), and a strong support only while it
is still underneath (0-3% below). A level the price has already crossed
no longer acts as that kind of level.
"""

from dataclasses import dataclass
from typing import Optional

from cryptoscope.application.services.confidence_scorer import majority_trend
from cryptoscope.domain.entities.analysis import (
    CryptoAnalysis,
    MarketCycle,
    Timeframe,
    Trend,
)
from cryptoscope.domain.entities.coin import Coin
from cryptoscope.infrastructure.config import ScoringThresholds

SMALL_CAP = "Small market cap - high volatility risk"
LOW_LIQUIDITY = "Low liquidity - difficulty trading"
EXTREME_OVERBOUGHT = "RSI extremely overbought - pullback risk"
WEAK_TREND = "Weak trend strength (low ADX)"
TIMEFRAME_CONFLICT = "Conflicting signals across timeframes"
NEAR_RESISTANCE = "Price near strong resistance"

EXTREME_OVERSOLD = "RSI extremely oversold - bounce potential"
MACD_BULLISH = "Bullish MACD crossover"
ALL_TIMEFRAMES_BULLISH = "Bullish across all timeframes"
NEAR_SUPPORT = "Price near strong support"
HIGH_LIQUIDITY = "High liquidity - easy trading"
TOP_RANKED = "Top 50 coin - established project"


@dataclass(frozen=True)
class RiskAssessment:
    """Risk/opportunity output for one coin."""

    risk_factors: tuple[str, ...]
    opportunity_factors: tuple[str, ...]
    liquidity_score: float
    volatility_risk: float
    market_cycle: MarketCycle


def liquidity_score(coin: Coin) -> float:
    """Band the volume/market-cap ratio into a 20-95 score."""
    ratio = coin.volume_to_market_cap
    if ratio > 0.3:
        return 95.0
    if ratio > 0.15:
        return 85.0
    if ratio > 0.08:
        return 75.0
    if ratio > 0.03:
        return 60.0
    if ratio > 0.01:
        return 40.0
    return 20.0


def volatility_risk(coin: Coin) -> float:
    """Band averaged 24h/7d/30d momentum (per-day normalized) into a 15-90 risk."""
    momentum_24h = abs(coin.price_change_percentage_24h)
    momentum_7d = abs(coin.price_change_percentage_7d or 0.0)
    momentum_30d = abs(coin.price_change_percentage_30d or 0.0)
    average = (momentum_24h + momentum_7d / 7 + momentum_30d / 30) / 3

    if average > 15:
        return 90.0
    if average > 10:
        return 75.0
    if average > 5:
        return 50.0
    if average > 2:
        return 30.0
    return 15.0


def market_cycle(coin: Coin) -> MarketCycle:
    """Wyckoff-style phase from volume activity and multi-period momentum."""
    momentum_24h = coin.price_change_percentage_24h
    momentum_7d = coin.price_change_percentage_7d or 0.0
    momentum_30d = coin.price_change_percentage_30d or 0.0
    ratio = coin.volume_to_market_cap

    if ratio > 0.1 and momentum_7d > 10 and momentum_24h > 2:
        return MarketCycle.MARKUP
    if ratio > 0.1 and momentum_7d < -5 and momentum_24h < -2:
        return MarketCycle.DISTRIBUTION
    if ratio < 0.05 and momentum_30d < -10:
        return MarketCycle.MARKDOWN
    return MarketCycle.ACCUMULATION


class RiskOpportunityAnalyzer:
    """Applies the risk and opportunity rules to one analysis."""

    def __init__(self, thresholds: Optional[ScoringThresholds] = None):
        self.thresholds = thresholds or ScoringThresholds()

    def _within_pct(self, distance: float, price: float) -> bool:
        return 0 <= distance and distance / price * 100 <= self.thresholds.level_proximity_pct

    def risk_factors(self, analysis: CryptoAnalysis) -> list[str]:
        t = self.thresholds
        coin = analysis.coin
        indicators = analysis.indicators
        price = coin.current_price
        risks: list[str] = []

        if coin.market_cap < t.small_cap_threshold:
            risks.append(SMALL_CAP)
        if coin.volume_to_market_cap < t.low_liquidity_ratio:
            risks.append(LOW_LIQUIDITY)
        if indicators.rsi > t.rsi_extreme_overbought:
            risks.append(EXTREME_OVERBOUGHT)
        if indicators.adx < t.weak_trend_adx:
            risks.append(WEAK_TREND)

        _, agreeing = majority_trend(indicators)
        if len(Timeframe) - agreeing > 1:
            risks.append(TIMEFRAME_CONFLICT)

        if price > 0 and any(
            lvl.strength > t.strong_level_strength and self._within_pct(lvl.price - price, price)
            for lvl in indicators.resistances
        ):
            risks.append(NEAR_RESISTANCE)
        return risks

    def opportunity_factors(self, analysis: CryptoAnalysis) -> list[str]:
        t = self.thresholds
        coin = analysis.coin
        indicators = analysis.indicators
        price = coin.current_price
        opportunities: list[str] = []

        if indicators.rsi < t.rsi_extreme_oversold:
            opportunities.append(EXTREME_OVERSOLD)
        if indicators.macd.macd > indicators.macd.signal and indicators.macd.histogram > 0:
            opportunities.append(MACD_BULLISH)
        if all(indicators.trend(tf) == Trend.BULLISH for tf in Timeframe):
            opportunities.append(ALL_TIMEFRAMES_BULLISH)
        if price > 0 and any(
            lvl.strength > t.strong_level_strength and self._within_pct(price - lvl.price, price)
            for lvl in indicators.supports
        ):
            opportunities.append(NEAR_SUPPORT)
        if coin.volume_to_market_cap > t.high_liquidity_ratio:
            opportunities.append(HIGH_LIQUIDITY)
        if coin.market_cap_rank is not None and coin.market_cap_rank <= t.top_rank_threshold:
            opportunities.append(TOP_RANKED)
        return opportunities

    def assess(self, analysis: CryptoAnalysis) -> RiskAssessment:
        coin = analysis.coin
        return RiskAssessment(
            risk_factors=tuple(self.risk_factors(analysis)),
            opportunity_factors=tuple(self.opportunity_factors(analysis)),
            liquidity_score=liquidity_score(coin),
            volatility_risk=volatility_risk(coin),
            market_cycle=market_cycle(coin),
        )
