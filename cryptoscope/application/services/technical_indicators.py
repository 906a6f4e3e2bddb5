"""
Technical Indicator Engine - Produces a CryptoAnalysis from a coin's price history.

Scoring (technical score, 0-100, starts at 0):
- RSI < 30: +20 | RSI > 70: -10 | RSI 40-60: +10
- MACD above signal: +15, else -5 | Histogram > 0: +10
- Price > SMA20: +10 | Price > SMA50: +15 | SMA20 > SMA50: +10
- EMA12 > EMA26: +10
- Bollinger position < 0.2: +15 | > 0.8: -5
- Stochastic %K and %D < 20: +15 | both > 80: -5

The baseline 24h prediction combines the same signals with recent momentum
and market-cap rank, capped at +/-15%.
"""

import time
from typing import Optional

from cryptoscope.application.services.failover import FailoverOrchestrator
from cryptoscope.application.services.indicators import (
    HOUR_MS,
    calculate_adx,
    calculate_bollinger,
    calculate_ema,
    calculate_macd,
    calculate_rsi,
    calculate_sma,
    calculate_stochastic,
    classify_timeframe_trends,
    find_support_resistance,
)
from cryptoscope.domain.entities.analysis import (
    BollingerValues,
    CryptoAnalysis,
    IndicatorSnapshot,
    MACDValues,
    StochasticValues,
)
from cryptoscope.domain.entities.coin import Coin
from cryptoscope.domain.entities.market_data import PricePoint
from cryptoscope.domain.errors import AllSourcesFailedError, AnalysisError
from cryptoscope.domain.ports.analysis_port import TechnicalAnalysisPort
from cryptoscope.infrastructure.config import ScoringThresholds
from cryptoscope.infrastructure.logging import get_logger

logger = get_logger(__name__)

MIN_HISTORY_POINTS = 50
PREDICTION_24H_CAP = 15.0


def build_snapshot(points: list[PricePoint], current_price: float) -> IndicatorSnapshot:
    """Compute every indicator over a chronological price series."""
    prices = [p.price for p in points]
    last = prices[-1] if prices else current_price

    rsi = calculate_rsi(prices)
    macd = calculate_macd(prices)
    sma_20 = calculate_sma(prices, 20)
    sma_50 = calculate_sma(prices, 50)
    ema_12 = calculate_ema(prices, 12)
    ema_26 = calculate_ema(prices, 26)
    bollinger = calculate_bollinger(prices)
    stochastic = calculate_stochastic(prices)
    adx = calculate_adx(prices)

    return IndicatorSnapshot(
        rsi=rsi[-1] if rsi else 50.0,
        macd=macd[-1] if macd else MACDValues(),
        sma_20=sma_20[-1] if sma_20 else last,
        sma_50=sma_50[-1] if sma_50 else last,
        ema_12=ema_12[-1] if ema_12 else last,
        ema_26=ema_26[-1] if ema_26 else last,
        bollinger=bollinger[-1] if bollinger else BollingerValues(last, last, last),
        stochastic=stochastic[-1] if stochastic else StochasticValues(),
        adx=adx[-1] if adx else 0.0,
        support_resistance=tuple(find_support_resistance(prices, current_price)),
        timeframe_trends=classify_timeframe_trends(points),
    )


def score_indicators(
    indicators: IndicatorSnapshot,
    current_price: float,
    thresholds: Optional[ScoringThresholds] = None,
) -> float:
    """Aggregate the indicator signals into a 0-100 technical score."""
    t = thresholds or ScoringThresholds()
    score = 0.0

    if indicators.rsi < t.rsi_oversold:
        score += 20
    elif indicators.rsi > t.rsi_overbought:
        score -= 10
    elif 40 <= indicators.rsi <= 60:
        score += 10

    if indicators.macd.macd > indicators.macd.signal:
        score += 15
    else:
        score -= 5
    if indicators.macd.histogram > 0:
        score += 10

    if current_price > indicators.sma_20:
        score += 10
    if current_price > indicators.sma_50:
        score += 15
    if indicators.sma_20 > indicators.sma_50:
        score += 10

    if indicators.ema_12 > indicators.ema_26:
        score += 10

    band_position = indicators.bollinger.position(current_price)
    if band_position < 0.2:
        score += 15
    elif band_position > 0.8:
        score -= 5

    k, d = indicators.stochastic.k, indicators.stochastic.d
    if k < t.stochastic_oversold and d < t.stochastic_oversold:
        score += 15
    elif k > t.stochastic_overbought and d > t.stochastic_overbought:
        score -= 5

    return max(0.0, min(100.0, score))


def baseline_prediction(
    coin: Coin,
    indicators: IndicatorSnapshot,
    overall_score: float,
    thresholds: Optional[ScoringThresholds] = None,
) -> float:
    """Predicted 24h change in percent, capped at +/-15."""
    t = thresholds or ScoringThresholds()
    price = coin.current_price
    change = 0.0

    if indicators.rsi < t.rsi_oversold:
        change += 3
    elif indicators.rsi > t.rsi_overbought:
        change -= 2

    macd = indicators.macd
    if macd.macd > macd.signal and macd.histogram > 0:
        change += 2
    elif macd.macd < macd.signal and macd.histogram < 0:
        change -= 2

    if price > indicators.sma_20 > indicators.sma_50:
        change += 1.5
    elif price < indicators.sma_20 < indicators.sma_50:
        change -= 1.5

    band_position = indicators.bollinger.position(price)
    if band_position < 0.2:
        change += 2
    elif band_position > 0.8:
        change -= 1

    # Strong moves are expected to continue, with damping
    momentum = coin.price_change_percentage_24h
    change += momentum * (0.3 if abs(momentum) > 10 else 0.1)

    rank = coin.market_cap_rank
    if rank is not None:
        if rank <= 10:
            change *= 0.7
        elif rank > 100:
            change *= 1.3

    change += (overall_score - 50) * 0.1
    return max(-PREDICTION_24H_CAP, min(PREDICTION_24H_CAP, change))


def sparkline_points(coin: Coin, now_ms: Optional[int] = None) -> list[PricePoint]:
    """Hourly points for the coin's 7-day sparkline, ending now."""
    end = now_ms if now_ms is not None else int(time.time() * 1000)
    count = len(coin.sparkline)
    return [
        PricePoint(timestamp=end - (count - 1 - i) * HOUR_MS, price=price)
        for i, price in enumerate(coin.sparkline)
    ]


class TechnicalIndicatorEngine(TechnicalAnalysisPort):
    """
    Indicator engine backed by the failover orchestrator's price history.

    When every history source fails, the listing's 7-day sparkline is used
    instead if it is long enough.
    """

    def __init__(
        self,
        orchestrator: FailoverOrchestrator,
        thresholds: Optional[ScoringThresholds] = None,
        history_days: int = 30,
        vs_currency: str = "usd",
    ):
        self.orchestrator = orchestrator
        self.thresholds = thresholds or ScoringThresholds()
        self.history_days = history_days
        self.vs_currency = vs_currency

    async def _load_points(self, coin: Coin) -> list[PricePoint]:
        try:
            result = await self.orchestrator.fetch_price_history(
                coin.id,
                self.vs_currency,
                self.history_days,
                symbol=coin.symbol,
            )
            points = list(result.data.points)
        except AllSourcesFailedError as e:
            logger.debug("Price history unavailable", coin_id=coin.id, error=str(e))
            points = []

        if len(points) >= MIN_HISTORY_POINTS:
            return points

        fallback = sparkline_points(coin)
        if len(fallback) >= MIN_HISTORY_POINTS:
            logger.debug("Using sparkline for indicators", coin_id=coin.id, points=len(fallback))
            return fallback

        raise AnalysisError(
            coin.id,
            f"Insufficient price data ({len(points)} history points, "
            f"{len(fallback)} sparkline points)",
        )

    async def analyze(self, coin: Coin) -> CryptoAnalysis:
        """
        Compute indicators, technical score and baseline 24h prediction.

        Raises:
            AnalysisError: If no usable price series is available.
        """
        if coin.current_price <= 0:
            raise AnalysisError(coin.id, "Non-positive price")

        points = await self._load_points(coin)
        indicators = build_snapshot(points, coin.current_price)
        technical_score = score_indicators(indicators, coin.current_price, self.thresholds)
        predicted = baseline_prediction(coin, indicators, technical_score, self.thresholds)

        logger.debug(
            "Analyzed coin",
            coin_id=coin.id,
            technical_score=technical_score,
            predicted_24h=round(predicted, 2),
        )
        return CryptoAnalysis(
            coin=coin,
            indicators=indicators,
            technical_score=technical_score,
            predicted_24h_change=predicted,
        )
