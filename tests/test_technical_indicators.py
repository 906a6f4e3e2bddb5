"""
Tests for the technical indicator engine and its scoring.
"""

from typing import Optional

import pytest

from cryptoscope.application.services.indicators import HOUR_MS
from cryptoscope.application.services.technical_indicators import (
    MIN_HISTORY_POINTS,
    TechnicalIndicatorEngine,
    baseline_prediction,
    score_indicators,
    sparkline_points,
)
from cryptoscope.domain.entities.analysis import (
    BollingerValues,
    IndicatorSnapshot,
    MACDValues,
    StochasticValues,
)
from cryptoscope.domain.entities.market_data import PriceHistory, PricePoint
from cryptoscope.domain.entities.result import SourceResult
from cryptoscope.domain.errors import AllSourcesFailedError, AnalysisError, SourceError


class FakeOrchestrator:
    """Stands in for FailoverOrchestrator.fetch_price_history."""

    def __init__(self, points: Optional[list[PricePoint]] = None):
        self.points = points
        self.calls: list[tuple] = []

    async def fetch_price_history(self, coin_id, vs_currency="usd", days=7, symbol=None):
        self.calls.append((coin_id, vs_currency, days, symbol))
        if self.points is None:
            raise AllSourcesFailedError(
                "price history", ["a"], SourceError("a", "HTTP 500")
            )
        return SourceResult(data=PriceHistory(coin_id=coin_id, points=tuple(self.points)), source="a")


def hourly_points(prices: list[float]) -> list[PricePoint]:
    return [PricePoint(i * HOUR_MS, p) for i, p in enumerate(prices)]


class TestScoreIndicators:
    """Tests for the technical score."""

    def test_neutral_snapshot(self):
        """Test a default snapshot above zero averages."""
        assert score_indicators(IndicatorSnapshot(), current_price=1.0) == pytest.approx(30.0)

    def test_all_bullish_signals_clamped(self):
        """Test the score never exceeds 100."""
        indicators = IndicatorSnapshot(
            rsi=25.0,
            macd=MACDValues(macd=1.0, signal=0.5, histogram=0.5),
            sma_20=100.0,
            sma_50=90.0,
            ema_12=105.0,
            ema_26=100.0,
            bollinger=BollingerValues(upper=200.0, middle=150.0, lower=100.0),
            stochastic=StochasticValues(k=10.0, d=10.0),
        )
        assert score_indicators(indicators, current_price=110.0) == 100.0

    def test_bearish_signals_floor(self):
        """Test the score never drops below 0."""
        indicators = IndicatorSnapshot(
            rsi=85.0,
            macd=MACDValues(macd=-1.0, signal=0.0, histogram=-1.0),
            sma_20=120.0,
            sma_50=130.0,
            bollinger=BollingerValues(upper=101.0, middle=90.0, lower=80.0),
            stochastic=StochasticValues(k=90.0, d=95.0),
        )
        assert score_indicators(indicators, current_price=100.0) == 0.0


class TestBaselinePrediction:
    """Tests for the 24h baseline."""

    def test_momentum_without_rank(self, coin_factory):
        """Test strong momentum continues and no rank adjustment applies."""
        coin = coin_factory(current_price=1.0, price_change_percentage_24h=20.0, market_cap_rank=None)
        assert baseline_prediction(coin, IndicatorSnapshot(), 50.0) == pytest.approx(6.0)

    def test_rank_damping(self, coin_factory):
        """Test large caps are damped and small caps amplified."""
        top = coin_factory(current_price=1.0, price_change_percentage_24h=20.0, market_cap_rank=5)
        small = coin_factory(current_price=1.0, price_change_percentage_24h=20.0, market_cap_rank=200)
        assert baseline_prediction(top, IndicatorSnapshot(), 50.0) == pytest.approx(4.2)
        assert baseline_prediction(small, IndicatorSnapshot(), 50.0) == pytest.approx(7.8)

    def test_capped(self, coin_factory):
        """Test the baseline is capped at 15%."""
        coin = coin_factory(current_price=1.0, price_change_percentage_24h=100.0, market_cap_rank=None)
        assert baseline_prediction(coin, IndicatorSnapshot(), 50.0) == 15.0

    def test_score_shifts_prediction(self, coin_factory):
        """Test the technical score pulls the prediction around 50."""
        coin = coin_factory(current_price=1.0, price_change_percentage_24h=0.0, market_cap_rank=None)
        assert baseline_prediction(coin, IndicatorSnapshot(), 80.0) == pytest.approx(3.0)


class TestSparklinePoints:
    """Tests for sparkline conversion."""

    def test_hourly_spacing(self, coin_factory):
        """Test samples are spaced one hour apart ending now."""
        coin = coin_factory(sparkline=(1.0, 2.0, 3.0))
        points = sparkline_points(coin, now_ms=10 * HOUR_MS)
        assert [p.timestamp for p in points] == [8 * HOUR_MS, 9 * HOUR_MS, 10 * HOUR_MS]
        assert [p.price for p in points] == [1.0, 2.0, 3.0]


class TestTechnicalIndicatorEngine:
    """Tests for TechnicalIndicatorEngine."""

    @pytest.mark.asyncio
    async def test_analyze_from_history(self, coin_factory):
        """Test indicators are computed from fetched history."""
        orchestrator = FakeOrchestrator(hourly_points([100.0 + i for i in range(60)]))
        engine = TechnicalIndicatorEngine(orchestrator, history_days=30)
        coin = coin_factory(current_price=160.0)

        analysis = await engine.analyze(coin)

        assert orchestrator.calls == [("bitcoin", "usd", 30, "btc")]
        assert analysis.coin is coin
        assert analysis.indicators.rsi == pytest.approx(100.0)
        assert 0.0 <= analysis.technical_score <= 100.0
        assert -15.0 <= analysis.predicted_24h_change <= 15.0

    @pytest.mark.asyncio
    async def test_sparkline_fallback(self, coin_factory):
        """Test the listing sparkline is used when history fails."""
        orchestrator = FakeOrchestrator(points=None)
        engine = TechnicalIndicatorEngine(orchestrator)
        coin = coin_factory(sparkline=tuple(100.0 + (i % 7) for i in range(168)))

        analysis = await engine.analyze(coin)

        assert orchestrator.calls
        assert analysis.coin.id == "bitcoin"

    @pytest.mark.asyncio
    async def test_short_history_uses_sparkline(self, coin_factory):
        """Test a too-short history falls through to the sparkline."""
        orchestrator = FakeOrchestrator(hourly_points([1.0] * 10))
        engine = TechnicalIndicatorEngine(orchestrator)
        coin = coin_factory(sparkline=tuple([2.0] * MIN_HISTORY_POINTS))

        analysis = await engine.analyze(coin)
        assert analysis.indicators.sma_20 == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_insufficient_data(self, coin_factory):
        """Test no usable series raises AnalysisError."""
        engine = TechnicalIndicatorEngine(FakeOrchestrator(points=None))
        coin = coin_factory(sparkline=(1.0, 2.0))

        with pytest.raises(AnalysisError) as exc_info:
            await engine.analyze(coin)
        assert exc_info.value.coin_id == "bitcoin"

    @pytest.mark.asyncio
    async def test_non_positive_price(self, coin_factory):
        """Test coins without a price are rejected before any fetch."""
        orchestrator = FakeOrchestrator(hourly_points([1.0] * 60))
        engine = TechnicalIndicatorEngine(orchestrator)

        with pytest.raises(AnalysisError):
            await engine.analyze(coin_factory(current_price=0.0))
        assert orchestrator.calls == []
