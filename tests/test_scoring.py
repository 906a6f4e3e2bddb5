"""
Tests for confidence scoring, horizon predictions and risk analysis.
"""

import pytest

from cryptoscope.application.services.confidence_scorer import ConfidenceScorer, majority_trend
from cryptoscope.application.services.prediction_calculator import PredictionCalculator
from cryptoscope.application.services.risk_analyzer import (
    ALL_TIMEFRAMES_BULLISH,
    EXTREME_OVERBOUGHT,
    EXTREME_OVERSOLD,
    HIGH_LIQUIDITY,
    LOW_LIQUIDITY,
    MACD_BULLISH,
    NEAR_RESISTANCE,
    NEAR_SUPPORT,
    SMALL_CAP,
    TIMEFRAME_CONFLICT,
    TOP_RANKED,
    WEAK_TREND,
    RiskOpportunityAnalyzer,
    liquidity_score,
    market_cycle,
    volatility_risk,
)
from cryptoscope.domain.entities.analysis import (
    CryptoAnalysis,
    Horizon,
    IndicatorSnapshot,
    LevelKind,
    MACDValues,
    MarketCycle,
    StochasticValues,
    SupportResistanceLevel,
    Timeframe,
    Trend,
)

ALL_BULLISH = {tf: Trend.BULLISH for tf in Timeframe}
MIXED = {
    Timeframe.SHORT: Trend.BULLISH,
    Timeframe.MEDIUM: Trend.BEARISH,
    Timeframe.LONG: Trend.NEUTRAL,
}


def make_analysis(coin, baseline: float = 0.0, **indicator_fields) -> CryptoAnalysis:
    return CryptoAnalysis(
        coin=coin,
        indicators=IndicatorSnapshot(**indicator_fields),
        technical_score=50.0,
        predicted_24h_change=baseline,
    )


class TestMajorityTrend:
    """Tests for timeframe agreement."""

    def test_unanimous(self):
        """Test all timeframes agreeing."""
        assert majority_trend(IndicatorSnapshot(timeframe_trends=ALL_BULLISH)) == (Trend.BULLISH, 3)

    def test_tie_prefers_shorter_timeframe(self):
        """Test a three-way split resolves to the short timeframe."""
        assert majority_trend(IndicatorSnapshot(timeframe_trends=MIXED)) == (Trend.BULLISH, 1)


class TestConfidenceScorer:
    """Tests for ConfidenceScorer."""

    @pytest.fixture
    def scorer(self) -> ConfidenceScorer:
        return ConfidenceScorer()

    def test_rsi_floor_and_cap(self, scorer):
        """Test RSI confidence grows with distance from 50 within bounds."""
        assert scorer.rsi_confidence(IndicatorSnapshot(rsi=50)) == 20.0
        assert scorer.rsi_confidence(IndicatorSnapshot(rsi=80)) == pytest.approx(60.0)
        assert scorer.rsi_confidence(IndicatorSnapshot(rsi=0)) == 95.0

    def test_macd(self, scorer):
        """Test MACD confidence from histogram magnitude."""
        assert scorer.macd_confidence(IndicatorSnapshot()) == 50.0
        hist = IndicatorSnapshot(macd=MACDValues(histogram=-0.2))
        assert scorer.macd_confidence(hist) == pytest.approx(70.0)
        assert scorer.macd_confidence(IndicatorSnapshot(macd=MACDValues(histogram=1.0))) == 95.0

    def test_moving_average_gap(self, scorer):
        """Test MA confidence scales with the SMA gap relative to price."""
        indicators = IndicatorSnapshot(sma_20=105.0, sma_50=100.0)
        assert scorer.moving_average_confidence(indicators, 100.0) == pytest.approx(90.0)
        assert scorer.moving_average_confidence(indicators, 0.0) == 40.0

    def test_support_resistance_counts_strong_levels(self, scorer):
        """Test only levels above the strength cut-off count."""
        indicators = IndicatorSnapshot(
            support_resistance=(
                SupportResistanceLevel(90.0, LevelKind.SUPPORT, 1.0),
                SupportResistanceLevel(110.0, LevelKind.RESISTANCE, 1.0),
                SupportResistanceLevel(120.0, LevelKind.RESISTANCE, 0.5),
            )
        )
        assert scorer.support_resistance_confidence(indicators) == pytest.approx(60.0)

    def test_multi_timeframe(self, scorer):
        """Test agreement count drives timeframe confidence."""
        assert scorer.multi_timeframe_confidence(IndicatorSnapshot(timeframe_trends=ALL_BULLISH)) == 95.0
        assert scorer.multi_timeframe_confidence(IndicatorSnapshot(timeframe_trends=MIXED)) == 40.0

    def test_score_bounds(self, scorer, coin_factory):
        """Test every sub-score stays within its floor and the cap."""
        confidence = scorer.score(make_analysis(coin_factory(), rsi=99.0, adx=80.0))
        for value in confidence.to_dict().values():
            assert 10.0 <= value <= 95.0


class TestPredictionCalculator:
    """Tests for PredictionCalculator."""

    @pytest.fixture
    def calculator(self) -> PredictionCalculator:
        return PredictionCalculator()

    def test_one_hour_oversold(self, calculator):
        """Test oversold oscillators point up."""
        indicators = IndicatorSnapshot(
            rsi=25.0,
            macd=MACDValues(histogram=0.1),
            stochastic=StochasticValues(k=10.0, d=10.0),
        )
        assert calculator.one_hour(indicators) == pytest.approx(3.5)

    def test_one_hour_overbought(self, calculator):
        """Test overbought oscillators point down with MACD clamped."""
        indicators = IndicatorSnapshot(
            rsi=75.0,
            macd=MACDValues(histogram=-0.5),
            stochastic=StochasticValues(k=90.0, d=90.0),
        )
        assert calculator.one_hour(indicators) == pytest.approx(-4.0)

    def test_one_hour_neutral(self, calculator):
        """Test neutral oscillators predict no move."""
        assert calculator.one_hour(IndicatorSnapshot()) == pytest.approx(0.0)

    def test_four_hours(self, calculator):
        """Test 4h scales the baseline and follows the short trend."""
        bullish = IndicatorSnapshot(timeframe_trends={Timeframe.SHORT: Trend.BULLISH})
        bearish = IndicatorSnapshot(timeframe_trends={Timeframe.SHORT: Trend.BEARISH})
        assert calculator.four_hours(bullish, 2.0) == pytest.approx(1.1)
        assert calculator.four_hours(bearish, 2.0) == pytest.approx(0.1)

    def test_seven_days(self, calculator):
        """Test 7d doubles the baseline and adds trend and strength terms."""
        indicators = IndicatorSnapshot(
            rsi=60.0,
            adx=50.0,
            timeframe_trends={Timeframe.LONG: Trend.BULLISH},
        )
        assert calculator.seven_days(indicators, 3.0) == pytest.approx(9.5)

    def test_seven_days_cap(self, calculator):
        """Test 7d is capped at 20%."""
        assert calculator.seven_days(IndicatorSnapshot(), 12.0) == 20.0
        assert calculator.seven_days(IndicatorSnapshot(), -12.0) == -20.0

    def test_predict_keeps_baseline(self, calculator, coin_factory):
        """Test the 24h horizon is the baseline unchanged."""
        predictions = calculator.predict(make_analysis(coin_factory(), baseline=-1.25))
        assert predictions[Horizon.ONE_DAY] == -1.25
        assert set(predictions) == set(Horizon)


class TestRiskHelpers:
    """Tests for liquidity, volatility and market cycle banding."""

    def test_liquidity_bands(self, coin_factory):
        """Test volume/market-cap ratio bands."""
        assert liquidity_score(coin_factory(market_cap=100.0, total_volume=35.0)) == 95.0
        assert liquidity_score(coin_factory(market_cap=100.0, total_volume=5.0)) == 60.0
        assert liquidity_score(coin_factory(market_cap=1000.0, total_volume=5.0)) == 20.0

    def test_volatility_bands(self, coin_factory):
        """Test averaged momentum bands."""
        assert volatility_risk(coin_factory(price_change_percentage_24h=20.0)) == 50.0
        assert volatility_risk(coin_factory(price_change_percentage_24h=1.0)) == 15.0

    def test_market_cycle(self, coin_factory):
        """Test each cycle phase."""
        active = {"market_cap": 100.0, "total_volume": 20.0}
        assert market_cycle(coin_factory(
            price_change_percentage_24h=3.0, price_change_percentage_7d=12.0, **active
        )) == MarketCycle.MARKUP
        assert market_cycle(coin_factory(
            price_change_percentage_24h=-3.0, price_change_percentage_7d=-6.0, **active
        )) == MarketCycle.DISTRIBUTION
        assert market_cycle(coin_factory(
            market_cap=100.0, total_volume=1.0, price_change_percentage_30d=-20.0
        )) == MarketCycle.MARKDOWN
        assert market_cycle(coin_factory()) == MarketCycle.ACCUMULATION


class TestRiskOpportunityAnalyzer:
    """Tests for RiskOpportunityAnalyzer."""

    @pytest.fixture
    def analyzer(self) -> RiskOpportunityAnalyzer:
        return RiskOpportunityAnalyzer()

    def test_risk_factors(self, analyzer, coin_factory):
        """Test every risk rule can fire at once."""
        coin = coin_factory(
            current_price=100.0,
            market_cap=10_000_000.0,
            total_volume=100_000.0,
            market_cap_rank=400,
        )
        analysis = make_analysis(
            coin,
            rsi=85.0,
            adx=10.0,
            timeframe_trends=MIXED,
            support_resistance=(SupportResistanceLevel(102.0, LevelKind.RESISTANCE, 1.0),),
        )
        assert analyzer.risk_factors(analysis) == [
            SMALL_CAP,
            LOW_LIQUIDITY,
            EXTREME_OVERBOUGHT,
            WEAK_TREND,
            TIMEFRAME_CONFLICT,
            NEAR_RESISTANCE,
        ]
        assert analyzer.opportunity_factors(analysis) == []

    def test_opportunity_factors(self, analyzer, coin_factory):
        """Test every opportunity rule can fire at once."""
        coin = coin_factory(
            current_price=100.0,
            market_cap=1_000_000_000.0,
            total_volume=200_000_000.0,
            market_cap_rank=5,
        )
        analysis = make_analysis(
            coin,
            rsi=15.0,
            adx=40.0,
            macd=MACDValues(macd=1.0, signal=0.5, histogram=0.5),
            timeframe_trends=ALL_BULLISH,
            support_resistance=(SupportResistanceLevel(98.0, LevelKind.SUPPORT, 0.9),),
        )
        assert analyzer.opportunity_factors(analysis) == [
            EXTREME_OVERSOLD,
            MACD_BULLISH,
            ALL_TIMEFRAMES_BULLISH,
            NEAR_SUPPORT,
            HIGH_LIQUIDITY,
            TOP_RANKED,
        ]
        assert analyzer.risk_factors(analysis) == []

    def test_two_agreeing_timeframes_no_conflict(self, analyzer, coin_factory):
        """Test a 2-1 split is not a conflict."""
        trends = {
            Timeframe.SHORT: Trend.BULLISH,
            Timeframe.MEDIUM: Trend.BULLISH,
            Timeframe.LONG: Trend.BEARISH,
        }
        analysis = make_analysis(coin_factory(), adx=40.0, timeframe_trends=trends)
        assert TIMEFRAME_CONFLICT not in analyzer.risk_factors(analysis)

    def test_far_levels_ignored(self, analyzer, coin_factory):
        """Test strong levels beyond the proximity band are not flagged."""
        analysis = make_analysis(
            coin_factory(current_price=100.0),
            adx=40.0,
            support_resistance=(
                SupportResistanceLevel(90.0, LevelKind.SUPPORT, 1.0),
                SupportResistanceLevel(110.0, LevelKind.RESISTANCE, 1.0),
            ),
        )
        assert NEAR_RESISTANCE not in analyzer.risk_factors(analysis)
        assert NEAR_SUPPORT not in analyzer.opportunity_factors(analysis)

    def test_crossed_levels_ignored(self, analyzer, coin_factory):
        """Test a resistance already below the price and a support already above it are not flagged."""
        analysis = make_analysis(
            coin_factory(current_price=100.0),
            adx=40.0,
            support_resistance=(
                SupportResistanceLevel(98.0, LevelKind.RESISTANCE, 1.0),
                SupportResistanceLevel(102.0, LevelKind.SUPPORT, 1.0),
            ),
        )
        assert NEAR_RESISTANCE not in analyzer.risk_factors(analysis)
        assert NEAR_SUPPORT not in analyzer.opportunity_factors(analysis)

    def test_assess(self, analyzer, coin_factory):
        """Test assessment bundles factors with the helper bands."""
        assessment = analyzer.assess(make_analysis(coin_factory(), adx=40.0))
        assert assessment.market_cycle == MarketCycle.ACCUMULATION
        assert isinstance(assessment.risk_factors, tuple)
