"""
Tests for domain entities.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime

import pytest

from cryptoscope.domain.entities.analysis import (
    BollingerValues,
    Horizon,
    IndicatorSnapshot,
    Timeframe,
    Trend,
)
from cryptoscope.domain.entities.coin import Coin, CoinListRequest
from cryptoscope.domain.entities.market_data import PriceHistory, PricePoint
from cryptoscope.domain.entities.result import Err, Ok, SourceResult
from cryptoscope.domain.entities.sentiment import PlatformSentiment, SocialSentiment
from cryptoscope.domain.errors import AllSourcesFailedError, SourceError


class TestCoin:
    """Tests for Coin entity."""

    def test_volume_to_market_cap(self, coin_factory):
        """Test liquidity ratio calculation."""
        coin = coin_factory(market_cap=1000.0, total_volume=150.0)
        assert coin.volume_to_market_cap == pytest.approx(0.15)

    def test_volume_to_market_cap_without_market_cap(self, coin_factory):
        """Test ratio is zero when market cap is unknown."""
        coin = coin_factory(market_cap=0.0, total_volume=150.0)
        assert coin.volume_to_market_cap == 0.0

    def test_display_symbol(self, coin_factory):
        """Test symbol is upper-cased for display."""
        assert coin_factory(symbol="eth").display_symbol == "ETH"

    def test_is_frozen(self, coin_factory):
        """Test coins cannot be mutated after creation."""
        coin = coin_factory()
        with pytest.raises(FrozenInstanceError):
            coin.current_price = 1.0  # type: ignore[misc]

    def test_to_dict_lists(self):
        """Test tuples are serialized as lists."""
        coin = Coin(
            id="bitcoin",
            symbol="btc",
            name="Bitcoin",
            current_price=1.0,
            sparkline=(1.0, 2.0),
            categories=("Layer 1",),
        )
        data = coin.to_dict()
        assert data["sparkline"] == [1.0, 2.0]
        assert data["categories"] == ["Layer 1"]
        assert data["market_cap_rank"] is None


class TestCoinListRequest:
    """Tests for CoinListRequest."""

    def test_offset_first_page(self):
        """Test first page starts at zero."""
        assert CoinListRequest(per_page=50, page=1).offset == 0

    def test_offset_later_page(self):
        """Test offset for later pages."""
        assert CoinListRequest(per_page=50, page=3).offset == 100


class TestPriceHistory:
    """Tests for PriceHistory."""

    def test_prices_in_order(self):
        """Test prices are returned oldest first."""
        history = PriceHistory(
            coin_id="bitcoin",
            points=(PricePoint(1000, 1.0), PricePoint(2000, 2.0)),
        )
        assert history.prices == [1.0, 2.0]
        assert len(history) == 2


class TestResult:
    """Tests for the tagged result type."""

    def test_ok(self):
        """Test Ok carries a value."""
        result = Ok([1, 2])
        assert result.is_ok
        assert result.value == [1, 2]

    def test_err(self):
        """Test Err carries a source error."""
        result = Err(SourceError("CoinGecko API", "boom"))
        assert not result.is_ok
        assert result.error.source == "CoinGecko API"

    def test_source_result(self):
        """Test SourceResult pairs data with its provenance."""
        result = SourceResult(data=[1], source="CoinPaprika API", attempts=4)
        assert result.source == "CoinPaprika API"
        assert result.attempts == 4


class TestErrors:
    """Tests for domain errors."""

    def test_source_error_message(self):
        """Test source name prefixes the message."""
        error = SourceError("Bitstamp API", "HTTP 500", status_code=500)
        assert str(error) == "[Bitstamp API] HTTP 500"
        assert error.status_code == 500

    def test_all_sources_failed_message(self):
        """Test aggregated error names the request and the last error."""
        last = SourceError("Bitstamp API", "HTTP 503")
        error = AllSourcesFailedError("coin listing", ["a", "b"], last)
        assert "coin listing" in str(error)
        assert "2 tried" in str(error)
        assert "Last error: [Bitstamp API] HTTP 503" in str(error)
        assert error.last_error is last


class TestIndicatorSnapshot:
    """Tests for IndicatorSnapshot helpers."""

    def test_missing_timeframe_is_neutral(self):
        """Test unclassified timeframes read as NEUTRAL."""
        snapshot = IndicatorSnapshot(timeframe_trends={Timeframe.SHORT: Trend.BULLISH})
        assert snapshot.trend(Timeframe.SHORT) == Trend.BULLISH
        assert snapshot.trend(Timeframe.LONG) == Trend.NEUTRAL

    def test_bollinger_position(self):
        """Test band position is 0 at the lower band and 1 at the upper."""
        bands = BollingerValues(upper=110.0, middle=100.0, lower=90.0)
        assert bands.position(90.0) == pytest.approx(0.0)
        assert bands.position(110.0) == pytest.approx(1.0)
        assert bands.position(100.0) == pytest.approx(0.5)

    def test_bollinger_position_flat_band(self):
        """Test a zero-width band reads as the middle."""
        assert BollingerValues(100.0, 100.0, 100.0).position(100.0) == 0.5


class TestEnhancedCryptoAnalysis:
    """Tests for EnhancedCryptoAnalysis."""

    def test_prediction_24h(self, enhanced_factory):
        """Test 24h prediction comes from the predictions mapping."""
        enhanced = enhanced_factory(prediction_24h=-2.5)
        assert enhanced.prediction_24h == -2.5

    def test_to_dict(self, enhanced_factory):
        """Test serialization uses horizon labels and enum values."""
        data = enhanced_factory(prediction_24h=1.5).to_dict()
        assert data["predictions"]["24h"] == 1.5
        assert set(data["predictions"]) == {h.value for h in Horizon}
        assert data["market_cycle"] == "ACCUMULATION"
        assert data["social_sentiment"] is None

    def test_summary(self, enhanced_factory, coin_factory):
        """Test summary string for logging."""
        enhanced = enhanced_factory(coin=coin_factory(symbol="sol"), prediction_24h=2.0)
        assert enhanced.summary.startswith("SOL: 24h=+2.00%")


class TestSocialSentiment:
    """Tests for SocialSentiment aggregation."""

    def test_overall_score_is_mean(self):
        """Test overall score averages platforms."""
        sentiment = SocialSentiment(
            coin_id="bitcoin",
            platforms=(
                PlatformSentiment("fear_greed", 70.0),
                PlatformSentiment("reddit", 60.0),
                PlatformSentiment("coingecko_community", 80.0),
            ),
            fetched_at=datetime(2024, 1, 1),
        )
        assert sentiment.overall_score == pytest.approx(70.0)
        assert sentiment.trend == "BULLISH"

    def test_empty_is_neutral(self):
        """Test no platforms reads as neutral."""
        sentiment = SocialSentiment(coin_id="bitcoin", platforms=())
        assert sentiment.overall_score == 50.0
        assert sentiment.trend == "NEUTRAL"

    def test_failed_platforms(self):
        """Test defaulted platforms are reported."""
        sentiment = SocialSentiment(
            coin_id="bitcoin",
            platforms=(
                PlatformSentiment("fear_greed", 20.0),
                PlatformSentiment("reddit", 50.0, is_default=True),
            ),
        )
        assert sentiment.failed_platforms == ["reddit"]
        assert sentiment.trend == "BEARISH"
