"""
Tests for the command line entry point.
"""

from datetime import datetime

from cryptoscope.application.use_cases.recommendation_cycle import CycleResult
from cryptoscope.main import format_result, parse_args

from tests.conftest import build_coin, build_enhanced


def cycle_result(**overrides) -> CycleResult:
    values = {
        "start_time": datetime(2024, 1, 1, 12, 0, 0),
        "end_time": datetime(2024, 1, 1, 12, 0, 3),
        "success": True,
        "data_source": "CoinPaprika API",
    }
    values.update(overrides)
    return CycleResult(**values)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test optional sizes fall back to configuration."""
        args = parse_args([])
        assert args.limit is None
        assert args.per_page is None
        assert args.page == 1
        assert not args.sentiment
        assert args.log_level == "INFO"

    def test_options(self):
        """Test every option is parsed."""
        args = parse_args(["--limit", "5", "--per-page", "250", "--page", "2", "--sentiment", "--json"])
        assert (args.limit, args.per_page, args.page) == (5, 250, 2)
        assert args.sentiment
        assert args.json


class TestFormatResult:
    """Tests for table rendering."""

    def test_recommendations_table(self):
        """Test rows list the symbol and the data source is shown."""
        enhanced = build_enhanced(coin=build_coin(id="solana", symbol="sol", name="Solana"), prediction_24h=-2.5)
        text = format_result(cycle_result(recommendations=[enhanced]))

        assert "Data source: CoinPaprika API" in text
        assert "SOL" in text
        assert "-2.50" in text

    def test_empty(self):
        """Test the empty outcome message."""
        assert "No recommendations" in format_result(cycle_result())

    def test_failure(self):
        """Test exhausted sources are reported."""
        text = format_result(cycle_result(success=False, data_source="none", errors=["All sources failed"]))
        assert "Market data unavailable:" in text
        assert "All sources failed" in text
