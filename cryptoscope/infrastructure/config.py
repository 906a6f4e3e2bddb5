"""
Application configuration using Pydantic Settings.
"""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringThresholds(BaseModel):
    """
    Tuning constants for scoring, prediction, risk analysis and ranking.

    Override individual values with ``THRESHOLDS__<FIELD>`` environment
    variables, e.g. ``THRESHOLDS__MIN_TECHNICAL_SCORE=40``.
    """

    # Confidence sub-scores
    confidence_cap: float = 95.0
    rsi_confidence_floor: float = 20.0
    rsi_confidence_scale: float = 2.0
    macd_confidence_base: float = 50.0
    macd_confidence_scale: float = 100.0
    ma_confidence_base: float = 40.0
    ma_confidence_scale: float = 10.0
    sr_confidence_base: float = 30.0
    sr_confidence_per_level: float = 15.0
    strong_level_strength: float = 0.7
    timeframe_confidence_base: float = 10.0
    timeframe_confidence_per_agreement: float = 30.0

    # Horizon predictions
    prediction_1h_cap: float = 5.0
    prediction_4h_baseline_weight: float = 0.3
    prediction_4h_trend_adjustment: float = 0.5
    prediction_7d_baseline_multiplier: float = 2.0
    prediction_7d_trend_adjustment: float = 2.0
    prediction_7d_strength_weight: float = 3.0
    prediction_7d_cap: float = 20.0

    # Oscillator extremes
    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    rsi_extreme_oversold: float = 20.0
    rsi_extreme_overbought: float = 80.0
    stochastic_oversold: float = 20.0
    stochastic_overbought: float = 80.0

    # Risk / opportunity factors
    small_cap_threshold: float = 50_000_000.0
    low_liquidity_ratio: float = 0.02
    high_liquidity_ratio: float = 0.15
    weak_trend_adx: float = 20.0
    level_proximity_pct: float = 3.0
    top_rank_threshold: int = 50

    # Category filter peg heuristic
    peg_max_abs_change_24h: float = 2.0
    peg_price_low: float = 0.85
    peg_price_high: float = 1.15

    # Ranking
    min_abs_prediction_24h: float = 0.1
    min_technical_score: float = 30.0
    prediction_tie_tolerance: float = 0.1
    score_tie_tolerance: float = 3.0


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream providers
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL (primary source)",
    )
    coinpaprika_base_url: str = Field(
        default="https://api.coinpaprika.com/v1",
        description="CoinPaprika API base URL",
    )
    cryptocompare_base_url: str = Field(
        default="https://min-api.cryptocompare.com/data",
        description="CryptoCompare API base URL",
    )
    bitstamp_base_url: str = Field(
        default="https://www.bitstamp.net/api/v2",
        description="Bitstamp API base URL",
    )
    cors_relays: list[str] = Field(
        default=[
            "https://api.allorigins.win/raw?url=",
            "https://corsproxy.io/?",
        ],
        description="CORS relay prefixes used as fallback transports for CoinGecko",
    )
    http_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for each upstream HTTP request",
    )

    # Social sentiment
    enable_social_sentiment: bool = Field(
        default=False,
        description="Fetch cross-platform social sentiment for ranked coins",
    )
    fear_greed_url: str = Field(
        default="https://api.alternative.me/fng/",
        description="Alternative.me Fear & Greed endpoint",
    )
    reddit_search_url: str = Field(
        default="https://www.reddit.com/r/CryptoCurrency/search.json",
        description="Reddit subreddit search endpoint",
    )

    # Listing defaults
    vs_currency: str = Field(default="usd", description="Quote currency")
    coins_per_page: int = Field(
        default=100,
        description="Number of coins requested from the listing",
    )

    # Ranking
    recommendation_limit: int = Field(
        default=10,
        description="Number of ranked recommendations returned (K)",
    )
    batch_size: int = Field(
        default=10,
        description="Coins analyzed per batch",
    )
    batch_delay_seconds: float = Field(
        default=1.0,
        description="Pause between batches to smooth load on rate-limited upstreams",
    )
    early_stop_multiplier: int = Field(
        default=2,
        description="Stop analyzing once valid analyses reach multiplier x K",
    )
    history_days: int = Field(
        default=30,
        description="Days of price history used for indicators",
    )
    category_cache_ttl_seconds: int = Field(
        default=86400,
        description="How long category lookups are cached in memory",
    )
    enable_category_lookup: bool = Field(
        default=False,
        description="Fetch CoinGecko categories for each candidate before filtering",
    )

    thresholds: ScoringThresholds = Field(default_factory=ScoringThresholds)

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
