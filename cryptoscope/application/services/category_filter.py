"""
Category Filter - Excludes stablecoins, wrapped and staked tokens from recommendations.

A coin is excluded when ANY rule matches:
- a category label overlaps an excluded category (case-insensitive substring
  in either direction)
- the symbol is a known stablecoin symbol
- the name contains a stablecoin or fiat keyword
- the name or symbol contains a wrapped/staked pattern, or the symbol is a
  "w"-prefixed major chain ticker
- the price behaves like a peg: tiny 24h move inside a band around 1.0

False positives are accepted: a low-volatility coin trading near 1.0 is
excluded even if it is not pegged.
"""

from typing import Iterable, Mapping, Optional

from cryptoscope.domain.entities.coin import Coin
from cryptoscope.infrastructure.config import ScoringThresholds
from cryptoscope.infrastructure.logging import get_logger

logger = get_logger(__name__)

EXCLUDED_CATEGORIES = (
    # Stablecoins
    "Stablecoins",
    "USD Stablecoin",
    "Fiat-backed Stablecoin",
    "Algorithmic Stablecoin",
    "Euro Stablecoin",
    "Stablecoin",
    "USD-pegged",
    "Fiat-pegged",
    "Asset-backed Stablecoin",
    "Collateralized Stablecoin",
    "Decentralized Stablecoin",
    "Centralized Stablecoin",
    # Wrapped tokens
    "Wrapped-Tokens",
    "Crypto-Backed Tokens",
    "Wrapped Tokens",
    "Bridged Tokens",
    # Staking derivatives
    "Liquid Staking Tokens",
    "Staking Derivatives",
    "Liquid Staking Derivatives",
    "Staked Tokens",
    "Liquid Staking",
    # Other
    "Synthetic Assets",
    "Tokenized Gold",
    "Tokenized Commodities",
    "Central Bank Digital Currency (CBDC)",
    "CBDC",
)

STABLECOIN_SYMBOLS = frozenset({
    "usdt", "usdc", "busd", "dai", "tusd", "frax", "lusd", "usdd", "usdp", "gusd",
    "husd", "susd", "cusd", "ousd", "musd", "dusd", "yusd", "rusd", "nusd",
    "usdn", "ustc", "ust", "vai", "mim", "fei", "tribe", "rai", "float",
    "eurc", "eurs", "eurt", "gbpt", "jpyc", "cadc", "audc", "nzds",
    "paxg", "xaut", "dgld", "pmgt", "cache", "usdx", "usdk", "usds",
})

STABLECOIN_NAME_PATTERNS = (
    "usd", "dollar", "stable", "peg", "backed", "reserve", "tether",
    "centre", "paxos", "trueusd", "gemini", "binance usd", "terrausd",
    "euro", "eur", "pound", "gbp", "yen", "jpy", "yuan", "cny",
    "canadian", "cad", "australian", "aud", "swiss", "chf",
)

WRAPPED_PATTERNS = (
    "wrapped", "staked", "liquid staking", "staking derivative",
    "weth", "wbtc", "wbnb", "wmatic", "wavax", "wftm", "wsol",
    "steth", "reth", "cbeth", "sfrxeth", "ankr", "lido",
)

WRAPPED_CHAIN_TICKERS = ("eth", "btc", "bnb", "matic", "avax", "ftm", "sol")


def matches_excluded_category(categories: Optional[Iterable[str]]) -> bool:
    """True if any category overlaps an excluded category."""
    for category in categories or ():
        label = category.lower().strip()
        if not label:
            continue
        for excluded in EXCLUDED_CATEGORIES:
            excluded_lower = excluded.lower()
            if excluded_lower in label or label in excluded_lower:
                return True
    return False


class CategoryFilter:
    """
    Pure exclusion predicate for recommendation candidates.

    Holds no state besides its thresholds, so filtering is idempotent:
    filtering an already-filtered list returns it unchanged.
    """

    def __init__(self, thresholds: Optional[ScoringThresholds] = None):
        self.thresholds = thresholds or ScoringThresholds()

    def exclusion_reason(self, coin: Coin, categories: Optional[Iterable[str]] = None) -> Optional[str]:
        """
        Name of the first rule that excludes the coin, or None to keep it.

        Args:
            coin: Candidate coin
            categories: Category labels; falls back to ``coin.categories``
        """
        labels = list(categories) if categories is not None else list(coin.categories)
        if matches_excluded_category(labels):
            return "category"

        name = coin.name.lower()
        symbol = coin.symbol.lower()

        if symbol in STABLECOIN_SYMBOLS:
            return "stablecoin_symbol"
        if any(pattern in name for pattern in STABLECOIN_NAME_PATTERNS):
            return "stablecoin_name"
        if any(pattern in name or pattern in symbol for pattern in WRAPPED_PATTERNS):
            return "wrapped_or_staked"
        if symbol.startswith("w") and any(t in symbol for t in WRAPPED_CHAIN_TICKERS):
            return "wrapped_symbol"

        t = self.thresholds
        if (
            abs(coin.price_change_percentage_24h) < t.peg_max_abs_change_24h
            and t.peg_price_low <= coin.current_price <= t.peg_price_high
        ):
            return "peg_behavior"
        return None

    def should_exclude(self, coin: Coin, categories: Optional[Iterable[str]] = None) -> bool:
        """True if the coin must not be recommended."""
        return self.exclusion_reason(coin, categories) is not None

    def filter(
        self,
        coins: list[Coin],
        categories_by_id: Optional[Mapping[str, list[str]]] = None,
    ) -> list[Coin]:
        """
        Drop excluded coins, preserving order.

        Args:
            coins: Candidate coins
            categories_by_id: Optional category labels keyed by coin id

        Returns:
            Coins that passed every rule.
        """
        categories_by_id = categories_by_id or {}
        kept: list[Coin] = []
        excluded: dict[str, str] = {}
        for coin in coins:
            reason = self.exclusion_reason(coin, categories_by_id.get(coin.id))
            if reason:
                excluded[coin.symbol] = reason
            else:
                kept.append(coin)

        if excluded:
            logger.debug("Excluded coins", count=len(excluded), reasons=excluded)
        return kept
