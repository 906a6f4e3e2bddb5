"""
Analysis Ports - Interfaces for the indicator engine and its optional collaborators.
"""

from abc import ABC, abstractmethod

from cryptoscope.domain.entities.analysis import CryptoAnalysis
from cryptoscope.domain.entities.coin import Coin
from cryptoscope.domain.entities.sentiment import SocialSentiment


class TechnicalAnalysisPort(ABC):
    """
    Port interface for technical indicator analysis.

    Implementations:
        - TechnicalIndicatorEngine: computes indicators from price history
    """

    @abstractmethod
    async def analyze(self, coin: Coin) -> CryptoAnalysis:
        """
        Compute the indicator snapshot and technical score for a coin.

        Args:
            coin: Canonical coin record

        Returns:
            CryptoAnalysis for this cycle.

        Raises:
            AnalysisError: If indicators cannot be computed for this coin.
        """
        ...


class SentimentPort(ABC):
    """Port interface for cross-platform social sentiment."""

    @abstractmethod
    async def get_sentiment(self, coin: Coin) -> SocialSentiment:
        """
        Fetch sentiment for a coin from every platform.

        Never fails as a whole: platforms that fail contribute their default.
        """
        ...


class CategoryPort(ABC):
    """Port interface for coin category labels."""

    @abstractmethod
    async def get_categories(self, coin_id: str) -> list[str]:
        """
        Fetch category labels for a coin.

        Returns:
            Category labels, empty when unknown or unavailable.
        """
        ...
