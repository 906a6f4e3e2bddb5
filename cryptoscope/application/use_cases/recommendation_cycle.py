"""
Recommendation Cycle Use Case - Fetch, filter, analyze and rank in one run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from cryptoscope.application.services.category_filter import CategoryFilter
from cryptoscope.application.services.enricher import with_sentiment
from cryptoscope.application.services.failover import NO_SOURCE, FailoverOrchestrator
from cryptoscope.application.services.ranker import RecommendationRanker
from cryptoscope.domain.entities.analysis import EnhancedCryptoAnalysis
from cryptoscope.domain.entities.coin import CoinListRequest
from cryptoscope.domain.errors import AllSourcesFailedError
from cryptoscope.domain.ports.analysis_port import CategoryPort, SentimentPort
from cryptoscope.infrastructure.config import Settings
from cryptoscope.infrastructure.logging import cycle_logging, get_logger, new_cycle_id

logger = get_logger(__name__)


@dataclass
class CycleResult:
    """Result of one recommendation cycle."""

    start_time: datetime
    end_time: datetime
    success: bool
    data_source: str = NO_SOURCE
    cycle_id: str = ""

    coins_fetched: int = 0
    coins_excluded: int = 0
    coins_failed: int = 0
    recommendations: list[EnhancedCryptoAnalysis] = field(default_factory=list)

    errors: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the cycle produced no recommendations."""
        return not self.recommendations

    @property
    def total_duration_seconds(self) -> float:
        """Calculate total duration."""
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "cycle_id": self.cycle_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "total_duration_seconds": self.total_duration_seconds,
            "success": self.success,
            "data_source": self.data_source,
            "coins_fetched": self.coins_fetched,
            "coins_excluded": self.coins_excluded,
            "coins_failed": self.coins_failed,
            "is_empty": self.is_empty,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "errors": self.errors,
        }


class RecommendationCycleUseCase:
    """
    Orchestrates one end-to-end recommendation run.

    The cycle consists of:
    1. Listing: fetch a page of coins through the failover orchestrator
    2. Filtering: drop stablecoins, wrapped and staked tokens
    3. Ranking: batched enrichment, hard filters and sort
    4. Sentiment (optional): attach social sentiment to the ranked coins

    An empty ranking is a valid outcome. Exhausted sources mark the cycle as
    failed instead of raising.
    """

    def __init__(
        self,
        orchestrator: FailoverOrchestrator,
        category_filter: CategoryFilter,
        ranker: RecommendationRanker,
        settings: Settings,
        category_lookup: Optional[CategoryPort] = None,
        sentiment: Optional[SentimentPort] = None,
    ):
        """
        Initialize the recommendation cycle.

        Args:
            orchestrator: Failover orchestrator for the listing
            category_filter: Exclusion predicate
            ranker: Recommendation ranker
            settings: Application settings
            category_lookup: Optional category label source
            sentiment: Optional social sentiment source
        """
        self.orchestrator = orchestrator
        self.category_filter = category_filter
        self.ranker = ranker
        self.settings = settings
        self.category_lookup = category_lookup
        self.sentiment = sentiment

    async def run(
        self,
        limit: Optional[int] = None,
        per_page: Optional[int] = None,
        page: int = 1,
    ) -> CycleResult:
        """
        Run the recommendation cycle.

        Args:
            limit: Number of recommendations (defaults to settings)
            per_page: Coins requested from the listing (defaults to settings)
            page: Listing page, 1-based

        Returns:
            CycleResult with the ranked recommendations.
        """
        with cycle_logging(new_cycle_id()) as cycle_id:
            return await self._run(cycle_id, limit, per_page, page)

    async def _run(
        self,
        cycle_id: str,
        limit: Optional[int],
        per_page: Optional[int],
        page: int,
    ) -> CycleResult:
        limit = limit if limit is not None else self.settings.recommendation_limit
        request = CoinListRequest(
            vs_currency=self.settings.vs_currency,
            per_page=per_page if per_page is not None else self.settings.coins_per_page,
            page=page,
        )
        logger.info(
            "Starting recommendation cycle",
            limit=limit,
            per_page=request.per_page,
            page=request.page,
        )

        start_time = datetime.now()
        result = CycleResult(
            start_time=start_time,
            end_time=start_time,
            success=True,
            cycle_id=cycle_id,
        )

        try:
            listing = await self.orchestrator.fetch_coins(request)
        except AllSourcesFailedError as e:
            logger.error("Recommendation cycle failed", error=str(e))
            result.success = False
            result.errors.append(str(e))
            result.end_time = datetime.now()
            return result

        result.data_source = listing.source
        coins = [c for c in listing.data if c.current_price > 0]
        result.coins_fetched = len(coins)

        categories_by_id: dict[str, list[str]] = {}
        if self.category_lookup is not None:
            for coin in coins:
                categories_by_id[coin.id] = await self.category_lookup.get_categories(coin.id)

        candidates = self.category_filter.filter(coins, categories_by_id)
        result.coins_excluded = len(coins) - len(candidates)
        logger.info(
            "Filtered candidates",
            source=listing.source,
            fetched=len(coins),
            remaining=len(candidates),
        )

        ranked = await self.ranker.rank(candidates, limit=limit)
        result.coins_failed = len(self.ranker.failures)
        result.errors.extend(f"{coin_id}: {error}" for coin_id, error in self.ranker.failures.items())

        if self.sentiment is not None:
            ranked = [
                with_sentiment(analysis, await self.sentiment.get_sentiment(analysis.coin))
                for analysis in ranked
            ]

        result.recommendations = ranked
        result.end_time = datetime.now()

        if result.is_empty:
            logger.warning("No coins survived filtering and ranking")
        logger.info(
            "Recommendation cycle complete",
            success=result.success,
            source=result.data_source,
            duration=result.total_duration_seconds,
            recommendations=len(ranked),
        )
        return result
