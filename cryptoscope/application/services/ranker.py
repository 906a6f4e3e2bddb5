"""
Recommendation Ranker - Batched enrichment, hard filters and three-tier sort.

Process:
1. Enrich candidates in fixed-size batches, one coin at a time, pausing
   between batches to go easy on rate-limited upstreams
2. Drop insignificant predictions (|24h| < 0.1%) and low-confidence
   analyses (technical score < 30)
3. Stop early once 2 x K analyses survived the filters
4. Sort by conviction and return the top K

Sort order (each tier breaks near-ties of the previous one):
- |24h prediction| descending, unless within 0.1 points
- technical score descending, unless within 3 points
- multi-timeframe confidence descending
"""

import asyncio
import functools
from typing import Awaitable, Callable, Optional

from cryptoscope.application.services.enricher import AnalysisEnricher
from cryptoscope.domain.entities.analysis import EnhancedCryptoAnalysis
from cryptoscope.domain.entities.coin import Coin
from cryptoscope.domain.errors import CryptoscopeError
from cryptoscope.infrastructure.config import ScoringThresholds
from cryptoscope.infrastructure.logging import get_logger

logger = get_logger(__name__)


def _descending(a: float, b: float) -> int:
    if a > b:
        return -1
    if a < b:
        return 1
    return 0


def compare_analyses(
    a: EnhancedCryptoAnalysis,
    b: EnhancedCryptoAnalysis,
    thresholds: ScoringThresholds,
) -> int:
    """Three-tier comparator; negative when ``a`` ranks first."""
    magnitude_a = abs(a.prediction_24h)
    magnitude_b = abs(b.prediction_24h)
    if abs(magnitude_a - magnitude_b) > thresholds.prediction_tie_tolerance:
        return _descending(magnitude_a, magnitude_b)

    if abs(a.technical_score - b.technical_score) > thresholds.score_tie_tolerance:
        return _descending(a.technical_score, b.technical_score)

    return _descending(a.confidence.multi_timeframe, b.confidence.multi_timeframe)


class RecommendationRanker:
    """
    Ranks candidate coins by prediction conviction.

    Owns the working set for one cycle; nothing is kept between calls.
    """

    def __init__(
        self,
        enricher: AnalysisEnricher,
        thresholds: Optional[ScoringThresholds] = None,
        batch_size: int = 10,
        batch_delay_seconds: float = 1.0,
        early_stop_multiplier: int = 2,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the ranker.

        Args:
            enricher: Per-coin analysis pipeline
            thresholds: Filter and tie-break thresholds
            batch_size: Coins enriched per batch
            batch_delay_seconds: Pause between batches
            early_stop_multiplier: Stop once this many x K analyses are kept
            sleep: Awaitable sleep, replaceable in tests
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.enricher = enricher
        self.thresholds = thresholds or ScoringThresholds()
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds
        self.early_stop_multiplier = early_stop_multiplier
        self._sleep = sleep
        self.failures: dict[str, str] = {}

    def passes_filters(self, analysis: EnhancedCryptoAnalysis) -> bool:
        t = self.thresholds
        if abs(analysis.prediction_24h) < t.min_abs_prediction_24h:
            return False
        if analysis.technical_score < t.min_technical_score:
            return False
        return True

    def sort(self, analyses: list[EnhancedCryptoAnalysis]) -> list[EnhancedCryptoAnalysis]:
        """Stable three-tier sort."""
        key = functools.cmp_to_key(
            lambda a, b: compare_analyses(a, b, self.thresholds)
        )
        return sorted(analyses, key=key)

    async def _enrich(self, coin: Coin) -> Optional[EnhancedCryptoAnalysis]:
        try:
            return await self.enricher.enrich(coin)
        except CryptoscopeError as e:
            self.failures[coin.id] = str(e)
            logger.warning("Failed to analyze coin", coin_id=coin.id, error=str(e))
            return None
        except Exception as e:
            self.failures[coin.id] = repr(e)
            logger.exception("Unexpected error analyzing coin", coin_id=coin.id)
            return None

    async def rank(self, coins: list[Coin], limit: int = 10) -> list[EnhancedCryptoAnalysis]:
        """
        Enrich, filter, sort and slice candidates.

        Args:
            coins: Candidate coins (already category-filtered)
            limit: Number of recommendations to return (K)

        Returns:
            Up to ``limit`` analyses, best first. Empty if nothing survived.
        """
        self.failures = {}
        if limit <= 0 or not coins:
            return []

        target = self.early_stop_multiplier * limit
        total_batches = (len(coins) + self.batch_size - 1) // self.batch_size
        kept: list[EnhancedCryptoAnalysis] = []
        analyzed = 0

        for batch_index, start in enumerate(range(0, len(coins), self.batch_size), start=1):
            batch = coins[start:start + self.batch_size]
            logger.debug(
                "Processing batch",
                batch=batch_index,
                total_batches=total_batches,
                size=len(batch),
            )

            for coin in batch:
                if coin.current_price <= 0:
                    continue
                enhanced = await self._enrich(coin)
                if enhanced is None:
                    continue
                analyzed += 1
                if self.passes_filters(enhanced):
                    kept.append(enhanced)

            if len(kept) >= target:
                logger.info("Early stop", kept=len(kept), target=target, batches=batch_index)
                break
            if batch_index < total_batches:
                await self._sleep(self.batch_delay_seconds)

        ranked = self.sort(kept)[:limit]
        logger.info(
            "Ranking complete",
            candidates=len(coins),
            analyzed=analyzed,
            failed=len(self.failures),
            kept=len(kept),
            returned=len(ranked),
        )
        for analysis in ranked[:5]:
            logger.debug("Ranked coin", summary=analysis.summary)
        return ranked
