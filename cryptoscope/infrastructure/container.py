"""
Dependency injection container for the application.
"""

from dataclasses import dataclass
from typing import Optional

from cryptoscope.adapters.sentiment.social_sentiment import SocialSentimentService
from cryptoscope.adapters.sources import CoinGeckoCategoryLookup, build_sources
from cryptoscope.application.services.category_filter import CategoryFilter
from cryptoscope.application.services.enricher import AnalysisEnricher
from cryptoscope.application.services.failover import FailoverOrchestrator
from cryptoscope.application.services.ranker import RecommendationRanker
from cryptoscope.application.services.technical_indicators import TechnicalIndicatorEngine
from cryptoscope.application.use_cases.recommendation_cycle import RecommendationCycleUseCase
from cryptoscope.infrastructure.config import Settings


@dataclass
class Container:
    """
    Dependency injection container.

    Provides configured instances of all application components.
    """

    settings: Settings

    # Adapters
    orchestrator: FailoverOrchestrator
    category_lookup: Optional[CoinGeckoCategoryLookup]
    sentiment_service: Optional[SocialSentimentService]

    # Services
    category_filter: CategoryFilter
    indicator_engine: TechnicalIndicatorEngine
    enricher: AnalysisEnricher
    ranker: RecommendationRanker

    # Use cases
    recommendation_cycle: RecommendationCycleUseCase

    _initialized: bool = False


_container: Optional[Container] = None


async def create_container(settings: Optional[Settings] = None) -> Container:
    """
    Create and configure the dependency container.

    Args:
        settings: Optional settings override

    Returns:
        Configured Container instance.
    """
    global _container

    if settings is None:
        from cryptoscope.infrastructure.config import get_settings
        settings = get_settings()

    thresholds = settings.thresholds

    # Create adapters
    orchestrator = FailoverOrchestrator(build_sources(settings))

    category_lookup: Optional[CoinGeckoCategoryLookup] = None
    if settings.enable_category_lookup:
        category_lookup = CoinGeckoCategoryLookup(
            base_url=settings.coingecko_base_url,
            cache_ttl_seconds=settings.category_cache_ttl_seconds,
            timeout=settings.http_timeout_seconds,
        )

    sentiment_service: Optional[SocialSentimentService] = None
    if settings.enable_social_sentiment:
        sentiment_service = SocialSentimentService(
            fear_greed_url=settings.fear_greed_url,
            reddit_search_url=settings.reddit_search_url,
            coingecko_base_url=settings.coingecko_base_url,
            timeout=settings.http_timeout_seconds,
        )

    # Create services
    category_filter = CategoryFilter(thresholds)
    indicator_engine = TechnicalIndicatorEngine(
        orchestrator=orchestrator,
        thresholds=thresholds,
        history_days=settings.history_days,
        vs_currency=settings.vs_currency,
    )
    enricher = AnalysisEnricher(indicator_engine, thresholds)
    ranker = RecommendationRanker(
        enricher=enricher,
        thresholds=thresholds,
        batch_size=settings.batch_size,
        batch_delay_seconds=settings.batch_delay_seconds,
        early_stop_multiplier=settings.early_stop_multiplier,
    )

    # Create use cases
    recommendation_cycle = RecommendationCycleUseCase(
        orchestrator=orchestrator,
        category_filter=category_filter,
        ranker=ranker,
        settings=settings,
        category_lookup=category_lookup,
        sentiment=sentiment_service,
    )

    _container = Container(
        settings=settings,
        orchestrator=orchestrator,
        category_lookup=category_lookup,
        sentiment_service=sentiment_service,
        category_filter=category_filter,
        indicator_engine=indicator_engine,
        enricher=enricher,
        ranker=ranker,
        recommendation_cycle=recommendation_cycle,
        _initialized=True,
    )

    return _container


def get_container() -> Container:
    """
    Get the current container instance.

    Returns:
        The configured Container.

    Raises:
        RuntimeError: If container not initialized.
    """
    if _container is None:
        raise RuntimeError("Container not initialized. Call create_container() first.")
    return _container


async def cleanup_container() -> None:
    """Clean up container resources."""
    global _container

    if _container is not None:
        await _container.orchestrator.close()
        if _container.category_lookup:
            await _container.category_lookup.close()
        if _container.sentiment_service:
            await _container.sentiment_service.close()
        _container = None
