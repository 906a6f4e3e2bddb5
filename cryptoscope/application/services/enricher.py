"""
Analysis Enricher - Turns a coin into an EnhancedCryptoAnalysis.

Runs the indicator engine, then the confidence scorer, prediction calculator
and risk analyzer over its output. Every step builds new objects; nothing
is mutated.
"""

import dataclasses
from typing import Optional

from cryptoscope.application.services.confidence_scorer import ConfidenceScorer
from cryptoscope.application.services.prediction_calculator import PredictionCalculator
from cryptoscope.application.services.risk_analyzer import RiskOpportunityAnalyzer
from cryptoscope.domain.entities.analysis import CryptoAnalysis, EnhancedCryptoAnalysis
from cryptoscope.domain.entities.coin import Coin
from cryptoscope.domain.entities.sentiment import SocialSentiment
from cryptoscope.domain.ports.analysis_port import TechnicalAnalysisPort
from cryptoscope.infrastructure.config import ScoringThresholds


class AnalysisEnricher:
    """Composes the per-coin analysis pipeline."""

    def __init__(
        self,
        technical_analysis: TechnicalAnalysisPort,
        thresholds: Optional[ScoringThresholds] = None,
        scorer: Optional[ConfidenceScorer] = None,
        calculator: Optional[PredictionCalculator] = None,
        risk_analyzer: Optional[RiskOpportunityAnalyzer] = None,
    ):
        thresholds = thresholds or ScoringThresholds()
        self.technical_analysis = technical_analysis
        self.scorer = scorer or ConfidenceScorer(thresholds)
        self.calculator = calculator or PredictionCalculator(thresholds)
        self.risk_analyzer = risk_analyzer or RiskOpportunityAnalyzer(thresholds)

    def enrich_analysis(self, analysis: CryptoAnalysis) -> EnhancedCryptoAnalysis:
        """Score, predict and assess an existing analysis."""
        assessment = self.risk_analyzer.assess(analysis)
        return EnhancedCryptoAnalysis(
            analysis=analysis,
            confidence=self.scorer.score(analysis),
            liquidity_score=assessment.liquidity_score,
            volatility_risk=assessment.volatility_risk,
            market_cycle=assessment.market_cycle,
            risk_factors=assessment.risk_factors,
            opportunity_factors=assessment.opportunity_factors,
            predictions=self.calculator.predict(analysis),
        )

    async def enrich(self, coin: Coin) -> EnhancedCryptoAnalysis:
        """
        Run the full pipeline for one coin.

        Raises:
            AnalysisError: If indicators cannot be computed for the coin.
        """
        analysis = await self.technical_analysis.analyze(coin)
        return self.enrich_analysis(analysis)


def with_sentiment(
    enhanced: EnhancedCryptoAnalysis,
    sentiment: SocialSentiment,
) -> EnhancedCryptoAnalysis:
    """Copy of ``enhanced`` carrying a social sentiment reading."""
    return dataclasses.replace(enhanced, social_sentiment=sentiment)
