"""
Domain ports - Interface definitions for hexagonal architecture.
"""

from cryptoscope.domain.ports.analysis_port import (
    CategoryPort,
    SentimentPort,
    TechnicalAnalysisPort,
)
from cryptoscope.domain.ports.market_data_port import MarketDataSourcePort

__all__ = [
    "MarketDataSourcePort",
    "TechnicalAnalysisPort",
    "SentimentPort",
    "CategoryPort",
]
