"""
Sentiment entities - Cross-platform social sentiment readings.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class PlatformSentiment:
    """
    Sentiment reading from a single platform.

    Attributes:
        platform: Platform name (e.g. "fear_greed", "reddit")
        score: 0-100, 50 is neutral
        label: Human-readable classification
        is_default: True when the platform failed and the default was substituted
    """

    platform: str
    score: float
    label: str = "Neutral"
    is_default: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform,
            "score": self.score,
            "label": self.label,
            "is_default": self.is_default,
        }


@dataclass(frozen=True)
class SocialSentiment:
    """Aggregated sentiment for one coin across all platforms."""

    coin_id: str
    platforms: tuple[PlatformSentiment, ...]
    fetched_at: datetime = field(default_factory=datetime.now)

    @property
    def overall_score(self) -> float:
        """Mean platform score, 50 when no platform is present."""
        if not self.platforms:
            return 50.0
        return sum(p.score for p in self.platforms) / len(self.platforms)

    @property
    def trend(self) -> str:
        score = self.overall_score
        if score >= 60:
            return "BULLISH"
        if score <= 40:
            return "BEARISH"
        return "NEUTRAL"

    @property
    def failed_platforms(self) -> list[str]:
        return [p.platform for p in self.platforms if p.is_default]

    def to_dict(self) -> dict[str, Any]:
        return {
            "coin_id": self.coin_id,
            "overall_score": self.overall_score,
            "trend": self.trend,
            "platforms": [p.to_dict() for p in self.platforms],
            "fetched_at": self.fetched_at.isoformat(),
        }
