"""
Sentiment adapters - Social and market mood readings.
"""

from cryptoscope.adapters.sentiment.social_sentiment import SocialSentimentService

__all__ = ["SocialSentimentService"]
