"""
cryptoscope - Multi-source crypto market data with ranked advisory recommendations.
"""

__version__ = "0.1.0"
