"""
Adapters - External market data and sentiment integrations.
"""
