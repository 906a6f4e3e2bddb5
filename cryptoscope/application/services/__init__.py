"""
Application services - Failover, filtering, scoring and ranking.
"""
