"""
Application layer - Services and use cases.
"""
