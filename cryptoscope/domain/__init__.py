"""
Domain layer - Entities, ports and errors.
"""
