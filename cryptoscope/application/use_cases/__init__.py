"""
Use cases.
"""
