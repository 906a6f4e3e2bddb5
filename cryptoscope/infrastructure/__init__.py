"""
Infrastructure layer - Configuration and logging.
"""

from cryptoscope.infrastructure.config import Settings, get_settings
from cryptoscope.infrastructure.logging import get_logger, setup_logging

__all__ = ["Settings", "get_settings", "get_logger", "setup_logging"]
