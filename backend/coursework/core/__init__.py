"""
Core package initialization.
"""

from coursework.core.config import get_config, load_config, AppConfig
from coursework.core.logging import setup_logging, get_logger

__all__ = [
    "get_config",
    "load_config",
    "AppConfig",
    "setup_logging",
    "get_logger",
]
