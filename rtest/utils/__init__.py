"""
rtest Utilities Package.

Configuration and logging shared across all modules.
Requires Python 3.11+.
"""

from rtest.utils.config import RunConfig, Settings, get_settings
from rtest.utils.logger import configure_logging, get_logger, LoggerMixin

__all__ = [
    "RunConfig",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
]
