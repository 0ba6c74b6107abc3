"""
Utilities Module
================

Shared plumbing:
- logger: context-aware logging
- config: environment-driven settings
"""

from aigent.utils.logger import Logger, logger
from aigent.utils.config import get_config, Settings

__all__ = ["Logger", "logger", "get_config", "Settings"]
