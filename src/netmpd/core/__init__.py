"""Core application layer.

Classes:
    ConfigManager: QSettings wrapper for configuration.
"""

from netmpd.core.config import ConfigManager

__all__ = ["ConfigManager"]
