"""
Configuration for the timber marketplace.
"""

from .config_manager import ConfigManager, MarketSettings, get_config_manager, reset_config_manager

__all__ = ["ConfigManager", "MarketSettings", "get_config_manager", "reset_config_manager"]
