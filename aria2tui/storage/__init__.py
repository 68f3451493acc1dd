"""
Storage Layer.

This package handles all data persistence: the JSON configuration file and the
run history.
"""

from .config_manager import ConfigManager
from .history import HistoryLedger

__all__ = ["ConfigManager", "HistoryLedger"]
