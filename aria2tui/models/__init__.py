"""
Data Models Layer.

This package contains the field registry and the Pydantic models that define the
core data structures used throughout the application, such as the aria2c options
and history entries.
"""

from .config import Aria2Config
from .history import HistoryEntry, RunStatus
from .settings import AppSettings

__all__ = ["AppSettings", "Aria2Config", "HistoryEntry", "RunStatus"]
