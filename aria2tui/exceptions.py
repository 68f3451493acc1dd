"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class Aria2TuiError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(Aria2TuiError):
    """Raised when the configuration file cannot be written or a value is rejected."""


class HistoryError(Aria2TuiError):
    """Raised when the run history cannot be persisted."""


class InvalidValueError(Aria2TuiError):
    """Raised when text typed into a field cannot be coerced to the field's kind."""


class TerminalError(Aria2TuiError):
    """
    Raised when no interactive terminal is available or it cannot be switched to
    raw input mode.
    """
