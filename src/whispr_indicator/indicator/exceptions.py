"""Custom exceptions for indicator operations.

Reading the shared state documents never raises; these cover the failures that
do need to travel: watch setup and configuration loading.
"""


class IndicatorError(Exception):
    """Base exception for all indicator errors."""


class WatchError(IndicatorError):
    """Raised when directory observation cannot be established."""


class ConfigError(IndicatorError):
    """Raised when configuration is invalid or cannot be loaded."""
