"""
Error classification for execution import and trade storage.

This module provides the structured exception hierarchy for failures
encountered while importing broker exports and persisting trade data.
"""

from .import_errors import (
    ImportDataError,
    FormatUndetectedError,
    NoRecordsParsedError,
    MalformedRowError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
)

__all__ = [
    # Import Errors
    "ImportDataError",
    "FormatUndetectedError",
    "NoRecordsParsedError",
    "MalformedRowError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
]
