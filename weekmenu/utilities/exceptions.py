"""
Exception hierarchy for the weekly menu service and its sync client.

Server side:
  - StorageUnavailable: the key-value backend could not be read or written
  - InvalidMenuShape: a submitted document is not a 7-day weekly menu

Client side:
  - NetworkFailure: the call to the menu service failed or returned non-2xx
  - ParseFailure: the service answered with a body that is not a weekly menu
"""
from typing import Any, Dict, Optional


class MenuError(Exception):
    """Base class for all weekly menu errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class StorageUnavailable(MenuError):
    """Key-value backend unreachable or failing."""
    pass


class InvalidMenuShape(MenuError):
    """Menu document is missing weekStart or does not hold exactly 7 days."""
    pass


class NetworkFailure(MenuError):
    """Client-to-service call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class ParseFailure(MenuError):
    """Unexpected response body."""
    pass
