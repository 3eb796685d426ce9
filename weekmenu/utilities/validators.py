"""
Structural checks for menu documents submitted to the service.

Only the outer shape is checked here: a present weekStart and exactly seven
day entries. Day contents are stored as submitted.
"""
from typing import Any

from weekmenu.utilities.constants import DAYS_PER_WEEK, INVALID_MENU_MESSAGE
from weekmenu.utilities.exceptions import InvalidMenuShape


def validate_menu_shape(candidate: Any) -> None:
    """Raise InvalidMenuShape unless candidate looks like a weekly menu."""
    if not isinstance(candidate, dict):
        raise InvalidMenuShape(INVALID_MENU_MESSAGE, details={"reason": "body is not an object"})
    if not candidate.get("weekStart"):
        raise InvalidMenuShape(INVALID_MENU_MESSAGE, details={"reason": "weekStart missing"})
    days = candidate.get("days")
    if not isinstance(days, list) or len(days) != DAYS_PER_WEEK:
        count = len(days) if isinstance(days, list) else None
        raise InvalidMenuShape(INVALID_MENU_MESSAGE, details={"reason": "days must hold 7 entries", "count": count})
