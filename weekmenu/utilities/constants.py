from typing import Final

MENU_KEY: Final[str] = "menu:current"
ISO_DATE_FORMAT: Final[str] = "%Y-%m-%d"
DAY_NAMES: Final[tuple[str, ...]] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
DAYS_PER_WEEK: Final[int] = len(DAY_NAMES)
MEAL_TYPES: Final[tuple[str, ...]] = ("lunch", "dinner")

# Client-side save status texts
SAVED_MESSAGE: Final[str] = "Saved ✓"
ERROR_MESSAGE: Final[str] = "Error saving"

# API error bodies
INVALID_MENU_MESSAGE: Final[str] = "Invalid menu structure"
FETCH_FAILED_MESSAGE: Final[str] = "Failed to fetch menu"
SAVE_FAILED_MESSAGE: Final[str] = "Failed to save menu"
