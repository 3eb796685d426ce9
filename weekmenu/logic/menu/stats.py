"""Planning progress for a weekly menu (meals filled in vs. slots available)."""
from __future__ import annotations
from typing import Dict

from weekmenu.domain.WeeklyMenu import DayMenu, MealType, WeeklyMenu


def _filled(day: DayMenu) -> int:
    return sum(1 for meal_type in MealType if day.meal(meal_type))


def day_completion(day: DayMenu) -> Dict[str, int]:
    total = len(MealType)
    completed = _filled(day)
    return {"completed": completed, "total": total, "percentage": round(completed * 100 / total)}


def week_completion(menu: WeeklyMenu) -> Dict[str, int]:
    total = len(menu.days) * len(MealType)
    completed = sum(_filled(day) for day in menu.days)
    percentage = round(completed * 100 / total) if total else 0
    return {"completed": completed, "total": total, "percentage": percentage}
