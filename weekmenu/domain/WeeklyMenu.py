"""Weekly menu domain entities: the record shared between service and client.

Wire format is camelCase JSON (weekStart, dayName, displayDate) with ISO dates;
Python code uses the snake_case attribute names.
"""
from __future__ import annotations
import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from weekmenu.logic.menu.week import day_name, display_date
from weekmenu.utilities.constants import DAYS_PER_WEEK


class MealType(str, Enum):
    LUNCH = "lunch"
    DINNER = "dinner"


class MealData(BaseModel):
    model_config = ConfigDict(frozen=True)

    lunch: str = ""
    dinner: str = ""


class DayMenu(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: dt.date
    day_name: str = Field(alias="dayName")
    display_date: str = Field(alias="displayDate")
    meals: MealData = Field(default_factory=MealData)

    @model_validator(mode="before")
    @classmethod
    def derive_labels(cls, data: Any) -> Any:
        """Fill dayName/displayDate from date when they are not supplied."""
        if isinstance(data, dict) and data.get("date") is not None:
            raw = data["date"]
            try:
                d = raw if isinstance(raw, dt.date) else dt.date.fromisoformat(str(raw))
            except ValueError:
                return data  # let field validation report the bad date
            data = dict(data)
            if not data.get("dayName") and not data.get("day_name"):
                data["dayName"] = day_name(d)
            if not data.get("displayDate") and not data.get("display_date"):
                data["displayDate"] = display_date(d)
        return data

    def meal(self, meal_type: MealType) -> str:
        return getattr(self.meals, MealType(meal_type).value)


class WeeklyMenu(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    week_start: dt.date = Field(alias="weekStart")
    days: List[DayMenu]

    @field_validator("days")
    @classmethod
    def validate_days(cls, v):
        if len(v) != DAYS_PER_WEEK:
            raise ValueError(f"A weekly menu needs exactly {DAYS_PER_WEEK} days, got {len(v)}")
        return v

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "WeeklyMenu":
        return cls.model_validate(document)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def day(self, date: dt.date) -> Optional[DayMenu]:
        for d in self.days:
            if d.date == date:
                return d
        return None

    def with_meal(self, date: dt.date, meal_type: MealType, text: str) -> "WeeklyMenu":
        """Return a copy where only the (date, meal_type) text is replaced."""
        meal_type = MealType(meal_type)
        if self.day(date) is None:
            raise KeyError(f"{date.isoformat()} is not part of the week starting {self.week_start.isoformat()}")
        days = [
            d.model_copy(update={"meals": d.meals.model_copy(update={meal_type.value: text})})
            if d.date == date else d
            for d in self.days
        ]
        return self.model_copy(update={"days": days})


__all__ = ['MealType', 'MealData', 'DayMenu', 'WeeklyMenu']
