"""Per-field save status for the sync client.

A status is created when a field is edited, settles to saved/error when the
save completes and disappears after a short delay. Each field key has at
most one pending clear timer; setting a new status for the key cancels it,
so an old clear can never wipe a newer status.
"""
from __future__ import annotations
import asyncio
import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Dict, NamedTuple, Optional, Union

from weekmenu.domain.WeeklyMenu import MealType
from weekmenu.events.Event_Bus import EventBus, MENU_SAVE_STATUS


class SaveState(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


@dataclass(frozen=True)
class SaveStatus:
    state: SaveState
    message: Optional[str] = None


IDLE = SaveStatus(SaveState.IDLE)


class FieldKey(NamedTuple):
    date: dt.date
    meal_type: MealType

    @classmethod
    def of(cls, date: Union[dt.date, str], meal_type: Union[MealType, str]) -> "FieldKey":
        if isinstance(date, str):
            date = dt.date.fromisoformat(date)
        return cls(date, MealType(meal_type))


class SaveStatusBoard:
    def __init__(self, clear_delay: float, bus: EventBus):
        self.clear_delay = clear_delay
        self.bus = bus
        self._statuses: Dict[FieldKey, SaveStatus] = {}
        self._clear_timers: Dict[FieldKey, asyncio.TimerHandle] = {}

    def get(self, key: FieldKey) -> SaveStatus:
        return self._statuses.get(key, IDLE)

    def snapshot(self) -> Dict[FieldKey, SaveStatus]:
        return dict(self._statuses)

    def set(self, key: FieldKey, status: SaveStatus, auto_clear: bool = False) -> None:
        """Record a status for key; with auto_clear it expires after clear_delay."""
        self._cancel_clear(key)
        self._statuses[key] = status
        self.bus.publish(MENU_SAVE_STATUS, {"key": key, "status": status})
        if auto_clear:
            loop = asyncio.get_running_loop()
            self._clear_timers[key] = loop.call_later(self.clear_delay, self._clear, key)

    def _clear(self, key: FieldKey) -> None:
        self._clear_timers.pop(key, None)
        if self._statuses.pop(key, None) is not None:
            self.bus.publish(MENU_SAVE_STATUS, {"key": key, "status": IDLE})

    def _cancel_clear(self, key: FieldKey) -> None:
        handle = self._clear_timers.pop(key, None)
        if handle is not None:
            handle.cancel()

    def cancel_all(self) -> None:
        for handle in self._clear_timers.values():
            handle.cancel()
        self._clear_timers.clear()
