"""In-process notifications from the menu sync client.

Event names used so far:
  menu.save_status -> payload {"key": FieldKey, "status": SaveStatus}
  menu.loaded      -> payload {"menu": WeeklyMenu}
  menu.load_failed -> payload {"error": MenuError, "retry_available": True}

Listeners are callables taking (event_name, payload). A listener registered
under ALL_EVENTS receives every event, after the listeners of that event.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]

# --- Event name constants (used across modules) ---
MENU_SAVE_STATUS = "menu.save_status"
MENU_LOADED = "menu.loaded"
MENU_LOAD_FAILED = "menu.load_failed"
ALL_EVENTS = "*"


class EventBus:
    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def subscribe(self, event_name: str, listener: Listener) -> Callable[[], None]:
        """Register listener once per event; returns a callable that removes it."""
        listeners = self._listeners.setdefault(event_name, [])
        if listener not in listeners:
            listeners.append(listener)
        return lambda: self.unsubscribe(event_name, listener)

    def unsubscribe(self, event_name: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_name, [])
        if listener in listeners:
            listeners.remove(listener)

    def publish(self, event_name: str, payload: Any = None) -> int:
        """Deliver payload to every listener; returns how many ran without error."""
        targets = list(self._listeners.get(event_name, ()))
        if event_name != ALL_EVENTS:
            targets += self._listeners.get(ALL_EVENTS, ())
        delivered = 0
        for listener in targets:
            try:
                listener(event_name, payload)
            except Exception:
                # listener errors are logged, never re-raised
                logger.exception("Listener %r failed on %s", listener, event_name)
            else:
                delivered += 1
        return delivered


# Default bus for UI layers that do not bring their own
GLOBAL_EVENT_BUS = EventBus()

__all__ = [
    'EventBus', 'GLOBAL_EVENT_BUS', 'Listener',
    'MENU_SAVE_STATUS', 'MENU_LOADED', 'MENU_LOAD_FAILED', 'ALL_EVENTS'
]
