"""Menu sync client: keeps a local copy of the weekly menu and autosaves edits.

Edits are applied to the local copy at once. Saving is debounced per field:
each (date, meal type) key has its own timer, restarted by every edit to that
key, and when it fires the *whole* local menu is posted to the service.

Posts are serialized (one request in flight at a time) and the document is
snapshotted only when its turn comes, so a later post always carries every
earlier edit and the newest text of a field is never overwritten by an
older request landing last.

All methods must be called from the event loop that drives the client.
"""
from __future__ import annotations
import asyncio
import datetime as dt
import logging
from collections import defaultdict
from typing import Dict, Optional, Set, Union

import httpx
from pydantic import ValidationError

from weekmenu.client.save_status import FieldKey, SaveState, SaveStatus, SaveStatusBoard
from weekmenu.domain.WeeklyMenu import DayMenu, MealType, WeeklyMenu
from weekmenu.events.Event_Bus import EventBus, GLOBAL_EVENT_BUS, MENU_LOADED, MENU_LOAD_FAILED
from weekmenu.logic.menu.stats import day_completion, week_completion
from weekmenu.logic.menu.week import Clock, default_clock, today
from weekmenu.utilities.config import HTTP_TIMEOUT_SECONDS, SAVE_DEBOUNCE_SECONDS, STATUS_CLEAR_SECONDS
from weekmenu.utilities.constants import ERROR_MESSAGE, SAVED_MESSAGE
from weekmenu.utilities.exceptions import MenuError, NetworkFailure, ParseFailure

logger = logging.getLogger(__name__)


class MenuSyncClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http: Optional[httpx.AsyncClient] = None,
        menu_path: str = "/api/menu",
        quiet_period: float = SAVE_DEBOUNCE_SECONDS,
        clear_delay: float = STATUS_CLEAR_SECONDS,
        clock: Optional[Clock] = None,
        bus: EventBus = GLOBAL_EVENT_BUS,
    ):
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=base_url, timeout=HTTP_TIMEOUT_SECONDS)
        self.menu_path = menu_path
        self.quiet_period = quiet_period
        self.clock = clock or default_clock()
        self.bus = bus
        self.statuses = SaveStatusBoard(clear_delay, bus)

        self.menu: Optional[WeeklyMenu] = None
        self.load_error: Optional[MenuError] = None

        self._save_timers: Dict[FieldKey, asyncio.TimerHandle] = {}
        self._generations: Dict[FieldKey, int] = defaultdict(int)
        self._inflight: Set[asyncio.Task] = set()
        self._send_lock = asyncio.Lock()

    async def __aenter__(self) -> "MenuSyncClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -------------------- Loading --------------------
    @property
    def retry_available(self) -> bool:
        """True after a failed load; the caller decides when to call load() again."""
        return self.load_error is not None

    async def load(self) -> WeeklyMenu:
        """Fetch the current menu and replace the local copy wholesale.

        Edits still waiting for their debounce timer are sent first, so a
        reload never discards unsaved text. Raises NetworkFailure or
        ParseFailure; nothing is retried.
        """
        await self.flush()
        try:
            response = await self._http.get(self.menu_path)
        except httpx.HTTPError as e:
            raise self._load_failed(NetworkFailure(f"Could not reach menu service: {e}")) from e
        if response.is_error:
            raise self._load_failed(NetworkFailure(
                f"Menu service answered HTTP {response.status_code}", status_code=response.status_code
            ))
        try:
            menu = WeeklyMenu.from_document(response.json())
        except (ValueError, ValidationError) as e:
            raise self._load_failed(ParseFailure(f"Unexpected menu body: {e}")) from e

        self.menu = menu
        self.load_error = None
        logger.info("Loaded menu for week %s", menu.week_start.isoformat())
        self.bus.publish(MENU_LOADED, {"menu": menu})
        return menu

    def _load_failed(self, error: MenuError) -> MenuError:
        self.load_error = error
        logger.warning("Menu load failed: %s", error.message)
        self.bus.publish(MENU_LOAD_FAILED, {"error": error, "retry_available": True})
        return error

    # -------------------- Editing --------------------
    def edit_field(self, date: Union[dt.date, str], meal_type: Union[MealType, str], text: str) -> None:
        """Apply an edit locally and (re)start the save timer for that field."""
        if self.menu is None:
            raise RuntimeError("Menu is not loaded")
        key = FieldKey.of(date, meal_type)
        self.menu = self.menu.with_meal(key.date, key.meal_type, text)
        self._generations[key] += 1
        self.statuses.set(key, SaveStatus(SaveState.SAVING))

        pending = self._save_timers.pop(key, None)
        if pending is not None:
            pending.cancel()
        loop = asyncio.get_running_loop()
        self._save_timers[key] = loop.call_later(self.quiet_period, self._fire, key)

    def status(self, date: Union[dt.date, str], meal_type: Union[MealType, str]) -> SaveStatus:
        return self.statuses.get(FieldKey.of(date, meal_type))

    def _fire(self, key: FieldKey) -> None:
        self._save_timers.pop(key, None)
        task = asyncio.get_running_loop().create_task(self._save_field(key, self._generations[key]))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _save_field(self, key: FieldKey, generation: int) -> None:
        try:
            async with self._send_lock:
                await self.save()
            status = SaveStatus(SaveState.SAVED, SAVED_MESSAGE)
        except MenuError as e:
            logger.warning("Saving %s %s failed: %s", key.date.isoformat(), key.meal_type.value, e.message)
            status = SaveStatus(SaveState.ERROR, ERROR_MESSAGE)

        if self._generations[key] != generation:
            # edited again after this save started; the newer timer reports
            logger.debug("Status for %s superseded by a newer edit", key)
            return
        self.statuses.set(key, status, auto_clear=True)

    async def save(self, menu: Optional[WeeklyMenu] = None) -> None:
        """POST a whole menu (the current local copy by default) to the service."""
        menu = menu or self.menu
        if menu is None:
            raise RuntimeError("Menu is not loaded")
        try:
            response = await self._http.post(self.menu_path, json=menu.to_document())
        except httpx.HTTPError as e:
            raise NetworkFailure(f"Could not reach menu service: {e}") from e
        if response.is_error:
            raise NetworkFailure(f"Menu service answered HTTP {response.status_code}",
                                 status_code=response.status_code)
        try:
            body = response.json()
        except ValueError as e:
            raise ParseFailure("Save response is not JSON") from e
        if not isinstance(body, dict) or body.get("success") is not True:
            raise ParseFailure(f"Unexpected save response: {body!r}")

    # -------------------- Presentation helpers --------------------
    def is_today(self, date: Union[dt.date, str]) -> bool:
        if isinstance(date, str):
            date = dt.date.fromisoformat(date)
        return date == today(self.clock)

    def completion(self) -> Dict[str, int]:
        if self.menu is None:
            return {"completed": 0, "total": 0, "percentage": 0}
        return week_completion(self.menu)

    def day_completion(self, day: DayMenu) -> Dict[str, int]:
        return day_completion(day)

    # -------------------- Lifecycle --------------------
    @property
    def pending_fields(self) -> Set[FieldKey]:
        return set(self._save_timers)

    async def wait_idle(self) -> None:
        """Wait until no save timer is pending and no save is in flight."""
        loop = asyncio.get_running_loop()
        while self._save_timers or self._inflight:
            if self._inflight:
                await asyncio.gather(*list(self._inflight), return_exceptions=True)
                continue
            next_due = min(handle.when() for handle in self._save_timers.values())
            await asyncio.sleep(max(0.0, next_due - loop.time()) + 0.001)

    async def flush(self) -> None:
        """Send every pending field now instead of waiting out its quiet period."""
        for key, handle in list(self._save_timers.items()):
            handle.cancel()
            self._fire(key)
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def aclose(self) -> None:
        """Drop pending saves, let in-flight ones finish, close owned resources."""
        for handle in self._save_timers.values():
            handle.cancel()
        self._save_timers.clear()
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
        self.statuses.cancel_all()
        if self._owns_http:
            await self._http.aclose()
