from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from weekmenu.infra.KV_Store import KVStore
from weekmenu.logic.menu.week import Clock, current_week_start, default_clock, empty_menu_document, to_iso
from weekmenu.utilities.config import MENU_KEY
from weekmenu.utilities.validators import validate_menu_shape

logger = logging.getLogger(__name__)


class MenuStoreService:
    """Owns the single canonical weekly menu record kept under a fixed key."""

    def __init__(self, store: KVStore, key: str = MENU_KEY, clock: Optional[Clock] = None):
        self.store = store
        self.key = key
        self.clock = clock or default_clock()

    def fetch_current_menu(self) -> Dict[str, Any]:
        """Return the stored menu, rolling over to a fresh week when it is stale.

        Not read-only: when nothing is stored yet, or the stored weekStart is not
        this week's Monday, an empty menu for the current week is written first.
        StorageUnavailable from the store propagates unchanged.
        """
        current = to_iso(current_week_start(self.clock))
        menu = self.store.get(self.key)
        if isinstance(menu, dict) and menu.get("weekStart") == current:
            return menu

        if menu is None:
            logger.info("No menu stored under %s; creating week %s", self.key, current)
        else:
            stale = menu.get("weekStart") if isinstance(menu, dict) else None
            logger.info("Rolling menu over from week %s to %s", stale, current)
        fresh = empty_menu_document(current_week_start(self.clock))
        self.store.set(self.key, fresh)
        return fresh

    def replace_menu(self, candidate: Any) -> bool:
        """Overwrite the stored record with candidate, verbatim.

        Raises InvalidMenuShape for a malformed document and StorageUnavailable
        when the write fails; nothing is retried.
        """
        validate_menu_shape(candidate)
        self.store.set(self.key, candidate)
        logger.debug("Stored menu for week %s", candidate.get("weekStart"))
        return True
