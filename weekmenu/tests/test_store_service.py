import copy
import unittest
from datetime import datetime
from zoneinfo import ZoneInfo

from weekmenu.infra.KV_Store import KVStore, MemoryKVStore
from weekmenu.logic.menu.store_service import MenuStoreService
from weekmenu.logic.menu.week import empty_menu_document, week_start
from weekmenu.utilities.constants import MENU_KEY
from weekmenu.utilities.exceptions import InvalidMenuShape, StorageUnavailable

UTC = ZoneInfo("UTC")


class BrokenStore(KVStore):
    def __init__(self):
        self.writes = 0

    def get(self, key):
        raise StorageUnavailable("backend down")

    def set(self, key, value):
        self.writes += 1
        raise StorageUnavailable("backend down")


class MutableClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class TestMenuStoreService(unittest.TestCase):
    def setUp(self):
        self.clock = MutableClock(datetime(2024, 7, 10, 9, 0, tzinfo=UTC))
        self.store = MemoryKVStore()
        self.service = MenuStoreService(self.store, clock=self.clock)

    def _week_doc(self):
        return empty_menu_document(week_start(self.clock()).date())

    def test_first_fetch_creates_and_persists_week(self):
        self.assertIsNone(self.store.get(MENU_KEY))
        menu = self.service.fetch_current_menu()
        self.assertEqual(menu["weekStart"], "2024-07-08")
        self.assertEqual(self.store.get(MENU_KEY), menu)

    def test_two_fetches_same_week_are_identical(self):
        first = self.service.fetch_current_menu()
        self.clock.now = datetime(2024, 7, 14, 23, 59, tzinfo=UTC)
        second = self.service.fetch_current_menu()
        self.assertEqual(first, second)

    def test_rollover_to_new_week(self):
        doc = self._week_doc()
        doc["days"][0]["meals"]["lunch"] = "Leftovers"
        self.service.replace_menu(doc)

        self.clock.now = datetime(2024, 7, 16, 8, 0, tzinfo=UTC)
        menu = self.service.fetch_current_menu()
        self.assertEqual(menu["weekStart"], "2024-07-15")
        self.assertTrue(all(d["meals"] == {"lunch": "", "dinner": ""} for d in menu["days"]))
        self.assertEqual(self.store.get(MENU_KEY)["weekStart"], "2024-07-15")

    def test_corrupt_record_is_rolled_over(self):
        self.store.set(MENU_KEY, ["not", "a", "menu"])
        self.assertEqual(self.service.fetch_current_menu()["weekStart"], "2024-07-08")

    def test_replace_rejects_wrong_day_counts(self):
        doc = self._week_doc()
        for days in (doc["days"][:6], doc["days"] + [copy.deepcopy(doc["days"][0])]):
            with self.assertRaises(InvalidMenuShape):
                self.service.replace_menu({"weekStart": doc["weekStart"], "days": days})
        self.assertIsNone(self.store.get(MENU_KEY))

    def test_replace_rejects_missing_week_start_and_non_objects(self):
        doc = self._week_doc()
        del doc["weekStart"]
        for candidate in (doc, None, [], "menu"):
            with self.assertRaises(InvalidMenuShape):
                self.service.replace_menu(candidate)

    def test_round_trip(self):
        doc = self._week_doc()
        doc["days"][3]["meals"]["dinner"] = "Tacos"
        self.assertTrue(self.service.replace_menu(doc))
        self.assertEqual(self.service.fetch_current_menu(), doc)

    def test_replace_stores_verbatim_without_week_check(self):
        doc = empty_menu_document(week_start(datetime(2024, 1, 3)).date())
        doc["extra"] = {"note": "kept"}
        self.service.replace_menu(doc)
        self.assertEqual(self.store.get(MENU_KEY), doc)

    def test_storage_down_is_not_masked(self):
        broken = BrokenStore()
        service = MenuStoreService(broken, clock=self.clock)
        with self.assertRaises(StorageUnavailable):
            service.fetch_current_menu()
        self.assertEqual(broken.writes, 0)
        with self.assertRaises(StorageUnavailable):
            service.replace_menu(self._week_doc())


if __name__ == '__main__':
    unittest.main()
