"""Calendar helpers shared by the menu service and the sync client.

There is exactly one definition of "current week" in the project:
``week_start`` applied to ``now`` in the configured ``MENU_TIMEZONE``.
The server rollover check and the client "is today" highlight both go
through this module so they cannot disagree.
"""
from __future__ import annotations
from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, List, Optional, Union
from zoneinfo import ZoneInfo

from weekmenu.utilities.config import MENU_TIMEZONE
from weekmenu.utilities.constants import DAY_NAMES, DAYS_PER_WEEK, ISO_DATE_FORMAT

Clock = Callable[[], datetime]


def get_zone(name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(name or MENU_TIMEZONE)


def default_clock(tz_name: Optional[str] = None) -> Clock:
    """Return a clock reading wall time in the given (or configured) zone."""
    zone = get_zone(tz_name)
    return lambda: datetime.now(zone)


def week_start(moment: Union[date, datetime]) -> datetime:
    """Return midnight of the Monday of the week containing ``moment``.

    Sunday belongs to the week that started six days earlier. The result
    keeps the tzinfo of ``moment`` (plain dates give a naive datetime), and
    the function is idempotent: ``week_start(week_start(x)) == week_start(x)``.
    """
    if not isinstance(moment, datetime):
        moment = datetime.combine(moment, time.min)
    monday = moment - timedelta(days=moment.isoweekday() - 1)
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def current_week_start(clock: Clock) -> date:
    return week_start(clock()).date()


def today(clock: Clock) -> date:
    return clock().date()


def to_iso(d: date) -> str:
    return d.strftime(ISO_DATE_FORMAT)


def day_name(d: date) -> str:
    return DAY_NAMES[d.isoweekday() - 1]


def display_date(d: date) -> str:
    # 1-based month, no leading zeros: 7/8
    return f"{d.month}/{d.day}"


def week_dates(start: date) -> List[date]:
    return [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def empty_menu_document(start: date) -> Dict:
    """Build a fresh weekly menu (wire format) with every meal unplanned."""
    days = []
    for i, d in enumerate(week_dates(start)):
        days.append({
            "date": to_iso(d),
            "dayName": DAY_NAMES[i],
            "displayDate": display_date(d),
            "meals": {"lunch": "", "dinner": ""},
        })
    return {"weekStart": to_iso(start), "days": days}


__all__ = [
    'Clock', 'get_zone', 'default_clock', 'week_start', 'current_week_start', 'today',
    'to_iso', 'day_name', 'display_date', 'week_dates', 'empty_menu_document'
]
