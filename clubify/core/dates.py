import math
from datetime import date, datetime, timedelta
from typing import Iterator
from zoneinfo import ZoneInfo

from clubify.core.config import CLUB_TIMEZONE, PAYMENT_DUE_DAY


def local_today() -> date:
    """Current calendar date in the club's timezone"""
    return datetime.now(ZoneInfo(CLUB_TIMEZONE)).date()


def js_weekday(date_obj: date) -> int:
    """Weekday numbered 0=Sunday .. 6=Saturday"""
    return (date_obj.weekday() + 1) % 7


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every date from start through end, inclusive"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def period_start(year: int, month: int) -> date:
    return date(year, month, 1)


def payment_due_date(year: int, month: int) -> date:
    return date(year, month, PAYMENT_DUE_DAY)


def round_half_up(value: float) -> int:
    # .5 always rounds towards +infinity, unlike round()
    return int(math.floor(value + 0.5))


def round_to_tenth(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10
