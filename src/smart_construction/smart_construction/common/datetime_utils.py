from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Optional, Union

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch it easier.
    """
    return datetime.now()


def month_range(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def year_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def format_write_date(value: Union[date, datetime, str]) -> str:
    """세금계산서 작성일자 (YYYYMMDD)."""
    if isinstance(value, str):
        value = parse_iso_date(value[:10])
    return value.strftime("%Y%m%d")


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    n = abs(int(number))
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def epoch_millis(now: Optional[datetime] = None) -> int:
    return int((now or now_local()).timestamp() * 1000)


def generate_code(prefix: str, now: Optional[datetime] = None) -> str:
    """Short master-data code like `SITE-K3F9QZ`."""
    seed = to_base36(epoch_millis(now))
    return f"{prefix}-{seed[-6:]}"
