from __future__ import annotations

"""
core/date_range.py — разбор диапазона дат из чата.

Формат: ``DD.MM.YY - DD.MM.YY``, любая сторона может быть пустой
(открытая граница):

    01.01.24 - 31.12.24
    01.01.24 -
    - 31.12.24

Все метки времени создаются в одной опорной зоне (REPORT_TZ), в ней же
сравниваются и форматируются. Начало диапазона — 00:00:00, конец —
23:59:59 соответствующего дня.
"""

import re
from datetime import datetime, timezone, tzinfo
from typing import Optional

from core.types_report import DateRange

_DATE_RE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{2})$")

SEPARATOR = "-"


def _to_full_year(year: int) -> int:
    return 2000 + year if year < 100 else year


def parse_date_token(token: str, tz: tzinfo = timezone.utc, end_of_day: bool = False) -> Optional[datetime]:
    """Parse one ``DD.MM.YY`` token; None if it does not match or is not a real date."""
    m = _DATE_RE.match((token or "").strip())
    if not m:
        return None
    day, month, year = (int(x) for x in m.groups())
    try:
        if end_of_day:
            return datetime(_to_full_year(year), month, day, 23, 59, 59, tzinfo=tz)
        return datetime(_to_full_year(year), month, day, 0, 0, 0, tzinfo=tz)
    except ValueError:
        # 31.02.24, 00.13.24 и т.п.
        return None


def parse_date_range(text: str, tz: tzinfo = timezone.utc) -> DateRange:
    """
    Returns DateRange(start, end). Both bounds are None on failure:
    separator count other than one, both sides blank, or any non-blank
    side that is not a valid date.
    """
    raw = (text or "").strip()
    if raw.count(SEPARATOR) != 1:
        return DateRange()

    left, right = (part.strip() for part in raw.split(SEPARATOR))
    if not left and not right:
        return DateRange()

    start = parse_date_token(left, tz) if left else None
    end = parse_date_token(right, tz, end_of_day=True) if right else None

    if left and start is None:
        return DateRange()
    if right and end is None:
        return DateRange()
    return DateRange(start=start, end=end)
