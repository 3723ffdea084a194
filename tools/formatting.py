from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Optional, Tuple


def to_zone(dt: datetime, tz: tzinfo = timezone.utc) -> datetime:
    # naive timestamps from the stores are UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def fmt_date(dt: datetime, tz: tzinfo = timezone.utc) -> str:
    return to_zone(dt, tz).strftime("%d.%m.%y")


def fmt_time(dt: datetime, tz: tzinfo = timezone.utc) -> str:
    return to_zone(dt, tz).strftime("%H:%M:%S")


def fmt_date_time(dt: Optional[datetime], tz: tzinfo = timezone.utc) -> Tuple[str, str]:
    if dt is None:
        return "", ""
    return fmt_date(dt, tz), fmt_time(dt, tz)


def fmt_stamp(dt: Optional[datetime], tz: tzinfo = timezone.utc) -> str:
    d, t = fmt_date_time(dt, tz)
    return f"{d} {t}".strip()


def report_file_name(prefix: str, generated_at: datetime, tz: tzinfo = timezone.utc, ext: str = "xlsx") -> str:
    """<prefix>_<HH-MM-SS>_<DD.MM.YY>.<ext>"""
    d, t = fmt_date_time(generated_at, tz)
    return f"{prefix}_{t.replace(':', '-')}_{d}.{ext}"
