# mc_core/common/timeutils.py
from __future__ import annotations

from datetime import datetime


def to_24_hour(time_str: str) -> str:
    """
    Normalise an appointment time to zero-padded 24-hour "HH:MM".

    Accepts "14:30", "9:05", "2:30 PM", "12:15 AM". Noon and midnight:
    12:xx AM -> 00:xx, 12:xx PM stays 12:xx.
    """
    value = (time_str or "").strip()
    upper = value.upper()

    if upper.endswith("AM") or upper.endswith("PM"):
        modifier = upper[-2:]
        clock = upper[:-2].strip()
        hours, _, minutes = clock.partition(":")
        hour = int(hours)
        if hour == 12:
            hour = 0
        if modifier == "PM":
            hour += 12
        return f"{hour:02d}:{(minutes or '00')[:2].zfill(2)}"

    hours, _, minutes = value.partition(":")
    return f"{int(hours):02d}:{(minutes or '00')[:2].zfill(2)}"


def to_12_hour(time_str: str) -> str:
    value = (time_str or "").strip()
    upper = value.upper()
    if upper.endswith("AM") or upper.endswith("PM"):
        return value

    hours, _, minutes = value.partition(":")
    hour = int(hours)
    minutes = (minutes or "00")[:2].zfill(2)
    if hour == 0:
        return f"12:{minutes} AM"
    if hour < 12:
        return f"{hour}:{minutes} AM"
    if hour == 12:
        return f"12:{minutes} PM"
    return f"{hour - 12}:{minutes} PM"


def slot_key(date_str: str, time_str: str) -> tuple[str, str]:
    """
    Sort/compare key for (YYYY-MM-DD, time). Lexicographic on both parts.
    """
    return (date_str, to_24_hour(time_str))


def now_key(now: datetime) -> tuple[str, str]:
    return (now.strftime("%Y-%m-%d"), now.strftime("%H:%M"))
