from __future__ import annotations

from datetime import UTC, datetime, time
import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


DEFAULT_TIMEZONE_NAME = "America/Sao_Paulo"
HHMM_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def resolve_timezone(name: str | None) -> ZoneInfo:
    value = (name or "").strip() or DEFAULT_TIMEZONE_NAME
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone {value!r}") from exc


def is_hhmm_shape(value: str | None) -> bool:
    return bool(HHMM_PATTERN.match(value or ""))


def parse_hhmm(value: str | None) -> time | None:
    """Parse a strict ``HH:MM`` string; None for bad shape or out-of-range parts."""
    raw = (value or "").strip()
    if not is_hhmm_shape(raw):
        return None
    hours, minutes = (int(part) for part in raw.split(":"))
    if hours > 23 or minutes > 59:
        return None
    return time(hour=hours, minute=minutes)


def utc_now() -> datetime:
    return datetime.now(UTC)


def now_millis() -> int:
    return int(utc_now().timestamp() * 1000)
