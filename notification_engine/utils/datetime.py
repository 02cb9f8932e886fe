"""Timezone helpers shared by storage, quiet hours and retention."""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notification_engine.config import get_settings

_FIXED_OFFSET: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


def parse_timezone(name: str | None) -> tzinfo:
    """Return the tzinfo for an IANA name or a ``UTC+HH:MM`` style offset.

    Blank or unknown names resolve to UTC.
    """

    name = (name or "").strip()
    if not name:
        return timezone.utc
    match = _FIXED_OFFSET.match(name)
    if match:
        offset = timedelta(
            hours=int(match.group("hours")), minutes=int(match.group("minutes") or 0)
        )
        return timezone(-offset if match.group("sign") == "-" else offset)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the timezone configured through ``APP_TIMEZONE``."""

    return parse_timezone(get_settings().app_timezone)


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the app timezone; naive values are assumed local."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return the local wall-clock value stored in naive ``DATETIME`` columns."""

    localized = ensure_app_timezone(value)
    return localized.replace(tzinfo=None) if localized is not None else None


def now_in_app_naive_datetime() -> datetime:
    return now_in_app_timezone().replace(tzinfo=None)


def app_local_time(value: datetime) -> time:
    """Return the wall-clock time of ``value`` in the app timezone."""

    return ensure_app_timezone(value).time()
