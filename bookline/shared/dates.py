"""Date helpers: naive-UTC storage, month boundaries and ISO rendering"""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

UTC = timezone.utc


def utc_now() -> datetime:
    """Current time as a naive UTC datetime (the storage convention for all DateTime columns)"""
    return datetime.now(UTC).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime, or convert an aware one to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_naive_utc(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)


def start_of_month(value: Optional[datetime] = None) -> datetime:
    """First instant of the UTC month containing ``value`` (naive UTC)"""
    value = to_naive_utc(value) if value else utc_now()
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def end_of_month(value: Optional[datetime] = None) -> datetime:
    """Last millisecond of the UTC month containing ``value`` (naive UTC)"""
    return start_of_month(value) + relativedelta(months=1) - timedelta(milliseconds=1)


def get_zone(name: str) -> tzinfo:
    """Resolve an IANA zone name; raises ValueError for unknown zones"""
    if not name:
        raise ValueError("Empty time zone")
    if name.upper() in ("UTC", "Z"):
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone: {name}") from e


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 string; naive values are taken as UTC"""
    return as_utc(isoparse(value))


def to_iso(value: datetime, zone: Optional[tzinfo] = None) -> str:
    """
    Render ``value`` as ISO-8601 with millisecond precision.

    The UTC zone renders as ``Z``; every other zone renders its offset,
    e.g. ``2024-09-04T11:00:00.000+02:00``.
    """
    zone = zone or UTC
    local = as_utc(value).astimezone(zone)
    body = local.strftime("%Y-%m-%dT%H:%M:%S") + f".{local.microsecond // 1000:03d}"
    if zone is UTC:
        return body + "Z"
    offset = local.utcoffset() or timedelta(0)
    minutes = int(offset.total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{body}{sign}{minutes // 60:02d}:{minutes % 60:02d}"
