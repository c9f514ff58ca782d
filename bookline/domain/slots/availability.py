"""
Available slot computation.

Walks the event type's weekly working hours day by day in its own time zone,
steps through each window by the slot interval and drops slots that are in the
past or overlap a booking or an active reservation.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from ...models import EventType
from ...shared.dates import UTC, as_utc, get_zone, to_iso

DEFAULT_AVAILABILITY = {
    "timeZone": "UTC",
    "days": [0, 1, 2, 3, 4],  # Monday..Friday
    "startTime": "09:00",
    "endTime": "17:00",
}

BusyRange = tuple[datetime, datetime]


def _parse_clock(value: str) -> time:
    hours, minutes = value.split(":")[:2]
    return time(int(hours), int(minutes))


def _overlaps(start: datetime, end: datetime, busy: list[BusyRange]) -> bool:
    return any(start < busy_end and end > busy_start for busy_start, busy_end in busy)


def get_available_slots(
    event_type: EventType,
    range_start: datetime,
    range_end: datetime,
    busy: list[BusyRange],
    now: datetime,
    duration: Optional[int] = None,
    output_time_zone: Optional[str] = None,
) -> dict:
    """
    Free slots of an event type between range_start and range_end.

    Returns {"slots": {"YYYY-MM-DD": [{"time": "<UTC ISO>"}]}}, keyed by the date
    in output_time_zone (UTC when not given).
    """
    availability = {**DEFAULT_AVAILABILITY, **(event_type.availability or {})}
    zone = get_zone(availability["timeZone"])
    output_zone = get_zone(output_time_zone) if output_time_zone else UTC
    length = duration or event_type.length
    step = timedelta(minutes=event_type.slot_interval or length)
    working_days = set(availability["days"])
    window_start = _parse_clock(availability["startTime"])
    window_end = _parse_clock(availability["endTime"])

    range_start, range_end, now = as_utc(range_start), as_utc(range_end), as_utc(now)
    busy = [(as_utc(start), as_utc(end)) for start, end in busy]

    slots: dict[str, list[dict[str, str]]] = {}
    day: date = range_start.astimezone(zone).date()
    last_day: date = range_end.astimezone(zone).date()

    while day <= last_day:
        if day.weekday() in working_days:
            current = datetime.combine(day, window_start, tzinfo=zone).astimezone(UTC)
            day_end = datetime.combine(day, window_end, tzinfo=zone).astimezone(UTC)
            while current + timedelta(minutes=length) <= day_end:
                slot_end = current + timedelta(minutes=length)
                if (
                    current >= range_start
                    and current < range_end
                    and current >= now
                    and not _overlaps(current, slot_end, busy)
                ):
                    key = current.astimezone(output_zone).date().isoformat()
                    slots.setdefault(key, []).append({"time": to_iso(current, UTC)})
                current += step
        day += timedelta(days=1)

    return {"slots": slots}
