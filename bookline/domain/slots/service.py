"""Slot services - response shaping for slots and reservations"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...enums import SlotFormat
from ...models import SelectedSlot
from ...shared.dates import UTC, as_utc, get_zone, parse_iso, to_iso
from .repository import EventTypeRepository
from .schemas import GetReservedSlotOutput, RangeSlot, RangeSlotsOutput, ReserveSlotOutput, SlotsOutput

logger = logging.getLogger(__name__)

# {"slots": {"2024-09-04": [{"time": "2024-09-04T09:00:00.000Z"}, ...]}}
AvailableSlots = dict[str, dict[str, list[dict[str, str]]]]


def _iso_or(value: Optional[datetime], fallback: str) -> str:
    return to_iso(value, UTC) if value else fallback


def _duration_minutes(start: Optional[datetime], end: Optional[datetime]) -> int:
    if not start or not end:
        return 0
    return int((as_utc(end) - as_utc(start)).total_seconds() // 60)


class SlotsOutputService:
    """Formats precomputed slots and reservations for API responses"""

    def __init__(self, db: Session):
        self.db = db
        self.event_types = EventTypeRepository()

    def get_output_slot(self, slot: SelectedSlot) -> GetReservedSlotOutput:
        return GetReservedSlotOutput(
            eventTypeId=slot.event_type_id,
            slotStart=_iso_or(slot.slot_utc_start_date, "unknown-slot-start"),
            slotEnd=_iso_or(slot.slot_utc_end_date, "unknown-slot-end"),
            slotDuration=_duration_minutes(slot.slot_utc_start_date, slot.slot_utc_end_date),
            reservationUid=slot.uid,
            reservationUntil=_iso_or(slot.release_at, "unknown-reserved-until"),
        )

    def get_output_reserved_slot(
        self, slot: SelectedSlot, reservation_duration: int
    ) -> ReserveSlotOutput:
        return ReserveSlotOutput(
            **self.get_output_slot(slot).model_dump(),
            reservationDuration=reservation_duration,
        )

    def get_output_slots(
        self,
        available_slots: AvailableSlots,
        duration: Optional[int] = None,
        event_type_id: Optional[int] = None,
        format: Optional[SlotFormat] = None,
        time_zone: Optional[str] = None,
    ) -> Union[SlotsOutput, RangeSlotsOutput]:
        """Shape available slots as start times (default) or start/end ranges"""
        if not format or format == SlotFormat.Time:
            return self._get_time_slots(available_slots, time_zone)

        return self._get_range_slots(available_slots, duration, event_type_id, time_zone)

    def _get_time_slots(self, available_slots: AvailableSlots, time_zone: Optional[str]) -> SlotsOutput:
        slots: SlotsOutput = {}
        for date, date_slots in available_slots["slots"].items():
            if not time_zone:
                slots[date] = [slot["time"] for slot in date_slots]
                continue
            slots[date] = [self._adjust(slot["time"], time_zone) for slot in date_slots]
        return slots

    def _get_range_slots(
        self,
        available_slots: AvailableSlots,
        duration: Optional[int],
        event_type_id: Optional[int],
        time_zone: Optional[str],
    ) -> RangeSlotsOutput:
        slot_duration = self._get_duration(duration, event_type_id)

        slots: RangeSlotsOutput = {}
        for date, date_slots in available_slots["slots"].items():
            ranges = []
            for slot in date_slots:
                if time_zone:
                    start = self._adjust(slot["time"], time_zone)
                    end = self._adjust(
                        slot["time"],
                        time_zone,
                        plus_minutes=slot_duration,
                        error=f"Could not adjust timezone for slot end time {slot['time']} with timezone {time_zone}",
                    )
                else:
                    try:
                        start_utc = parse_iso(slot["time"])
                    except (ValueError, OverflowError) as e:
                        raise HTTPException(
                            status_code=400, detail=f"Could not create UTC time for slot {slot['time']}"
                        ) from e
                    start = to_iso(start_utc, UTC)
                    end = to_iso(start_utc + timedelta(minutes=slot_duration), UTC)
                ranges.append(RangeSlot(start=start, end=end))
            slots[date] = ranges
        return slots

    @staticmethod
    def _adjust(
        time: str, time_zone: str, plus_minutes: int = 0, error: Optional[str] = None
    ) -> str:
        """Re-zone a UTC slot time, optionally shifted by some minutes"""
        try:
            zone = get_zone(time_zone)
            value = parse_iso(time) + timedelta(minutes=plus_minutes)
            return to_iso(value, zone)
        except (ValueError, OverflowError) as e:
            message = error or f"Could not adjust timezone for slot {time} with timezone {time_zone}"
            logger.warning(f"⚠️ {message}")
            raise HTTPException(status_code=400, detail=message) from e

    def _get_duration(self, duration: Optional[int], event_type_id: Optional[int]) -> int:
        if duration:
            return duration

        if event_type_id:
            event_type = self.event_types.get_event_type_by_id(self.db, event_type_id)
            if not event_type:
                raise HTTPException(status_code=404, detail="Event type not found")
            return event_type.length

        raise HTTPException(status_code=400, detail="duration or eventTypeId is required")
